"""
Uvicorn Startup Script
----------------------
FastAPI application startup script.
"""

import uvicorn

from taskflow.core.config_manager import settings

if __name__ == "__main__":
    uvicorn.run(
        app="taskflow.app:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
