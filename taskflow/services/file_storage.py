"""
Local File Storage
------------------
Stores attachment bytes under the configured upload directory with
generated names; the client-supplied name is kept only as metadata.
"""

import os
from pathlib import Path
from typing import Tuple, Union
from uuid import uuid4

from fastapi.concurrency import run_in_threadpool
from loguru import logger

MAX_EXTENSION_LENGTH = 16


class LocalFileStorage:
    def __init__(self, upload_dir: Union[str, Path]):
        self.upload_dir = Path(upload_dir)

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """Random stored name keeping the original extension."""
        extension = os.path.splitext(os.path.basename(original_name or ""))[1]
        if len(extension) > MAX_EXTENSION_LENGTH or not extension[1:].isalnum():
            extension = ""
        return f"{uuid4().hex}{extension.lower()}"

    async def save(self, original_name: str, content: bytes) -> Tuple[str, str]:
        """
        Write ``content`` to a new file off the event loop.

        Returns:
            (stored filename, full path)
        """
        filename = self.generate_filename(original_name)
        path = self.upload_dir / filename
        await run_in_threadpool(self._write, path, content)
        logger.debug(f"Stored {len(content)} bytes at {path}")
        return filename, str(path)

    async def exists(self, path: str) -> bool:
        return await run_in_threadpool(Path(path).is_file)

    async def delete(self, path: str) -> bool:
        """Remove a file if present. Returns whether a file was removed."""
        if not await run_in_threadpool(self._unlink, Path(path)):
            return False
        logger.debug(f"Removed {path}")
        return True

    def _write(self, path: Path, content: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
