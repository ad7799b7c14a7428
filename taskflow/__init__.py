"""TaskFlow: task management backend with JWT sessions, sharing and attachments."""

__version__ = "1.0.0"
