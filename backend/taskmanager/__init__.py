"""Personal task manager: FastAPI backend and task form client."""

__version__ = "0.1.0"
