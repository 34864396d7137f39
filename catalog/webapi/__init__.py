"""FastAPI web backend for the audiobook catalog."""
