"""In-memory task tracker with a FastAPI JSON API and a browser UI."""

__version__ = "0.1.0"
