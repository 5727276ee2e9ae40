"""Task tracker: a small task-list API with a browser client."""

__version__ = "1.0.0"
