"""picture-dispatcher: sort pictures into date folders from their metadata."""

__version__ = "0.1.0"
