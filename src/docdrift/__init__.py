"""Documentation drift detection for Go code changes."""

__version__ = "0.1.0"
