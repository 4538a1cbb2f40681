from .client import HttpxActivityClient

__all__ = ["HttpxActivityClient"]
