from .client import MetadataServiceSource
from .popular import HttpxPopularClient

__all__ = ["HttpxPopularClient", "MetadataServiceSource"]
