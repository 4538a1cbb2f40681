from .activity import ActivitySourcePort
from .cache import CachePort
from .dispatcher import FanOutDispatcherPort, ProgressCallback
from .metadata import MetadataSourcePort
from .popular import PopularSourcePort

__all__ = [
    "ActivitySourcePort",
    "CachePort",
    "FanOutDispatcherPort",
    "MetadataSourcePort",
    "PopularSourcePort",
    "ProgressCallback",
]
