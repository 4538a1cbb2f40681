from .rate_limiter import TokenBucket
from .retry import RetryPolicy

__all__ = ["RetryPolicy", "TokenBucket"]
