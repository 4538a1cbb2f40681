"""starpulse - rolling GitHub star-activity rankings with cached enrichment."""

__version__ = "0.1.0"
