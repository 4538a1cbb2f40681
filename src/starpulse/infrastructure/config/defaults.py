"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "starpulse",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "starpulse/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # derived from environment in schema.py
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/starpulse",
        "schema_version": "v4",
        "day_ttl_seconds": 86_400,
        "window_ttl_seconds": 3_600,
    },
    "upstream": {
        "activity_url_template": (
            "https://activity.forgithub.com/top100-starred-in-{date}.json"
        ),
        "metadata_url_template": "https://cache.forgithub.com/{repo}/details",
        "popular_url": "https://popular.forgithub.com/index.json",
    },
    "dispatch": {
        "max_concurrent": 10,
        "requests_per_second": 20.0,
    },
    "refresh": {
        "refresh_hour": 1,
        "refresh_buffer_minutes": 30,
    },
}
