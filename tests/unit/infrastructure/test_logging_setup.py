"""Tests for the uvicorn-compatible logging dictConfig."""

from __future__ import annotations

import structlog

from starpulse.infrastructure.config.load import load_config
from starpulse.infrastructure.logging.setup import build_logging_config


def test_handlers_render_through_structlog() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"log_level": "DEBUG"}))

    assert all(h["formatter"] == "structlog" for h in cfg["handlers"].values())
    assert cfg["root"]["level"] == "DEBUG"
    assert cfg["loggers"]["uvicorn.access"]["level"] == "DEBUG"


def test_prod_renders_json() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"environment": "prod"}))
    renderer = cfg["formatters"]["structlog"]["processors"][-1]
    assert isinstance(renderer, structlog.processors.JSONRenderer)


def test_dev_renders_console() -> None:
    cfg = build_logging_config(load_config())
    renderer = cfg["formatters"]["structlog"]["processors"][-1]
    assert isinstance(renderer, structlog.dev.ConsoleRenderer)
