"""
Tests for structlog setup in `core/observability.py`.
"""

from collections.abc import Iterator

import pytest
import structlog

from core.config import LoggingConfig
from core.observability import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize(
    "fmt,renderer",
    [
        ("json", structlog.processors.JSONRenderer),
        ("console", structlog.dev.ConsoleRenderer),
    ],
)
def test_renderer_follows_format(fmt: str, renderer: type) -> None:
    configure_logging(LoggingConfig(format=fmt))  # type: ignore[arg-type]

    processors = structlog.get_config()["processors"]

    assert isinstance(processors[-1], renderer)
    assert structlog.stdlib.filter_by_level in processors


def test_defaults_to_json() -> None:
    configure_logging()

    assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)
