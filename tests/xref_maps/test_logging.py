"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

import pytest

from DocsXRef.XRefMaps.logging_config import (
    LOGGER_NAME,
    JSONFormatter,
    generate_correlation_id,
    mask_sensitive_data,
    setup_logging,
)
from DocsXRef.XRefMaps.settings import LoggingSettings


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger(LOGGER_NAME)
    original_level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if getattr(handler, "_xrefmaps_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(original_level)


def test_mask_sensitive_data_is_case_insensitive() -> None:
    masked = mask_sensitive_data({"Authorization": "Bearer x", "url": "https://example.org"})
    assert masked == {"Authorization": "***masked***", "url": "https://example.org"}


def test_correlation_ids_are_short_and_unique() -> None:
    first, second = generate_correlation_id(), generate_correlation_id()
    assert len(first) == 12
    assert first != second


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"msg": "xrefmap-acquire", "levelname": "DEBUG", "name": LOGGER_NAME, "route": "remote", "token": "t"}
    )

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "xrefmap-acquire"
    assert payload["route"] == "remote"
    assert payload["token"] == "***masked***"
    assert payload["timestamp"].endswith("Z")


def test_setup_logging_writes_json_lines(package_logger: logging.Logger, tmp_path: Path) -> None:
    config = LoggingSettings(level="debug", emit_json_logs=True)

    logger = setup_logging(config, log_dir=tmp_path)
    logger.info("xrefmap-read-local", extra={"path": "/srv/x.yml"})
    for handler in logger.handlers:
        handler.flush()

    files = list(tmp_path.glob("xrefmaps-*.jsonl"))
    assert len(files) == 1
    line = json.loads(files[0].read_text(encoding="utf-8").splitlines()[-1])
    assert line["message"] == "xrefmap-read-local"
    assert line["path"] == "/srv/x.yml"
    assert logger.level == logging.DEBUG


def test_setup_logging_replaces_its_own_handlers(package_logger: logging.Logger) -> None:
    setup_logging()
    setup_logging()
    managed = [h for h in package_logger.handlers if getattr(h, "_xrefmaps_managed", False)]
    assert len(managed) == 1
