"""Tests for downloader settings, environment overrides, and client construction."""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from unittest import mock

import httpx
import pytest
from pydantic import ValidationError

from DocsXRef.XRefMaps.errors import ConfigurationError
from DocsXRef.XRefMaps.net import build_http_client, build_ssl_context, configure_http_client, get_http_client
from DocsXRef.XRefMaps.settings import (
    DEFAULT_MAX_PARALLELISM,
    DownloaderSettings,
    build_settings,
    load_settings,
)


def test_defaults() -> None:
    settings = build_settings()
    assert settings.max_parallelism == DEFAULT_MAX_PARALLELISM
    assert settings.check_certificate_revocation is True
    assert settings.timeout_sec == 1800.0
    assert settings.fallback_folders == []


def test_revocation_env_flag_disables_crl_checks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCSXREF_NO_CHECK_CERTIFICATE_REVOCATION_LIST", "true")
    assert build_settings().check_certificate_revocation is False
    assert build_settings(apply_env=False).check_certificate_revocation is True


def test_env_overrides_parallelism_timeout_and_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCSXREF_MAX_PARALLELISM", "4")
    monkeypatch.setenv("DOCSXREF_TIMEOUT_SEC", "12.5")
    monkeypatch.setenv("DOCSXREF_LOG_LEVEL", "debug")

    settings = build_settings({"max_parallelism": 32})

    assert settings.max_parallelism == 4
    assert settings.timeout_sec == 12.5
    assert settings.logging.level == "DEBUG"


def test_invalid_env_override_raises_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCSXREF_MAX_PARALLELISM", "0")
    with pytest.raises(ConfigurationError):
        build_settings()


def test_load_settings_reads_xrefmaps_section(tmp_path: Path) -> None:
    config = tmp_path / "docfx.yml"
    config.write_text(
        "xrefmaps:\n"
        "  base_folder: docs\n"
        "  fallback_folders: /opt/a, /opt/b\n"
        "  max_parallelism: 8\n"
        "  logging:\n"
        "    level: warning\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.base_folder == Path("docs")
    assert settings.fallback_folders == [Path("/opt/a"), Path("/opt/b")]
    assert settings.max_parallelism == 8
    assert settings.logging.level == "WARNING"


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    config = tmp_path / "empty.yml"
    config.write_text("", encoding="utf-8")
    assert load_settings(config) == DownloaderSettings()


@pytest.mark.parametrize(
    "raw",
    [
        {"max_parallelism": 0},
        {"read_buffer_size": 10},
        {"logging": {"level": "chatty"}},
        {"xrefmaps": ["not", "a", "mapping"]},
    ],
)
def test_invalid_settings_raise_configuration_error(raw: dict) -> None:
    with pytest.raises(ConfigurationError):
        build_settings(raw)


def test_load_settings_rejects_missing_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "absent.yml")

    broken = tmp_path / "broken.yml"
    broken.write_text("xrefmaps: [unterminated", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(broken)

    listing = tmp_path / "list.yml"
    listing.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(listing)


def test_settings_are_frozen() -> None:
    settings = DownloaderSettings()
    with pytest.raises(ValidationError):
        settings.max_parallelism = 2  # type: ignore[misc]


def test_ssl_context_skips_crl_when_disabled(tmp_path: Path) -> None:
    settings = DownloaderSettings(check_certificate_revocation=False, crl_file=tmp_path / "crl.pem")
    context = build_ssl_context(settings)
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert not context.verify_flags & ssl.VERIFY_CRL_CHECK_LEAF


def test_ssl_context_loads_crl_file_when_enabled(tmp_path: Path) -> None:
    crl = tmp_path / "crl.pem"
    settings = DownloaderSettings(crl_file=crl)

    with mock.patch.object(ssl.SSLContext, "load_verify_locations") as load:
        context = build_ssl_context(settings)

    load.assert_any_call(cafile=str(crl))
    assert context.verify_flags & ssl.VERIFY_CRL_CHECK_LEAF


def test_http_client_reflects_settings() -> None:
    settings = DownloaderSettings(timeout_sec=42.0, follow_redirects=False, user_agent="agent/1.0")
    client = build_http_client(settings)
    try:
        assert client.timeout.read == 42.0
        assert client.follow_redirects is False
        assert client.headers["User-Agent"] == "agent/1.0"
    finally:
        client.close()


def test_configured_client_is_shared_and_not_owned() -> None:
    shared = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    configure_http_client(shared)
    try:
        client, owned = get_http_client(DownloaderSettings())
        assert client is shared
        assert owned is False
    finally:
        configure_http_client(None)
        shared.close()


def test_ssl_context_warns_when_revocation_requested_without_crl(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="DocsXRef.XRefMaps.net"):
        context = build_ssl_context(DownloaderSettings())

    assert not context.verify_flags & ssl.VERIFY_CRL_CHECK_LEAF
    assert any("no crl_file configured" in record.getMessage() for record in caplog.records)


def test_ssl_context_is_quiet_when_revocation_disabled(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="DocsXRef.XRefMaps.net"):
        build_ssl_context(DownloaderSettings(check_certificate_revocation=False))

    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
