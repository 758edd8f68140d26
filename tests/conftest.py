"""Shared fixtures for the CDN Cert Sync tests."""

from pathlib import Path

import pytest

from cdn_cert_sync.config import Config
from tests.helpers import CERT_PEM, KEY_PEM


@pytest.fixture
def cert_files(tmp_path: Path) -> tuple[Path, Path]:
    """Write a dummy certificate and key into a temp folder."""
    cert = tmp_path / "example.com.cert.pem"
    key = tmp_path / "example.com.key.pem"
    cert.write_text(CERT_PEM, encoding="utf-8")
    key.write_text(KEY_PEM, encoding="utf-8")
    return cert, key


@pytest.fixture
def make_config(cert_files):
    """Return a factory building a valid Config, with overrides."""

    def _make(**overrides) -> Config:
        cert, key = cert_files
        values = dict(
            access_key_id="LTAI5tExampleKeyId",
            access_key_secret="example-secret",
            cert_path=cert,
            key_path=key,
            domain_name="cdn.example.com",
            debounce_ms=50,
            log_to_file=False,
        )
        values.update(overrides)
        return Config(**values)

    return _make
