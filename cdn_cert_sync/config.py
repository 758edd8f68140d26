"""
Configuration for CDN Cert Sync.

Settings come from the process environment, optionally seeded from a
``.env`` file (real environment variables win). They are parsed into an
immutable :class:`Config` and validated once at startup; nothing reads
the environment after that.
"""

from __future__ import annotations

import logging
import math
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values, find_dotenv

from cdn_cert_sync.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

SSL_PROTOCOL_ON = "on"
SSL_PROTOCOL_OFF = "off"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")

DEFAULT_CONFIG: dict[str, str] = {
    "CDN_CERT_NAME": "acme",
    "CDN_ENDPOINT": "cdn.aliyuncs.com",
    "CDN_SSL_PROTOCOL": SSL_PROTOCOL_ON,
    "SYNC_DEBOUNCE_MS": "1000",
    "SYNC_ON_START": "true",
    "LOG_LEVEL": "INFO",
    "LOG_MAX_SIZE_MB": "10",
    "LOG_BACKUP_COUNT": "3",
}


@dataclass(frozen=True)
class Config:
    """Validated settings for one certificate/domain pair."""

    access_key_id: str
    access_key_secret: str = field(repr=False)
    cert_path: Path
    key_path: Path
    domain_name: str
    cert_name: str = "acme"
    endpoint: str = "cdn.aliyuncs.com"
    ssl_protocol: str = SSL_PROTOCOL_ON
    debounce_ms: float = 1000
    sync_on_start: bool = True
    log_level: str = "INFO"
    # None = platform default location
    log_path: Path | None = None
    log_to_file: bool = True
    max_log_size_mb: int = 10
    log_backup_count: int = 3

    @property
    def watched_paths(self) -> tuple[Path, Path]:
        """Return the (certificate, private key) paths."""
        return (self.cert_path, self.key_path)

    @property
    def masked_access_key_id(self) -> str:
        """Return the access key id with all but its ends hidden."""
        key = self.access_key_id
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"

    def problems(self) -> list[str]:
        """Return a human-readable list of everything wrong with this config."""
        found = []
        for name, value in (
            ("ALIBABA_CLOUD_ACCESS_KEY_ID", self.access_key_id),
            ("ALIBABA_CLOUD_ACCESS_KEY_SECRET", self.access_key_secret),
            ("CDN_DOMAIN_NAME", self.domain_name),
            ("CDN_CERT_NAME", self.cert_name),
            ("CDN_ENDPOINT", self.endpoint),
        ):
            if not value:
                found.append(f"{name} is required")
        for name, path in (("SSL_PUB_PATH", self.cert_path), ("SSL_PRI_PATH", self.key_path)):
            if not str(path) or str(path) == ".":
                found.append(f"{name} is required")
        if self.ssl_protocol not in (SSL_PROTOCOL_ON, SSL_PROTOCOL_OFF):
            found.append(f"CDN_SSL_PROTOCOL must be 'on' or 'off', got {self.ssl_protocol!r}")
        if (
            not math.isfinite(self.debounce_ms)
            or self.debounce_ms < 0
            or self.debounce_ms / 1000.0 > threading.TIMEOUT_MAX
        ):
            found.append(
                "SYNC_DEBOUNCE_MS must be a finite number between 0 and"
                f" {threading.TIMEOUT_MAX * 1000:g}, got {self.debounce_ms}"
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            found.append(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}")
        if self.max_log_size_mb < 1:
            found.append(f"LOG_MAX_SIZE_MB must be >= 1, got {self.max_log_size_mb}")
        if self.log_backup_count < 0:
            found.append(f"LOG_BACKUP_COUNT must be >= 0, got {self.log_backup_count}")
        return found

    def validate(self) -> None:
        """Raise :class:`InvalidConfiguration` if any setting is unusable."""
        found = self.problems()
        if found:
            raise InvalidConfiguration("; ".join(found))


# ---- loading ----


def _resolve_env_file(env_file: str | os.PathLike | None, environ: Mapping[str, str]) -> str:
    if env_file:
        return str(env_file)
    if environ.get("DOTENV_PATH"):
        return environ["DOTENV_PATH"]
    return find_dotenv(usecwd=True)


def _read_env_file(path: str) -> dict[str, str]:
    if not path:
        return {}
    if not os.path.isfile(path):
        raise InvalidConfiguration(f"Env file does not exist: {path}")
    logger.info("Reading settings from %s", path)
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def _parse_bool(values: Mapping[str, str], key: str, problems: list[str]) -> bool:
    raw = values[key].strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    problems.append(f"{key} must be true or false, got {values[key]!r}")
    return False


def _parse_number(values: Mapping[str, str], key: str, cast, problems: list[str]):
    raw = values[key].strip()
    try:
        return cast(raw)
    except ValueError:
        problems.append(f"{key} must be a number, got {raw!r}")
        return cast(DEFAULT_CONFIG[key])


def load_config(
    env_file: str | os.PathLike | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Build and validate a :class:`Config`.

    The ``.env`` file is *env_file* if given, else ``$DOTENV_PATH``, else a
    ``.env`` found from the current directory upward. Values in *environ*
    (default ``os.environ``) override the file.
    """
    if environ is None:
        environ = os.environ
    values: dict[str, str] = dict(DEFAULT_CONFIG)
    values.update(_read_env_file(_resolve_env_file(env_file, environ)))
    values.update({k: v for k, v in environ.items() if v is not None})

    problems: list[str] = []
    raw_log_path = values.get("LOG_PATH")
    config = Config(
        access_key_id=values.get("ALIBABA_CLOUD_ACCESS_KEY_ID", "").strip(),
        access_key_secret=values.get("ALIBABA_CLOUD_ACCESS_KEY_SECRET", "").strip(),
        cert_path=Path(values.get("SSL_PUB_PATH", "").strip()).expanduser(),
        key_path=Path(values.get("SSL_PRI_PATH", "").strip()).expanduser(),
        domain_name=values.get("CDN_DOMAIN_NAME", "").strip(),
        cert_name=values["CDN_CERT_NAME"].strip(),
        endpoint=values["CDN_ENDPOINT"].strip(),
        ssl_protocol=values["CDN_SSL_PROTOCOL"].strip().lower(),
        debounce_ms=_parse_number(values, "SYNC_DEBOUNCE_MS", float, problems),
        sync_on_start=_parse_bool(values, "SYNC_ON_START", problems),
        log_level=values["LOG_LEVEL"].strip().upper(),
        log_path=Path(raw_log_path).expanduser() if raw_log_path else None,
        log_to_file=raw_log_path != "",
        max_log_size_mb=_parse_number(values, "LOG_MAX_SIZE_MB", int, problems),
        log_backup_count=_parse_number(values, "LOG_BACKUP_COUNT", int, problems),
    )
    problems.extend(config.problems())
    if problems:
        raise InvalidConfiguration("; ".join(problems))
    return config
