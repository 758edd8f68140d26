"""Tests for loading and validating configuration."""

import dataclasses
from pathlib import Path

import pytest

from cdn_cert_sync.config import load_config
from cdn_cert_sync.errors import InvalidConfiguration

BASE_ENV = {
    "ALIBABA_CLOUD_ACCESS_KEY_ID": "LTAI5tExampleKeyId",
    "ALIBABA_CLOUD_ACCESS_KEY_SECRET": "example-secret",
    "SSL_PUB_PATH": "/etc/ssl/example.com.cert.pem",
    "SSL_PRI_PATH": "/etc/ssl/example.com.key.pem",
    "CDN_DOMAIN_NAME": "cdn.example.com",
}


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Keep find_dotenv() from picking up a stray .env."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


class TestLoadConfig:
    """load_config() parses the environment into a Config."""

    def test_defaults(self):
        cfg = load_config(environ=dict(BASE_ENV))

        assert cfg.domain_name == "cdn.example.com"
        assert cfg.cert_path == Path("/etc/ssl/example.com.cert.pem")
        assert cfg.key_path == Path("/etc/ssl/example.com.key.pem")
        assert cfg.cert_name == "acme"
        assert cfg.endpoint == "cdn.aliyuncs.com"
        assert cfg.ssl_protocol == "on"
        assert cfg.debounce_ms == 1000
        assert cfg.sync_on_start is True
        assert cfg.log_level == "INFO"
        assert cfg.log_path is None
        assert cfg.log_to_file is True
        assert cfg.max_log_size_mb == 10
        assert cfg.log_backup_count == 3

    def test_overrides(self):
        env = dict(
            BASE_ENV,
            CDN_CERT_NAME="letsencrypt",
            CDN_ENDPOINT="cdn.ap-southeast-1.aliyuncs.com",
            CDN_SSL_PROTOCOL="OFF",
            SYNC_DEBOUNCE_MS="250.5",
            SYNC_ON_START="no",
            LOG_LEVEL="debug",
            LOG_PATH="/var/log/cdn-cert-sync.log",
            LOG_MAX_SIZE_MB="2",
            LOG_BACKUP_COUNT="0",
        )
        cfg = load_config(environ=env)

        assert cfg.cert_name == "letsencrypt"
        assert cfg.endpoint == "cdn.ap-southeast-1.aliyuncs.com"
        assert cfg.ssl_protocol == "off"
        assert cfg.debounce_ms == 250.5
        assert cfg.sync_on_start is False
        assert cfg.log_level == "DEBUG"
        assert cfg.log_path == Path("/var/log/cdn-cert-sync.log")
        assert cfg.max_log_size_mb == 2
        assert cfg.log_backup_count == 0

    def test_empty_log_path_disables_file_log(self):
        cfg = load_config(environ=dict(BASE_ENV, LOG_PATH=""))
        assert cfg.log_to_file is False
        assert cfg.log_path is None

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / "sync.env"
        env_file.write_text(
            "\n".join(f"{k}={v}" for k, v in BASE_ENV.items()) + "\nSYNC_DEBOUNCE_MS=42\n",
            encoding="utf-8",
        )
        cfg = load_config(env_file=env_file, environ={})

        assert cfg.domain_name == "cdn.example.com"
        assert cfg.debounce_ms == 42

    def test_environment_wins_over_env_file(self, tmp_path):
        env_file = tmp_path / "sync.env"
        env_file.write_text(
            "\n".join(f"{k}={v}" for k, v in BASE_ENV.items()), encoding="utf-8"
        )
        cfg = load_config(env_file=env_file, environ={"CDN_DOMAIN_NAME": "other.example.com"})

        assert cfg.domain_name == "other.example.com"

    def test_dotenv_path_variable(self, tmp_path):
        env_file = tmp_path / "production.env"
        env_file.write_text(
            "\n".join(f"{k}={v}" for k, v in BASE_ENV.items()), encoding="utf-8"
        )
        cfg = load_config(environ={"DOTENV_PATH": str(env_file)})

        assert cfg.access_key_id == "LTAI5tExampleKeyId"

    def test_finds_dotenv_in_working_directory(self):
        Path(".env").write_text(
            "\n".join(f"{k}={v}" for k, v in BASE_ENV.items()), encoding="utf-8"
        )
        cfg = load_config(environ={})

        assert cfg.domain_name == "cdn.example.com"

    def test_missing_env_file_is_an_error(self, tmp_path):
        with pytest.raises(InvalidConfiguration, match="does not exist"):
            load_config(env_file=tmp_path / "nope.env", environ=dict(BASE_ENV))


class TestValidation:
    """Every problem is reported together at startup."""

    def test_missing_required_values_are_all_listed(self):
        with pytest.raises(InvalidConfiguration) as excinfo:
            load_config(environ={})

        message = str(excinfo.value)
        for name in (
            "ALIBABA_CLOUD_ACCESS_KEY_ID",
            "ALIBABA_CLOUD_ACCESS_KEY_SECRET",
            "CDN_DOMAIN_NAME",
            "SSL_PUB_PATH",
            "SSL_PRI_PATH",
        ):
            assert name in message

    @pytest.mark.parametrize(
        "key, value",
        [
            ("SYNC_DEBOUNCE_MS", "-1"),
            ("SYNC_DEBOUNCE_MS", "soon"),
            ("SYNC_DEBOUNCE_MS", "nan"),
            ("SYNC_DEBOUNCE_MS", "inf"),
            ("SYNC_DEBOUNCE_MS", "1e20"),
            ("CDN_SSL_PROTOCOL", "maybe"),
            ("SYNC_ON_START", "sometimes"),
            ("LOG_LEVEL", "LOUD"),
            ("LOG_MAX_SIZE_MB", "0"),
            ("LOG_BACKUP_COUNT", "-2"),
            ("LOG_BACKUP_COUNT", "many"),
        ],
    )
    def test_rejects_bad_values(self, key, value):
        with pytest.raises(InvalidConfiguration, match=key):
            load_config(environ=dict(BASE_ENV, **{key: value}))

    def test_invalid_configuration_is_a_value_error(self):
        assert issubclass(InvalidConfiguration, ValueError)

    def test_validate_on_constructed_config(self, make_config):
        make_config().validate()
        with pytest.raises(InvalidConfiguration, match="CDN_DOMAIN_NAME"):
            make_config(domain_name="").validate()


class TestConfigHelpers:
    """Convenience accessors on Config."""

    def test_watched_paths(self, make_config, cert_files):
        assert make_config().watched_paths == cert_files

    def test_masked_access_key_id(self, make_config):
        assert make_config().masked_access_key_id == "LTAI" + "*" * 10 + "eyId"
        assert make_config(access_key_id="short").masked_access_key_id == "*****"

    def test_repr_hides_secret(self, make_config):
        assert "example-secret" not in repr(make_config())

    def test_config_is_immutable(self, make_config):
        cfg = make_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.domain_name = "changed"  # type: ignore[misc]
