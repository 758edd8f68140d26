"""
Alibaba Cloud CDN client for CDN Cert Sync.

Uploads a certificate/key pair to a CDN domain through the
``SetCdnDomainSSLCertificate`` action of the CDN OpenAPI
(version 2018-05-10), using the official Alibaba Cloud Python SDK.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from alibabacloud_cdn20180510 import models as cdn_models
from alibabacloud_cdn20180510.client import Client as Cdn20180510Client
from alibabacloud_tea_openapi import models as open_api_models
from alibabacloud_tea_util import models as util_models
from Tea.exceptions import TeaException, UnretryableException

from cdn_cert_sync.config import Config

logger = logging.getLogger(__name__)

CERT_TYPE_UPLOAD = "upload"


@dataclass
class UploadResult:
    """Outcome of a single certificate upload."""
    success: bool
    reason: str = ""
    request_id: str = ""
    error: str = ""
    recommend: str = ""
    started: float = 0.0
    finished: float = 0.0

    @property
    def duration(self) -> float:
        if self.finished and self.started:
            return self.finished - self.started
        return 0.0


def create_client(config: Config) -> Cdn20180510Client:
    """Build a CDN SDK client authenticated with the configured AccessKey pair."""
    sdk_config = open_api_models.Config(
        access_key_id=config.access_key_id,
        access_key_secret=config.access_key_secret,
        endpoint=config.endpoint,
    )
    return Cdn20180510Client(sdk_config)


class CertificateUploader:
    """
    Pushes the certificate pair named by a :class:`Config` to its CDN domain.

    Parameters
    ----------
    config : Config
        Credentials, file paths and target domain.
    client_factory : callable, optional
        Takes the config and returns the SDK client. Called lazily on the
        first upload; the client is reused afterwards.
    """

    def __init__(
        self,
        config: Config,
        client_factory: Callable[[Config], Any] | None = None,
    ):
        self._config = config
        self._client_factory = client_factory or create_client
        self._client: Any | None = None
        self._lock = threading.Lock()
        self.last_result: UploadResult | None = None

    def create_client(self) -> Any:
        """Return the shared SDK client, creating it on first use."""
        if self._client is None:
            self._client = self._client_factory(self._config)
        return self._client

    def build_request(
        self, cert_pem: str, key_pem: str
    ) -> cdn_models.SetCdnDomainSSLCertificateRequest:
        """Return the SetCdnDomainSSLCertificate request for this PEM pair."""
        cfg = self._config
        return cdn_models.SetCdnDomainSSLCertificateRequest(
            domain_name=cfg.domain_name,
            cert_name=cfg.cert_name,
            cert_type=CERT_TYPE_UPLOAD,
            sslprotocol=cfg.ssl_protocol,
            sslpub=cert_pem,
            sslpri=key_pem,
        )

    def _read_pair(self) -> tuple[str, str]:
        cert_path, key_path = self._config.watched_paths
        return (
            Path(cert_path).read_text(encoding="utf-8"),
            Path(key_path).read_text(encoding="utf-8"),
        )

    def upload(self, reason: str = "manual") -> UploadResult:
        """
        Read the certificate pair from disk and upload it.

        Failures are logged and reported in the returned result; nothing
        is retried.
        """
        with self._lock:
            result = self._upload(reason)
            self.last_result = result
            return result

    def _upload(self, reason: str) -> UploadResult:
        result = UploadResult(success=False, reason=reason, started=time.time())
        domain = self._config.domain_name
        logger.info("Syncing certificate to %s (trigger: %s)", domain, reason)

        try:
            cert_pem, key_pem = self._read_pair()
        except OSError as exc:
            result.error = f"Cannot read certificate files: {exc}"
            result.finished = time.time()
            logger.error("%s", result.error)
            return result

        request = self.build_request(cert_pem, key_pem)
        runtime = util_models.RuntimeOptions()
        try:
            response = self.create_client().set_cdn_domain_sslcertificate_with_options(
                request, runtime
            )
        except TeaException as error:
            result.finished = time.time()
            result.error = f"{error.code}: {error.message}" if error.code else str(error.message)
            data = error.data if isinstance(error.data, dict) else {}
            result.recommend = data.get("Recommend", "") or ""
            result.request_id = data.get("RequestId", "") or ""
            logger.error("Certificate upload to %s failed: %s", domain, result.error)
            if result.recommend:
                logger.error("Diagnosis: %s", result.recommend)
            return result
        except UnretryableException as error:
            result.finished = time.time()
            result.error = f"Request failed: {error}"
            logger.error("Certificate upload to %s failed: %s", domain, result.error)
            return result

        result.finished = time.time()
        body = getattr(response, "body", None)
        result.request_id = getattr(body, "request_id", None) or ""
        result.success = True
        logger.info(
            "Certificate for %s updated (request %s, %.2fs)",
            domain,
            result.request_id or "-",
            result.duration,
        )
        return result

    def close(self) -> None:
        """Drop the SDK client; the next upload creates a fresh one."""
        with self._lock:
            self._client = None
