"""
Application controller for CDN Cert Sync.

Ties together configuration, logging, the certificate watcher, the
debounced sync and the CDN uploader, and runs them headless until
SIGINT/SIGTERM.
"""

from __future__ import annotations

import logging
import logging.handlers
import signal
import sys
import threading

from cdn_cert_sync import __app_name__, __version__
from cdn_cert_sync.client import CertificateUploader, UploadResult
from cdn_cert_sync.config import Config
from cdn_cert_sync.debounce import Debouncer
from cdn_cert_sync.errors import InvalidConfiguration
from cdn_cert_sync.platform_utils import get_log_path
from cdn_cert_sync.watcher import CertificateWatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: Config) -> None:
    """Configure the rotating file log and stderr handler."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT)

    if config.log_to_file:
        log_path = config.log_path or get_log_path()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                str(log_path),
                maxBytes=config.max_log_size_mb * 1024 * 1024,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            raise InvalidConfiguration(f"Cannot open log file {log_path}: {exc}") from exc
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root_logger.addHandler(fh)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)


class CertSyncApp:
    """
    Central orchestrator.

    Filesystem events feed a :class:`Debouncer`, which calls the uploader
    once the certificate files have been quiet for ``config.debounce_ms``.
    """

    def __init__(self, config: Config, uploader: CertificateUploader | None = None) -> None:
        self.config = config
        self.uploader = uploader or CertificateUploader(config)
        self.sync = Debouncer(self._sync_certificate, config.debounce_ms, name="CertSync")
        self.watcher = CertificateWatcher(config.watched_paths, self.sync)
        self._stop_event = threading.Event()
        self._stopped = False

    def _sync_certificate(self, reason: str = "startup") -> None:
        logger.info("Certificate sync triggered (%s)", reason)
        self.uploader.upload(reason)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start watching, and queue a sync if configured to sync at startup."""
        cfg = self.config
        logger.info("%s %s starting.", __app_name__, __version__)
        logger.info("Access key id: %s", cfg.masked_access_key_id)
        logger.info("Certificate: %s", cfg.cert_path)
        logger.info("Private key: %s", cfg.key_path)
        logger.info("CDN domain: %s (quiet period %sms)", cfg.domain_name, cfg.debounce_ms)

        self.watcher.start()
        # Files may have changed while we were not running
        if cfg.sync_on_start:
            self.sync("startup")

    def stop(self) -> None:
        """Stop the watcher and drop any pending sync."""
        if self._stopped:
            return
        self._stopped = True
        self.watcher.stop()
        self.sync.close()
        self.uploader.close()
        self._stop_event.set()
        logger.info("%s stopped.", __app_name__)

    def sync_now(self) -> UploadResult:
        """Upload the certificate pair immediately, bypassing the debounce."""
        return self.uploader.upload("manual")

    def request_stop(self) -> None:
        """Ask :meth:`run_forever` to return."""
        self._stop_event.set()

    def run_forever(self) -> None:
        """Run in the foreground until SIGINT/SIGTERM."""

        def _handler(sig, frame):
            logger.info("Received signal %s; shutting down.", sig)
            self.request_stop()

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)

        try:
            self.start()
            while not self._stop_event.wait(timeout=1):
                pass
        finally:
            self.stop()
