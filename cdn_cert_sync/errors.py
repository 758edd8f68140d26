"""Exceptions shared across CDN Cert Sync."""


class InvalidConfiguration(ValueError):
    """Raised at startup when settings are missing or out of range."""
