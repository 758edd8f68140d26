"""CDN Cert Sync: keep an Alibaba Cloud CDN certificate in step with disk.

Watches a TLS certificate and private key on the local filesystem and,
after a short quiet period, uploads the pair to a CDN domain.
"""

__version__ = "1.0.0"
__app_name__ = "CDN Cert Sync"
