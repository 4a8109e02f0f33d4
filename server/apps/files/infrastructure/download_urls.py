"""Permanent download URLs encoded in QR labels."""

import logging
import socket
from typing import Final
from urllib.parse import urlsplit

from django.conf import settings

logger = logging.getLogger(__name__)

_DOWNLOAD_PATH: Final = '/api/uploadFile/download-file/{file_id}'
_LOCAL_HOSTS: Final = frozenset(('localhost', '127.0.0.1', '::1'))
_FALLBACK_IP: Final = '127.0.0.1'
# Never contacted: connecting a UDP socket only selects a route
_ROUTE_PROBE_ADDRESS: Final = ('10.255.255.255', 1)


def build_download_url(file_id: int, base_url: str | None = None) -> str:
    """Build the permanent download URL of a file.

    Depends only on the immutable file id, so printed labels keep
    working across renames.

    Args:
        file_id: Primary key of the file.
        base_url: Server base URL, resolved from settings when omitted.

    Returns:
        Absolute URL (e.g., http://10.0.0.5/api/uploadFile/download-file/7).
    """
    base = (base_url or get_server_base_url()).rstrip('/')
    return base + _DOWNLOAD_PATH.format(file_id=file_id)


def get_server_base_url() -> str:
    """Resolve the public base URL of this server.

    Order: ``SERVER_BASE_URL``, then the first non-localhost host from
    ``FRONTEND_URLS`` (served on port 80 by the reverse proxy), then
    ``SERVER_IP`` or the first non-loopback IPv4 with ``SERVER_PORT``.

    Returns:
        Base URL without trailing slash.
    """
    if settings.SERVER_BASE_URL:
        return settings.SERVER_BASE_URL.rstrip('/')

    for frontend_url in settings.FRONTEND_URLS.split(','):
        hostname = urlsplit(frontend_url.strip()).hostname
        if hostname and hostname not in _LOCAL_HOSTS:
            return f'http://{hostname}'

    server_ip = settings.SERVER_IP or get_local_ipv4()
    return f'http://{server_ip}:{settings.SERVER_PORT}'


def get_local_ipv4() -> str:
    """Get the first non-loopback IPv4 address of this host.

    Returns:
        Dotted IPv4 address, 127.0.0.1 when no network is available.
    """
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect(_ROUTE_PROBE_ADDRESS)
        address = probe.getsockname()[0]
    except OSError:
        logger.warning('No network route found, using %s', _FALLBACK_IP)
        return _FALLBACK_IP
    finally:
        probe.close()
    return address
