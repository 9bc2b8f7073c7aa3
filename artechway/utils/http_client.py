import ipaddress
import socket
from urllib.parse import urlparse

import requests
from flask import current_app, has_app_context


class RemoteFetchError(ValueError):
    """Raised when a remote resource cannot be fetched safely."""


class HTTPClient:
    """Outbound HTTP client used to import remote header images."""

    # Private IP ranges that should be blocked for SSRF protection
    PRIVATE_IP_RANGES = [
        ipaddress.ip_network('127.0.0.0/8'),      # Loopback
        ipaddress.ip_network('10.0.0.0/8'),       # Private network
        ipaddress.ip_network('172.16.0.0/12'),    # Private network
        ipaddress.ip_network('192.168.0.0/16'),   # Private network
        ipaddress.ip_network('169.254.0.0/16'),   # Link-local (includes metadata endpoint)
        ipaddress.ip_network('0.0.0.0/8'),
        ipaddress.ip_network('::1/128'),          # IPv6 loopback
        ipaddress.ip_network('fc00::/7'),         # IPv6 unique local
        ipaddress.ip_network('fe80::/10'),        # IPv6 link-local
    ]

    BLOCKED_METADATA_HOSTS = [
        '169.254.169.254',
        'metadata.google.internal',
        'metadata.azure.com',
    ]

    def __init__(self, allowed_domains=None, timeout=None):
        """Initialize the HTTP client.

        Args:
            allowed_domains (list, optional): Only these domains (and their
                subdomains) may be fetched. Empty means any public host.
            timeout (float, optional): Request timeout in seconds.
        """
        config = current_app.config if has_app_context() else {}
        self.allowed_domains = allowed_domains
        if self.allowed_domains is None:
            self.allowed_domains = config.get('HTTP_CLIENT_ALLOWED_DOMAINS', [])
        self.timeout = timeout if timeout is not None else config.get('HTTP_CLIENT_TIMEOUT', 10)

    def _is_private_ip(self, ip_str):
        try:
            ip = ipaddress.ip_address(ip_str)
            return any(ip in network for network in self.PRIVATE_IP_RANGES)
        except ValueError:
            return False

    def _resolve(self, hostname):
        return {info[4][0] for info in socket.getaddrinfo(hostname, None)}

    def validate_url(self, url):
        """Validate URL for SSRF protection.

        Raises:
            RemoteFetchError: If URL is blocked for security reasons
        """
        parsed = urlparse(url or '')

        if parsed.scheme not in ('http', 'https'):
            raise RemoteFetchError(f"Blocked: Invalid scheme '{parsed.scheme}'. Only HTTP/HTTPS allowed.")

        hostname = parsed.hostname
        if not hostname:
            raise RemoteFetchError("Blocked: Invalid URL - no hostname found")

        if hostname.lower() in [h.lower() for h in self.BLOCKED_METADATA_HOSTS]:
            raise RemoteFetchError(f"Blocked: Access to metadata endpoint '{hostname}' is not allowed")

        if self.allowed_domains:
            hostname_lower = hostname.lower()
            allowed = any(
                hostname_lower == domain.lower() or
                hostname_lower.endswith('.' + domain.lower())
                for domain in self.allowed_domains
            )
            if not allowed:
                raise RemoteFetchError(f"Blocked: Domain '{hostname}' is not in the allowed domains list")

        try:
            ips = self._resolve(hostname)
        except socket.gaierror as e:
            raise RemoteFetchError(f"Blocked: Failed to resolve hostname '{hostname}': {str(e)}")

        for ip in ips:
            if self._is_private_ip(ip):
                raise RemoteFetchError(
                    f"Blocked: Host '{hostname}' resolves to private/restricted IP {ip}."
                )
        return True

    def get(self, url, **kwargs):
        """Make a GET request with SSRF protection. Redirects are not followed."""
        self.validate_url(url)
        kwargs.setdefault('timeout', self.timeout)
        kwargs.setdefault('allow_redirects', False)
        return requests.get(url, **kwargs)

    def fetch_image(self, url, max_bytes=5 * 1024 * 1024):
        """Download an image and return (bytes, content_type).

        Raises:
            RemoteFetchError: On blocked URLs, HTTP errors, non-image
                responses or bodies larger than ``max_bytes``.
        """
        try:
            resp = self.get(url, stream=True, headers={'Accept': 'image/*'})
        except requests.RequestException as e:
            raise RemoteFetchError(f"Failed to fetch image: {e}") from e

        with resp:
            if resp.status_code != 200:
                raise RemoteFetchError(f"Failed to fetch image: HTTP {resp.status_code}")
            content_type = (resp.headers.get('Content-Type') or '').split(';')[0].strip().lower()
            if not content_type.startswith('image/'):
                raise RemoteFetchError(f"Remote resource is not an image ({content_type or 'unknown type'})")
            chunks = []
            total = 0
            for chunk in resp.iter_content(chunk_size=64 * 1024):
                total += len(chunk)
                if total > max_bytes:
                    raise RemoteFetchError("Remote image is too large")
                chunks.append(chunk)
        return b''.join(chunks), content_type
