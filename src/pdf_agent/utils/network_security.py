"""Network security utilities for downloading PDFs.

URLs are validated before every request, including each redirect hop:
only http(s) schemes, hostnames that resolve exclusively to public
addresses, an optional host allowlist, a redirect limit and a streamed
size cap.

Functions
---------
- validate_url_security: Validate scheme, host and resolved addresses of a URL
- create_secure_http_client: Create an httpx client that validates every hop
- fetch_content_securely: Stream a URL's body with size and type checks
- fetch_pdf: Download a PDF
- filename_from_url: Derive a PDF file name from a URL
- is_network_disabled: Check the global network kill switch

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/utils/network_security.py

import ipaddress
import logging
import os
import socket
from email.message import Message
from typing import Any
from urllib.parse import unquote, urlparse

from pdf_agent.constants import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_USER_AGENT,
    DEPS_NETWORK,
    MAX_FILE_SIZE,
    PDF_CONTENT_TYPE,
)
from pdf_agent.exceptions import NetworkSecurityError
from pdf_agent.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)

NETWORK_DISABLE_ENV = "PDF_AGENT_DISABLE_NETWORK"

_BLOCKED_V4 = tuple(
    ipaddress.IPv4Network(net)
    for net in (
        "0.0.0.0/8",
        "100.64.0.0/10",  # carrier-grade NAT
        "192.0.0.0/24",
        "192.0.2.0/24",
        "198.18.0.0/15",
        "198.51.100.0/24",
        "203.0.113.0/24",
        "240.0.0.0/4",
    )
)
_BLOCKED_V6 = tuple(
    ipaddress.IPv6Network(net)
    for net in (
        "::ffff:0:0/96",  # IPv4-mapped
        "2001:db8::/32",
        "2001::/32",  # Teredo
        "2002::/16",  # 6to4
    )
)


def _is_private_or_reserved_ip(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    """Return True for loopback, private, link-local, multicast and special-use addresses."""
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_multicast:
        return True
    blocked = _BLOCKED_V4 if isinstance(ip, ipaddress.IPv4Address) else _BLOCKED_V6
    return any(ip in network for network in blocked)


def _resolve_hostname_to_ips(hostname: str) -> list[ipaddress.IPv4Address | ipaddress.IPv6Address]:
    """Resolve a hostname to every address it maps to.

    Raises
    ------
    NetworkSecurityError
        If resolution fails or yields no usable address
    """
    try:
        addr_infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror as e:
        raise NetworkSecurityError(f"Failed to resolve hostname {hostname}: {e}") from e

    ips = []
    for addr_info in addr_infos:
        try:
            ips.append(ipaddress.ip_address(addr_info[4][0]))
        except ValueError:
            continue

    if not ips:
        raise NetworkSecurityError(f"No valid IP addresses resolved for hostname: {hostname}")
    return ips


def _normalize_hostname(hostname: str) -> str:
    """IDNA-encode and lowercase a hostname.

    >>> _normalize_hostname("Example.COM")
    'example.com'
    """
    try:
        return hostname.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return hostname.lower()


def _host_allowed(hostname: str, allowed_hosts: list[str] | None) -> bool:
    """Check a normalized hostname against hostnames and CIDR blocks in the allowlist."""
    if allowed_hosts is None:
        return True

    networks = []
    for entry in allowed_hosts:
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            if hostname == _normalize_hostname(entry):
                return True

    if not networks:
        return False

    try:
        resolved = _resolve_hostname_to_ips(hostname)
    except NetworkSecurityError:
        return False
    return any(ip in network for network in networks for ip in resolved)


def _parse_content_type(content_type: str) -> str:
    """Return the lowercased MIME type of a Content-Type header, without parameters.

    >>> _parse_content_type("application/pdf; charset=binary")
    'application/pdf'
    """
    if not content_type:
        return ""
    msg = Message()
    msg["content-type"] = content_type
    return msg.get_content_type().lower()


def validate_url_security(url: str, allowed_hosts: list[str] | None = None, require_https: bool = False) -> None:
    """Validate a URL before making an HTTP request to it.

    Parameters
    ----------
    url : str
        URL to validate
    allowed_hosts : list[str] | None, default None
        Allowed hostnames or CIDR blocks. None allows any public host.
    require_https : bool, default False
        Reject plain http URLs

    Raises
    ------
    NetworkSecurityError
        If the URL is malformed, uses a disallowed scheme or host, or
        resolves to a private or reserved address

    """
    parsed = urlparse(url)
    if not parsed.scheme and not parsed.netloc:
        raise NetworkSecurityError(f"Invalid URL format: {url}")

    if parsed.scheme not in ("http", "https"):
        raise NetworkSecurityError(f"Unsupported URL scheme: {parsed.scheme}")

    if require_https and parsed.scheme != "https":
        raise NetworkSecurityError(f"HTTPS required but got: {parsed.scheme}")

    hostname = parsed.hostname
    if not hostname:
        raise NetworkSecurityError("URL missing hostname")

    if parsed.scheme == "http":
        logger.warning(f"Fetching URL over insecure HTTP: {url}")

    normalized = _normalize_hostname(hostname)
    if not _host_allowed(normalized, allowed_hosts):
        raise NetworkSecurityError(f"Hostname not in allowlist: {normalized}")

    for ip in _resolve_hostname_to_ips(normalized):
        if _is_private_or_reserved_ip(ip):
            raise NetworkSecurityError(f"Access to private/reserved IP address blocked: {ip} (hostname: {normalized})")

    logger.debug(f"URL security validation passed for: {url}")


@requires_dependencies("network", DEPS_NETWORK)
def create_secure_http_client(
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    allowed_hosts: list[str] | None = None,
    require_https: bool = False,
    user_agent: str | None = None,
) -> Any:
    """Create an httpx client that validates the URL of every request and redirect.

    Returns
    -------
    httpx.Client
        Client with request/response event hooks enforcing the URL policy

    """
    import httpx

    def validate_request_url(request: Any) -> None:
        validate_url_security(str(request.url), allowed_hosts=allowed_hosts, require_https=require_https)

    def validate_response_redirects(response: Any) -> None:
        if len(response.history) > max_redirects:
            raise NetworkSecurityError(f"Too many redirects: {len(response.history)} > {max_redirects}")
        for hop in response.history:
            validate_url_security(str(hop.url), allowed_hosts=allowed_hosts, require_https=require_https)

    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        event_hooks={"request": [validate_request_url], "response": [validate_response_redirects]},
        headers={"User-Agent": user_agent or os.getenv("PDF_AGENT_USER_AGENT") or DEFAULT_USER_AGENT},
    )


@requires_dependencies("network", DEPS_NETWORK)
def fetch_content_securely(
    url: str,
    allowed_hosts: list[str] | None = None,
    require_https: bool = False,
    max_size_bytes: int = MAX_FILE_SIZE,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    expected_content_types: list[str] | None = None,
    user_agent: str | None = None,
) -> bytes:
    """Stream a URL's body with URL, size and content-type validation.

    Parameters
    ----------
    url : str
        URL to fetch
    allowed_hosts : list[str] | None, default None
        Allowed hostnames or CIDR blocks
    require_https : bool, default False
        Reject plain http URLs
    max_size_bytes : int, default 100MB
        Largest accepted body
    timeout : float, default 30.0
        Request timeout in seconds
    expected_content_types : list[str] | None, default None
        Accepted MIME type prefixes; a missing Content-Type header is accepted
    user_agent : str | None, default None
        User-Agent header override

    Returns
    -------
    bytes
        Response body

    Raises
    ------
    NetworkSecurityError
        If network access is disabled, the URL is rejected, the request
        fails, or the response violates the size or type constraints

    """
    from httpx import HTTPError, HTTPStatusError

    if is_network_disabled():
        raise NetworkSecurityError(f"Network access is globally disabled via {NETWORK_DISABLE_ENV}")

    validate_url_security(url, allowed_hosts=allowed_hosts, require_https=require_https)

    try:
        with create_secure_http_client(
            timeout=timeout, allowed_hosts=allowed_hosts, require_https=require_https, user_agent=user_agent
        ) as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()

                content_type = _parse_content_type(response.headers.get("content-type", ""))
                if (
                    expected_content_types
                    and response.headers.get("content-type")
                    and not any(content_type.startswith(ct) for ct in expected_content_types)
                ):
                    raise NetworkSecurityError(
                        f"URL does not point to an expected content type. Content-Type: {content_type}"
                    )

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_size_bytes:
                    raise NetworkSecurityError(f"File too large: {declared} bytes (max: {max_size_bytes} bytes)")

                chunks = []
                total_size = 0
                for chunk in response.iter_bytes(chunk_size=8192):
                    total_size += len(chunk)
                    if total_size > max_size_bytes:
                        raise NetworkSecurityError(
                            f"File too large: exceeded {max_size_bytes} bytes during download"
                        )
                    chunks.append(chunk)

                if total_size == 0:
                    raise NetworkSecurityError("Empty response received")

                logger.debug(f"Fetched {total_size} bytes from {url}")
                return b"".join(chunks)

    except NetworkSecurityError:
        raise
    except HTTPStatusError as e:
        status = e.response.status_code
        raise NetworkSecurityError(
            f"Failed to download: {status} {e.response.reason_phrase}", original_error=e
        ) from e
    except HTTPError as e:
        raise NetworkSecurityError(f"HTTP request failed for {url}: {e}", original_error=e) from e


def fetch_pdf(
    url: str,
    allowed_hosts: list[str] | None = None,
    max_size_bytes: int = MAX_FILE_SIZE,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> bytes:
    """Download a PDF, rejecting responses that declare a non-PDF content type."""
    return fetch_content_securely(
        url,
        allowed_hosts=allowed_hosts,
        max_size_bytes=max_size_bytes,
        timeout=timeout,
        expected_content_types=[PDF_CONTENT_TYPE],
    )


def filename_from_url(url: str) -> str | None:
    """Return the last path component of a URL if it names a PDF.

    >>> filename_from_url("https://example.com/papers/attention.pdf?dl=1")
    'attention.pdf'
    >>> filename_from_url("https://example.com/download")

    """
    name = unquote(urlparse(url).path).rsplit("/", 1)[-1]
    return name if ".pdf" in name.lower() else None


def is_network_disabled() -> bool:
    """Return True when the global network kill switch is set."""
    return os.getenv(NETWORK_DISABLE_ENV, "").lower() in ("true", "1", "yes", "on")
