"""
Callback URL of a receiver service.
"""
from typing import Any, Dict

from ..errors import PlatformError


def with_scheme(address: str, ssl_verify: bool) -> str:
    """Force the scheme of an address, which may be a bare domain."""
    scheme = "https" if ssl_verify else "http"
    _, separator, rest = address.partition("://")
    host = rest if separator else address
    return f"{scheme}://{host}"


def webhook_url(service: Dict[str, Any], ssl_verify: bool) -> str:
    """URL the git provider should deliver events to."""
    status = service.get("status") or {}
    address = (
        status.get("domain")
        or status.get("url")
        or (status.get("address") or {}).get("url")
    )
    if not address:
        name = service.get("metadata", {}).get("name")
        raise PlatformError(f"receiver service {name} has no address")
    return with_scheme(address, ssl_verify)
