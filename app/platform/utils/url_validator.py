from typing import Tuple
from urllib.parse import urlparse


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Shallow shape check used at the HTTP and CLI edges.
    The crawler itself never re-validates what it is given.
    """
    if not url or not url.strip():
        return False, "URL cannot be empty"

    parsed = urlparse(url.strip())

    if parsed.scheme not in ("http", "https"):
        return False, f"Invalid URL scheme: {parsed.scheme or 'none'} (must be http or https)"

    if not parsed.netloc:
        return False, "Invalid URL format: missing domain"

    return True, ""
