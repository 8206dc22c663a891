# spotlight/utils/validators.py
"""
URL validation for redirect targets and sponsor-supplied creative assets.
"""

from typing import Optional, Tuple
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

ALLOWED_SCHEMES = ("http", "https")

# Hosts that serve images from extension-less URLs (signed/storage links).
TRUSTED_ASSET_HOSTS = (
    "storage.googleapis.com",
    "supabase.co",
    "amazonaws.com",
    "cloudinary.com",
    "imgur.com",
    "drive.google.com",
    "dropbox.com",
)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".avif")


def _hostname(parsed) -> str:
    return (parsed.hostname or "").lower()


def validate_url(url: str, field_name: str = "url") -> Tuple[bool, Optional[str]]:
    """
    Validate an absolute http(s) URL.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url:
        return False, f"{field_name} is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"{field_name} exceeds maximum length of {MAX_URL_LENGTH} characters"

    try:
        parsed = urlparse(url)
    except ValueError:
        return False, f"Invalid {field_name} format"

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False, f"{field_name} must use HTTP or HTTPS"

    if not _hostname(parsed):
        return False, f"{field_name} must have a valid hostname"

    return True, None


def is_trusted_asset_host(hostname: str) -> bool:
    hostname = hostname.lower()
    return any(hostname == host or hostname.endswith(f".{host}") for host in TRUSTED_ASSET_HOSTS)


def validate_asset_url(url: Optional[str], field_name: str = "asset_url") -> Tuple[bool, Optional[str]]:
    """
    Validate an optional creative asset URL.

    Trusted storage hosts are accepted as-is; any other host must point at
    a file with an image extension.
    """
    if not url:
        return True, None  # Optional field

    valid, error = validate_url(url, field_name)
    if not valid:
        return valid, error

    parsed = urlparse(url)
    if is_trusted_asset_host(_hostname(parsed)):
        return True, None

    if not parsed.path.lower().endswith(IMAGE_EXTENSIONS):
        return False, (
            f"{field_name} must be an image ({', '.join(IMAGE_EXTENSIONS)}) "
            "or hosted on a supported storage provider"
        )

    return True, None
