"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the MIME type sent in the Content-Type header.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    SUPPORTED TYPES                                 │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  .html .htm     → text/html                                        │
    │  .css           → text/css                                         │
    │  .js            → application/javascript                           │
    │  .png           → image/png                                        │
    │  .jpg .jpeg     → image/jpeg                                       │
    │  anything else  → application/octet-stream                         │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The lookup is case-insensitive on the extension (INDEX.HTML is text/html)
and never fails: unknown, missing or odd extensions all fall back to
application/octet-stream, which browsers treat as "download, don't render".

The Content-Type is sent bare, without a charset parameter.

=============================================================================
"""

from pathlib import Path


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Keys are lowercase extensions including the dot.
#
# =============================================================================

MIME_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name with extension.

    Returns:
        The MIME type string.

    Examples:
        >>> get_mime_type("style.css")
        'text/css'

        >>> get_mime_type("/var/www/PHOTO.JPEG")
        'image/jpeg'

        >>> get_mime_type("README")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
