"""
=============================================================================
URL PATH → FILESYSTEM PATH
=============================================================================

    URL target          root = /srv/www               result
    ──────────          ───────────────               ──────
    /                   → /index.html (default doc)   /srv/www/index.html
    /css/site.css       strip leading "/"             /srv/www/css/site.css
    //img/a.png         strip ALL leading "/"         /srv/www/img/a.png

Forward slashes become os.sep, so the same URL maps correctly on Windows.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

resolve_path() is a plain join. It does not touch ".." segments:

    GET /../etc/passwd  →  /srv/www/../etc/passwd  →  /etc/passwd

is_within_root() is the check that closes this. The request handler applies
it whenever ServerConfig.confine_to_root is on (the default).

=============================================================================
"""

import os


DEFAULT_DOCUMENT = "index.html"


def resolve_path(url_path: str, root: str, index_file: str = DEFAULT_DOCUMENT) -> str:
    """
    Map a request target onto the document root.

    Pure function: no filesystem access, same inputs give the same output.

    Args:
        url_path: Raw request target, e.g. "/images/logo.png".
        root: Document root directory.
        index_file: Document substituted for "/".

    Returns:
        The joined filesystem path (not normalised).

    Examples:
        >>> resolve_path("/", "/srv/www")
        '/srv/www/index.html'

        >>> resolve_path("/css/site.css", "/srv/www")
        '/srv/www/css/site.css'
    """
    relative = f"/{index_file}" if url_path == "/" else url_path
    relative = relative.lstrip("/").replace("/", os.sep)
    return os.path.join(root, relative)


def is_within_root(path: str, root: str) -> bool:
    """
    True if path, once ".." and symlinks are resolved, is root or lies
    beneath it.
    """
    try:
        real_root = os.path.realpath(root)
        real_path = os.path.realpath(path)
        return os.path.commonpath([real_root, real_path]) == real_root
    except ValueError:
        # Embedded NUL byte, or different drives on Windows
        return False
