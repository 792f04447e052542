"""URL to resource-type classification."""

from __future__ import annotations

from collections.abc import Sequence

from .models import ResourceType

# Checked in order; the first rule with a matching marker wins.
_RULES: Sequence[tuple[ResourceType, Sequence[str]]] = (
    (ResourceType.SCRIPT, (".js",)),
    (ResourceType.STYLESHEET, (".css",)),
    (ResourceType.FONT, (".woff", ".woff2", ".ttf")),
    (ResourceType.IMAGE, (".jpg", ".jpeg", ".png", ".webp", ".svg")),
    (ResourceType.API, ("/api/", "api.", ".com/v")),
    (ResourceType.POLYFILL, ("polyfill",)),
    (ResourceType.PAGE, (".html", "localhost")),
)


def classify_url(url: str) -> ResourceType:
    """Map a URL to a coarse resource type using case-insensitive substring tests."""
    if not url or not isinstance(url, str):
        return ResourceType.OTHER

    s = url.lower()
    for resource_type, markers in _RULES:
        if any(marker in s for marker in markers):
            return resource_type

    # Bare host-style references ("http://intranet") are treated as pages.
    if "http" in s and "." not in s:
        return ResourceType.PAGE
    return ResourceType.OTHER
