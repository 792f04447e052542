from __future__ import annotations

import pytest

from mcp_perf_log_server.core.classifier import classify_url
from mcp_perf_log_server.core.models import ResourceType


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://x.com/static/app.js", ResourceType.SCRIPT),
        ("https://x.com/static/APP.JS?v=3", ResourceType.SCRIPT),
        ("https://x.com/site.css", ResourceType.STYLESHEET),
        ("https://x.com/fonts/inter.woff2", ResourceType.FONT),
        ("https://x.com/fonts/mono.ttf", ResourceType.FONT),
        ("https://x.com/img/logo.svg", ResourceType.IMAGE),
        ("https://x.com/img/hero.jpeg", ResourceType.IMAGE),
        ("https://x.com/api/items", ResourceType.API),
        ("https://api.example.org/items", ResourceType.API),
        ("https://x.com/v1/users", ResourceType.API),
        ("https://cdn.polyfill.io/v3/features", ResourceType.POLYFILL),
        ("https://x.com/index.html", ResourceType.PAGE),
        ("http://localhost:3000/", ResourceType.PAGE),
        ("http://intranet", ResourceType.PAGE),
        ("https://x.com/", ResourceType.OTHER),
        ("", ResourceType.OTHER),
    ],
)
def test_classify_url(url: str, expected: ResourceType) -> None:
    assert classify_url(url) is expected


def test_classify_url_rule_order_is_significant() -> None:
    # ".js" is checked first and is a substring of ".json".
    assert classify_url("https://x.com/data.json") is ResourceType.SCRIPT
    # Script rule beats the API rule.
    assert classify_url("https://x.com/api/bundle.js") is ResourceType.SCRIPT


def test_resource_type_labels() -> None:
    assert [t.value for t in ResourceType] == [
        "JavaScript",
        "CSS",
        "Font",
        "Image",
        "API",
        "Polyfill",
        "HTML",
        "Other",
    ]
