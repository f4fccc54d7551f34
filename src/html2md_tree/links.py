"""Rewrite root-relative links so they point at a fixed domain."""

from __future__ import annotations

from bs4 import BeautifulSoup

_LINK_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("a", "href"),
    ("img", "src"),
)


def is_root_relative(value: str) -> bool:
    return value.startswith("/") and not value.startswith("//")


def rewrite_links(html: str, domain: str) -> str:
    """Prefix every root-relative ``a[href]`` and ``img[src]`` with ``domain``.

    No scheme is added, so ``/docs/page`` under ``example.com`` becomes
    ``example.com/docs/page``. Absolute, document-relative and protocol-relative
    links are left alone.
    """
    if not domain:
        return html
    prefix = domain.rstrip("/")
    soup = BeautifulSoup(html, "html.parser")
    for tag_name, attribute in _LINK_ATTRIBUTES:
        for element in soup.find_all(tag_name):
            value = element.get(attribute)
            if isinstance(value, str) and is_root_relative(value):
                element[attribute] = prefix + value
    return str(soup)
