"""Deep links into the Logos desktop application."""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from .models import UNKNOWN

QUERY_LENGTH = 50
MIN_WORD_BREAK = 10
RESOURCE_PREFIX = "LLS:"

# Characters left unescaped by JavaScript's encodeURIComponent.
_UNRESERVED = "-_.!~*'()"


def search_query(text: str) -> str:
    """Cut ``text`` down to a short phrase that ends on a whole word."""

    query = text[:QUERY_LENGTH].strip()
    if len(text) > QUERY_LENGTH and not text[QUERY_LENGTH].isspace():
        last_space = query.rfind(" ")
        if last_space > MIN_WORD_BREAK:
            query = query[:last_space]
    return query


def create_logos_link(resource_id: Optional[str], search_text: Optional[str] = None) -> str:
    """Return a ``logosres:`` or ``logos4:Search`` URI for ``resource_id``.

    With ``search_text`` the link runs an exact-phrase search inside the
    resource. Missing or unknown resources produce an empty string.
    """

    if not resource_id or resource_id == UNKNOWN:
        return ""

    if search_text:
        encoded = quote(f'"{search_query(search_text)}"', safe=_UNRESERVED)
        # "|" and "=" inside the scope are written as $7C and $3D.
        return (
            f"logos4:Search;kind=BasicSearch;q={encoded};syntax=v2;"
            f"in=raw:Single$7CResourceId$3D{resource_id}"
        )

    clean_id = resource_id[len(RESOURCE_PREFIX):] if resource_id.startswith(RESOURCE_PREFIX) else resource_id
    return f"logosres:{clean_id}"
