"""Plain text extraction from Logos rich text markup."""
from __future__ import annotations

from html.parser import HTMLParser
from typing import List, Optional, Tuple


class _RunTextCollector(HTMLParser):
    """Collects the ``Text`` attribute of every element in document order."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        # Attribute names arrive lower-cased.
        for name, value in attrs:
            if name == "text" and value is not None:
                self.parts.append(value)


def extract_text_from_rich_text(rich_text: object) -> str:
    """Return the plain text carried by a rich text payload.

    Anything that is not a string, or that holds no text runs, yields ``""``.
    """

    if not rich_text or not isinstance(rich_text, str):
        return ""

    collector = _RunTextCollector()
    try:
        collector.feed(rich_text)
        collector.close()
    except (AssertionError, ValueError):
        return ""
    return "".join(collector.parts).strip()
