from __future__ import annotations

import re
import warnings

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup, Tag, XMLParsedAsHTMLWarning
from bs4.element import PreformattedString

from .errors import MarkupError


_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}

# tags that close a paragraph-like block once their children are done
_PARAGRAPH_TAGS = {"p", "div", "li"} | _HEADING_TAGS

# tags that start a new line before their children
_BLOCK_TAGS = _PARAGRAPH_TAGS | {"br", "hr"}

_WHITESPACE = re.compile(r"\s+")


class HTMLTextExtractor:
    """Pre-order walk over a parsed document, emitting text and line breaks.

    The walk keeps its own stack so unclosed ``<p>`` runs, which the
    html.parser builder nests inside each other, are not bounded by the
    interpreter's recursion limit.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def visit(self, root) -> None:
        # (node, closing): closing entries emit the break after a paragraph's children
        stack = [(root, False)]
        while stack:
            node, closing = stack.pop()
            if closing:
                self._chunks.append("\n")
                continue

            if isinstance(node, NavigableString):
                # comments, doctypes, CDATA and processing instructions carry no text
                if isinstance(node, PreformattedString):
                    continue
                text = _WHITESPACE.sub(" ", str(node)).strip()
                if text:
                    self._chunks.append(text)
                    self._chunks.append(" ")
                continue

            if not isinstance(node, Tag):
                continue
            name = (node.name or "").lower()
            if name in _BLOCK_TAGS:
                self._chunks.append("\n")
            if name in _PARAGRAPH_TAGS:
                stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.contents))

    def get_text(self) -> str:
        return "".join(self._chunks)


def normalize_lines(text: str) -> str:
    lines = []
    for raw in text.split("\n"):
        line = _WHITESPACE.sub(" ", raw).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)


def parse_markup(markup: bytes | str) -> BeautifulSoup:
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
            return BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as e:
        raise MarkupError(f"failed to parse HTML: {e}") from e


def html_to_text(markup: bytes | str) -> str:
    soup = parse_markup(markup)
    extractor = HTMLTextExtractor()
    extractor.visit(soup)
    return normalize_lines(extractor.get_text())
