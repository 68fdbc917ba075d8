"""Reduce chapter XHTML to paired plain-text and markup paragraphs."""

import copy
import html
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from book_extract.models.extraction import SegmentationTier, TitleSource

# Text inside these elements is never reader-visible
_INVISIBLE_TAGS = {"script", "style", "template"}
_BLANK_LINE_RE = re.compile(r"\n\s*\n")


def normalize_text(text: str) -> str:
    """Turn non-breaking spaces into spaces and trim."""
    return text.replace("\xa0", " ").strip()


def element_text(node: Tag) -> str:
    """Plain text of an element: ``<br>`` becomes a newline, tags vanish.

    Entities are already decoded by the parser; comments, CDATA and
    script/style content are skipped.
    """
    parts: list[str] = []
    for child in node.descendants:
        if isinstance(child, Tag):
            if child.name == "br":
                parts.append("\n")
        elif isinstance(child, NavigableString) and not isinstance(
            child, PreformattedString
        ):
            if child.parent is not None and child.parent.name in _INVISIBLE_TAGS:
                continue
            parts.append(str(child))
    return normalize_text("".join(parts))


def strip_markup(markup: str) -> str:
    """Plain text of a markup fragment."""
    return element_text(BeautifulSoup(markup, "html.parser"))


@dataclass
class ChapterExtraction:
    """Result of running the title and segmentation heuristics on one file."""

    title: str = ""
    title_source: TitleSource | None = None
    paragraphs: list[str] = field(default_factory=list)
    html_paragraphs: list[str] = field(default_factory=list)
    segmentation: SegmentationTier | None = None

    @property
    def is_empty(self) -> bool:
        return not self.paragraphs


class MarkupDocument:
    """Tolerant element lookup over one (X)HTML document.

    ``html.parser`` is used rather than lxml's HTML builder because the
    latter wraps stray body text in implied ``<p>`` elements, which would
    defeat the segmentation tiers.
    """

    def __init__(self, markup: bytes | str):
        self.soup = BeautifulSoup(markup, "html.parser")

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def find_all(self, name: str | list[str], attrs: dict | None = None) -> list[Tag]:
        """All elements in the body matching a tag name and attribute filter."""
        return self.body.find_all(name, attrs=attrs or {})

    def find_first(self, name: str | list[str]) -> Tag | None:
        """First element anywhere in the document, in document order."""
        return self.soup.find(name)

    def blocks(self, name: str) -> list[Tag]:
        """Blocks of a kind in document order, each holding only its own content.

        A block with no nested block of the same kind is returned as is. One
        that does (an unclosed ``<p>`` swallowing its successors, a ``<div>``
        mixing loose text with child divs) is split: each run of content
        between nested blocks becomes a detached copy of the outer tag, and
        the nested blocks follow in their own place.
        """
        blocks: list[Tag] = []
        for element in self.find_all(name):
            if element.find_parent(name) is None:
                self._split_block(element, element, name, blocks)
        return blocks

    def _split_block(self, node: Tag, owner: Tag, name: str, out: list[Tag]) -> None:
        if node is owner and node.find(name) is None:
            out.append(node)
            return
        run: list = []
        for child in node.children:
            if isinstance(child, Tag) and (child.name == name or child.find(name)):
                self._flush_run(owner, run, out)
                run = []
                self._split_block(child, child if child.name == name else owner, name, out)
            else:
                run.append(child)
        self._flush_run(owner, run, out)

    def _flush_run(self, owner: Tag, run: list, out: list[Tag]) -> None:
        if not run:
            return
        shell = self.soup.new_tag(owner.name, attrs=dict(owner.attrs))
        for node in run:
            shell.append(copy.copy(node))
        out.append(shell)

    def extract_title(self, max_length: int = 200) -> tuple[str, TitleSource | None]:
        """Chapter title from ``<title>``, then the first ``<h1>``/``<h2>``."""
        title_tag = self.find_first("title")
        if title_tag is not None:
            text = _collapse(element_text(title_tag))
            if text and text.lower() != "untitled" and len(text) < max_length:
                return text, TitleSource.TITLE_TAG

        heading = self.find_first(["h1", "h2"])
        if heading is not None:
            text = _collapse(element_text(heading))
            if text and len(text) < max_length:
                return text, TitleSource.HEADING

        return "", None

    def extract_paragraphs(
        self,
    ) -> tuple[list[str], list[str], SegmentationTier | None]:
        """Segment the body into paragraphs; the first non-empty tier wins.

        The html form of a block is BeautifulSoup's serialization of it,
        not a byte slice of the source: entities other than the markup
        escapes come back decoded (``&nbsp;`` as U+00A0) and attribute
        quoting is normalized.

        Returns:
            (plain paragraphs, html paragraphs, tier used)
        """
        for tier, name in (
            (SegmentationTier.PARAGRAPH, "p"),
            (SegmentationTier.DIV, "div"),
        ):
            plain: list[str] = []
            markup: list[str] = []
            for block in self.blocks(name):
                text = element_text(block)
                if text:
                    plain.append(text)
                    markup.append(str(block).strip())
            if plain:
                return plain, markup, tier

        # Last resort: whole body text split on blank lines
        lines = [
            line.strip() for line in _BLANK_LINE_RE.split(element_text(self.body))
        ]
        lines = [line for line in lines if line]
        if not lines:
            return [], [], None
        return (
            lines,
            [f"<p>{html.escape(line, quote=False)}</p>" for line in lines],
            SegmentationTier.TEXT_BLOCK,
        )

    def extract_chapter(self, max_title_length: int = 200) -> ChapterExtraction:
        title, title_source = self.extract_title(max_title_length)
        plain, markup, tier = self.extract_paragraphs()
        return ChapterExtraction(
            title=title,
            title_source=title_source,
            paragraphs=plain,
            html_paragraphs=markup,
            segmentation=tier,
        )


def _collapse(text: str) -> str:
    return " ".join(text.split())
