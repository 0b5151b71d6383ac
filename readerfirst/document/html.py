"""
HTML collaborators around the AI pipelines.

The reader hands us rendered HTML; these helpers mark translatable chunks,
collect the outline, and put translated text back into the marked nodes.
"""

import logging
import re
from typing import List, Sequence

from bs4 import BeautifulSoup

from readerfirst.core.models import HeadingItem, ParsedDocument

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3"]
CHUNK_TAGS = ["p", "li", "blockquote", "h1", "h2", "h3"]
CHUNK_ATTR = "data-chunk"
IMAGE_ATTR = "data-readerfirst-image"


def _article(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(f"<article>{html}</article>", "html.parser")
    return soup


def _slugify(text: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    return re.sub(r"\s+", "-", slug)


def build_headings(soup: BeautifulSoup) -> List[HeadingItem]:
    """Assign ids to h1-h3 and return the outline in document order."""
    headings: List[HeadingItem] = []
    for heading in soup.article.find_all(HEADING_TAGS):
        text = heading.get_text().strip() or "Section"
        heading_id = f"{_slugify(text)}-{len(headings)}"
        heading["id"] = heading_id
        headings.append(HeadingItem(id=heading_id, text=text, level=int(heading.name[1])))
    return headings


def _prepare_images(soup: BeautifulSoup) -> None:
    for img in soup.article.find_all("img"):
        if img.find_parent("figure") is None:
            img.wrap(soup.new_tag("figure"))
        img["loading"] = "lazy"
        img[IMAGE_ATTR] = "1"
        if not img.get("alt"):
            img["alt"] = "Document image"


def parse_html_document(html: str, title_fallback: str = "Document") -> ParsedDocument:
    """
    Turn rendered HTML into the document shape consumed by the pipelines.

    Every non-empty p, li, blockquote and h1-h3 gets a data-chunk index
    matching its position in text_chunks.
    """
    soup = _article(html)
    _prepare_images(soup)
    headings = build_headings(soup)

    text_chunks: List[str] = []
    for node in soup.article.find_all(CHUNK_TAGS):
        text = node.get_text().strip()
        if text:
            text_chunks.append(text)
            node[CHUNK_ATTR] = str(len(text_chunks) - 1)

    logger.debug(f"Parsed document: {len(headings)} headings, {len(text_chunks)} chunks")

    return ParsedDocument(
        title=headings[0].text if headings else title_fallback,
        html=soup.article.decode_contents(),
        headings=headings,
        text_chunks=text_chunks,
    )


def replace_chunk_text(html: str, translated: Sequence[str]) -> str:
    """
    Substitute each marked node's text with the translation at its index.

    Nodes whose index is out of range, unparsable, or whose translation is
    empty keep their original text.
    """
    soup = _article(html)
    for node in soup.article.find_all(attrs={CHUNK_ATTR: True}):
        try:
            idx = int(node[CHUNK_ATTR])
        except ValueError:
            continue
        if 0 <= idx < len(translated) and translated[idx]:
            node.string = translated[idx]
    return soup.article.decode_contents()
