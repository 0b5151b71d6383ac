"""Section splitting and merging for the enhancement pass."""

import html
import re
from typing import List, Sequence

from bs4 import BeautifulSoup

SECTION_HEADINGS = {"h1", "h2", "h3"}


def split_sections(document_html: str) -> List[str]:
    """
    Split HTML into sections at top-level h1-h3 boundaries.

    A section is a heading plus the sibling elements that follow it, up to the
    next heading. Content before the first heading forms its own section.

    >>> split_sections("<h1>A</h1><p>x</p><h2>B</h2><p>y</p>")
    ['<h1>A</h1><p>x</p>', '<h2>B</h2><p>y</p>']
    """
    soup = BeautifulSoup(f"<article>{document_html}</article>", "html.parser")
    article = soup.article
    if article is None:
        return [document_html]

    sections: List[str] = []
    bucket: List[str] = []

    for element in article.find_all(recursive=False):
        if element.name in SECTION_HEADINGS and bucket:
            sections.append("".join(bucket))
            bucket = []
        bucket.append(str(element))

    if bucket:
        sections.append("".join(bucket))
    return sections or [document_html]


def strip_tags(fragment: str) -> str:
    """Plain text of an HTML fragment with whitespace collapsed."""
    plain = re.sub(r"<[^>]+>", " ", fragment)
    return re.sub(r"\s+", " ", plain).strip()


def merge_enhanced_document(
    sections_html: Sequence[str],
    summary: str,
    takeaways: Sequence[str],
    glossary_found: Sequence[str],
) -> str:
    """Prepend one summary block to the concatenated section HTML."""
    parts = [
        '<section class="ai-summary">',
        "<h2>Executive Summary</h2>",
        f"<p>{html.escape(summary)}</p>",
    ]
    if takeaways:
        items = "".join(f"<li>{html.escape(t)}</li>" for t in takeaways)
        parts.append(f"<h3>Key Takeaways</h3><ul>{items}</ul>")
    if glossary_found:
        parts.append(f"<h3>Glossary Focus</h3><p>{html.escape(', '.join(glossary_found))}</p>")
    parts.append("</section>")

    return "".join(parts) + "".join(sections_html)
