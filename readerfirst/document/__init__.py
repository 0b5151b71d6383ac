"""HTML document helpers."""

from .html import parse_html_document, replace_chunk_text, build_headings

__all__ = ["parse_html_document", "replace_chunk_text", "build_headings"]
