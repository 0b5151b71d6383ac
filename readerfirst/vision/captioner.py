"""
Image captioning for rendered documents.

Images embedded as data URLs are sent to a vision-capable chat model and the
returned caption is written back as alt text and a figcaption.
"""

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from readerfirst.core.exceptions import BackendError
from readerfirst.document.html import IMAGE_ATTR
from readerfirst.utils.http import ChatCompletionClient, status_of

logger = logging.getLogger(__name__)

CAPTION_LANGUAGES = {
    "en": "English",
    "pt": "Brazilian Portuguese",
}
DEFAULT_CAPTIONS = {
    "en": "Document image",
    "pt": "Imagem do documento",
}


class ImageCaptioner(ChatCompletionClient):
    """Short natural-language captions for document images."""

    name = "openai"

    async def caption(self, image_data_url: str, lang: str = "en") -> str:
        if lang not in CAPTION_LANGUAGES:
            raise ValueError(f"Unsupported caption language: {lang}")

        payload = {
            "max_tokens": 80,
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": f"Create a short natural {CAPTION_LANGUAGES[lang]} caption for this document image.",
                    },
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            }],
        }
        try:
            content = await self.chat(payload)
        except httpx.HTTPError as e:
            raise BackendError(self.name, str(e), original_error=e, status_code=status_of(e)) from e

        return (content or "").strip() or DEFAULT_CAPTIONS[lang]


async def enrich_images_with_captions(html: str, captioner: Optional[ImageCaptioner] = None) -> str:
    """
    Caption every marked data-URL image in the HTML.

    Returns the HTML unchanged when no API key is configured. A failure on
    one image is logged and that image is left as it was.
    """
    captioner = captioner or ImageCaptioner()
    if not captioner.api_key:
        return html

    soup = BeautifulSoup(f"<article>{html}</article>", "html.parser")
    captioned = 0

    for img in soup.article.find_all("img", attrs={IMAGE_ATTR: "1"}):
        src = img.get("src") or ""
        if not src.startswith("data:image"):
            continue

        try:
            caption_en = await captioner.caption(src, "en")
            caption_pt = await captioner.caption(src, "pt")
        except BackendError as e:
            logger.warning(f"Skipping image caption: {e.message}")
            continue

        img["alt"] = caption_en
        img["data-alt-en"] = caption_en
        img["data-alt-pt"] = caption_pt

        figure = img.find_parent("figure")
        if figure is not None:
            figcaption = figure.find("figcaption")
            if figcaption is None:
                figcaption = soup.new_tag("figcaption")
                figure.append(figcaption)
            figcaption.string = caption_en
        captioned += 1

    logger.info(f"Captioned {captioned} images")
    return soup.article.decode_contents()
