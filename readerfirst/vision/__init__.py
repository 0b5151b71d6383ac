"""Image captioning."""

from readerfirst.vision.captioner import ImageCaptioner, enrich_images_with_captions

__all__ = ["ImageCaptioner", "enrich_images_with_captions"]
