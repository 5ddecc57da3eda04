"""Main image processor orchestrating the complete pipeline.

AIDEV-NOTE: This module handles the complete pipeline from a raster image
to serpentine SVG artwork: load -> sample grid -> mode processor (color
groups) -> SVG. Each run works on its own buffers and a Settings
snapshot, so a newer run simply supersedes an older one.
"""

import asyncio
import dataclasses
import logging

from PIL import Image

from serpentine.models import ColorGroup, ImageData, SampledImage, Settings

from .errors import ProcessingError, SerpentineError
from .extraction import extract_all_color_groups, extract_color_group_svg
from .modes import build_color_groups
from .sampling import ImageSource, load_image, sample_image
from .svg_builder import generate_svg

logger = logging.getLogger(__name__)


def quantize(image_data: ImageData, settings: Settings) -> "dict[str, ColorGroup]":
    """Run the mode processor, surfacing failures as ProcessingError."""
    try:
        color_groups = build_color_groups(image_data, settings)
    except SerpentineError:
        raise
    except Exception as e:
        raise ProcessingError(
            f"{settings.processing_mode.value} processing failed: {e}"
        ) from e
    logger.info(
        "Built %d %s color groups",
        len(color_groups),
        settings.processing_mode.value,
    )
    return color_groups


class ImageProcessor:
    """Processes images into serpentine color groups and SVG output."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def load_image(self, source: ImageSource) -> Image.Image:
        """Load and validate an image.

        Args:
            source: File path, encoded bytes, base64 data URL or PIL image

        Returns:
            PIL Image in RGBA mode

        Raises:
            ImageLoadError: If the source cannot be decoded
        """
        image = load_image(source)
        logger.info("Loaded image with size: %dx%d pixels", *image.size)
        return image

    def sample(self, image: Image.Image) -> SampledImage:
        """Sample the image onto the configured grid."""
        return sample_image(image, self.settings)

    def _prepare(self, source: ImageSource) -> ImageData:
        self.settings.validate()
        image = self.load_image(source)
        return ImageData.from_sample(self.sample(image))

    def process(self, source: ImageSource) -> ImageData:
        """Execute the complete image processing pipeline.

        Args:
            source: Input image

        Returns:
            ImageData with sampled pixels and color groups

        Raises:
            ImageLoadError: Image could not be decoded
            RenderSurfaceError: Resampling surface could not be created
            ProcessingError: Settings are malformed or quantization failed
        """
        image_data = self._prepare(source)
        image_data.color_groups = quantize(image_data, self.settings)
        return image_data

    async def process_async(self, source: ImageSource) -> ImageData:
        """Asynchronous variant of process().

        Decoding and sampling happen first; the quantization step is
        deferred to the next turn of the event loop.
        """
        image_data = self._prepare(source)
        await asyncio.sleep(0)
        image_data.color_groups = quantize(image_data, self.settings)
        return image_data

    def regenerate(
        self, image_data: ImageData, settings: Settings | None = None
    ) -> ImageData:
        """Rebuild color groups for already sampled data.

        Use when only non-sampling settings (mode, colors, densities)
        changed. Returns a new ImageData; the input is left untouched.

        Args:
            image_data: Result of an earlier process() call
            settings: New settings to adopt before rebuilding
        """
        if settings is not None:
            self.settings = settings
        self.settings.validate()
        color_groups = quantize(image_data, self.settings)
        return dataclasses.replace(image_data, color_groups=color_groups)

    def generate_svg(self, image_data: ImageData, background: str | None = None) -> str:
        """Render processed data to SVG with the current settings."""
        return generate_svg(image_data, self.settings, background=background)

    def extract_color_group(self, svg_content: str, color_key: str) -> str | None:
        """Standalone SVG for one color group, or None."""
        return extract_color_group_svg(svg_content, color_key)

    def extract_all_color_groups(self, svg_content: str) -> "dict[str, str]":
        """Standalone SVGs for every color group."""
        return extract_all_color_groups(svg_content)


def process_image(source: ImageSource, settings: Settings) -> ImageData:
    """Process an image with the given settings."""
    return ImageProcessor(settings).process(source)


async def process_image_async(source: ImageSource, settings: Settings) -> ImageData:
    """Asynchronously process an image with the given settings."""
    return await ImageProcessor(settings).process_async(source)
