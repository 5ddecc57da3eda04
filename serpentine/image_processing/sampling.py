"""Image loading and grid sampling.

AIDEV-NOTE: The image is drawn twice: first resized to the output canvas
size (LANCZOS), then box-averaged down to exactly columns x rows cells.
Each cell becomes one PixelData. The tile size is returned on the
SampledImage rather than written back into Settings.
"""

import base64
import binascii
import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from serpentine.models import PixelData, ProcessingMode, SampledImage, Settings

from .colors import LUMA_B, LUMA_G, LUMA_R
from .errors import ImageLoadError, RenderSurfaceError
from .utils import calculate_output_dimensions

logger = logging.getLogger(__name__)

ImageSource = str | Path | bytes | Image.Image


def _decode_data_url(data_url: str) -> bytes:
    """Return the payload of a base64 data URL."""
    header, _, payload = data_url.partition(",")
    if not payload or ";base64" not in header:
        raise ImageLoadError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError(f"Invalid data URL payload: {e}") from e


def load_image(source: ImageSource) -> Image.Image:
    """Load and validate an image.

    Args:
        source: File path, raw encoded bytes, base64 data URL or an
            already opened PIL image

    Returns:
        PIL Image in RGBA mode

    Raises:
        ImageLoadError: If the source cannot be read or decoded
    """
    try:
        if isinstance(source, Image.Image):
            image = source
        elif isinstance(source, bytes):
            image = Image.open(io.BytesIO(source))
        elif isinstance(source, str) and source.startswith("data:"):
            image = Image.open(io.BytesIO(_decode_data_url(source)))
        else:
            image = Image.open(source)
        # Force decode now so truncated files fail here, not mid-pipeline
        image.load()
        # AIDEV-NOTE: Always convert to RGBA for consistent processing
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return image
    except ImageLoadError:
        raise
    except (
        OSError,
        UnidentifiedImageError,
        ValueError,
        Image.DecompressionBombError,
    ) as e:
        raise ImageLoadError(f"Failed to load image: {e}") from e


def _resize(image: Image.Image, size: "tuple[int, int]", resample) -> Image.Image:
    try:
        return image.resize(size, resample)
    except (ValueError, OSError, MemoryError) as e:
        raise RenderSurfaceError(
            f"Could not create {size[0]}x{size[1]} raster surface: {e}"
        ) from e


def compute_brightness(rgba: np.ndarray) -> np.ndarray:
    """Alpha-scaled luma brightness for an (..., 4) RGBA array.

    Returns:
        Integer array in [0, 255], rounded half-up
    """
    rgba = rgba.astype(np.float64)
    luma = rgba[..., 0] * LUMA_R + rgba[..., 1] * LUMA_G + rgba[..., 2] * LUMA_B
    alpha = rgba[..., 3] / 255.0
    brightness = np.floor(luma * alpha + 0.5)
    return np.clip(brightness, 0, 255).astype(np.int64)


def sample_image(image: Image.Image, settings: Settings) -> SampledImage:
    """Sample an image onto the settings' column x row grid.

    Args:
        image: Source image (any mode, converted to RGBA)
        settings: Processing settings (grid counts, threshold, mode)

    Returns:
        SampledImage with retained pixels and computed tile size

    Raises:
        RenderSurfaceError: If an intermediate raster cannot be created
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")

    original_width, original_height = image.size
    if original_width < 1 or original_height < 1:
        raise RenderSurfaceError(
            f"Cannot sample an empty image ({original_width}x{original_height})"
        )

    columns = settings.columns_count
    rows = settings.rows_count
    output_width, output_height, tile_width, tile_height = (
        calculate_output_dimensions(original_width, original_height, columns, rows)
    )

    resized = _resize(
        image, (output_width, output_height), Image.Resampling.LANCZOS
    )
    grid = _resize(resized, (columns, rows), Image.Resampling.BOX)
    rgba = np.asarray(grid, dtype=np.uint8)

    brightness = compute_brightness(rgba)
    if settings.invert:
        brightness = 255 - brightness

    threshold = settings.brightness_threshold
    if settings.processing_mode is ProcessingMode.CMYK:
        keep = np.ones(brightness.shape, dtype=bool)
    elif settings.invert:
        keep = brightness >= threshold
    else:
        keep = brightness <= threshold

    pixels = []
    for y in range(rows):
        for x in range(columns):
            if not keep[y, x]:
                continue
            r, g, b, a = (int(v) for v in rgba[y, x])
            pixels.append(
                PixelData(
                    x=x,
                    y=y,
                    brightness=int(brightness[y, x]),
                    r=r,
                    g=g,
                    b=b,
                    a=a,
                )
            )

    logger.info(
        "Sampled %dx%d grid from %dx%d image: %d of %d cells retained",
        columns,
        rows,
        original_width,
        original_height,
        len(pixels),
        columns * rows,
    )

    return SampledImage(
        pixels=pixels,
        grid_width=columns,
        grid_height=rows,
        original_width=original_width,
        original_height=original_height,
        resized_width=output_width,
        resized_height=output_height,
        output_width=output_width,
        output_height=output_height,
        tile_width=tile_width,
        tile_height=tile_height,
    )
