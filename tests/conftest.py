"""Shared test fixtures."""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET

import pytest
from PIL import Image

from serpentine.models import ImageData, PixelData

SVG_NS = "{http://www.w3.org/2000/svg}"

_PATH_TOKEN_RE = re.compile(r"[MLCZ]|-?\d*\.?\d+(?:[eE][-+]?\d+)?", re.IGNORECASE)


def parse_path_data(d: str) -> list[tuple[str, list[float]]]:
    """Split path data into (command, numbers) pairs."""
    commands: list[tuple[str, list[float]]] = []
    for token in _PATH_TOKEN_RE.findall(d.replace(",", " ")):
        if token.isalpha():
            commands.append((token, []))
        else:
            assert commands, f"number before first command in {d!r}"
            commands[-1][1].append(float(token))
    return commands


def make_image_data(
    pixels: list[PixelData],
    width: int,
    height: int,
    tile_width: float = 10.0,
    tile_height: float = 10.0,
) -> ImageData:
    """ImageData for a hand-built pixel grid."""
    return ImageData(
        width=width,
        height=height,
        pixels=pixels,
        original_width=width,
        original_height=height,
        resized_width=int(width * tile_width),
        resized_height=int(height * tile_height),
        output_width=int(width * tile_width),
        output_height=int(height * tile_height),
        columns_count=width,
        rows_count=height,
        tile_width=tile_width,
        tile_height=tile_height,
    )


def gray_pixel(x: int, y: int, brightness: int) -> PixelData:
    return PixelData(
        x=x, y=y, brightness=brightness, r=brightness, g=brightness, b=brightness, a=255
    )


def rgb_pixel(x: int, y: int, r: int, g: int, b: int) -> PixelData:
    brightness = int(round(0.299 * r + 0.587 * g + 0.114 * b))
    return PixelData(x=x, y=y, brightness=brightness, r=r, g=g, b=b, a=255)


def svg_groups(svg_text: str) -> list[ET.Element]:
    root = ET.fromstring(svg_text)
    return [e for e in root.iter() if e.tag in ("g", f"{SVG_NS}g")]


def svg_paths(element: ET.Element) -> list[ET.Element]:
    return [e for e in element.iter() if e.tag in ("path", f"{SVG_NS}path")]


@pytest.fixture
def gray_2x2() -> ImageData:
    """2x2 grid with brightness 0, 85, 170, 255."""
    pixels = [
        gray_pixel(0, 0, 0),
        gray_pixel(1, 0, 85),
        gray_pixel(0, 1, 170),
        gray_pixel(1, 1, 255),
    ]
    return make_image_data(pixels, 2, 2)


@pytest.fixture
def gradient_image() -> Image.Image:
    """40x20 horizontal black-to-white gradient."""
    image = Image.new("RGB", (40, 20))
    for x in range(40):
        value = int(x * 255 / 39)
        for y in range(20):
            image.putpixel((x, y), (value, value, value))
    return image


@pytest.fixture
def quadrant_image() -> Image.Image:
    """20x20 image with red, green, blue and black quadrants."""
    image = Image.new("RGB", (20, 20))
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (0, 0, 0)]
    for index, color in enumerate(colors):
        left = (index % 2) * 10
        top = (index // 2) * 10
        image.paste(color, (left, top, left + 10, top + 10))
    return image


@pytest.fixture
def png_bytes(gradient_image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    gradient_image.save(buffer, format="PNG")
    return buffer.getvalue()
