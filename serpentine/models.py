"""Data models and constants for the serpentine image-to-SVG pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# AIDEV-NOTE: Output geometry constants. The longer image axis is scaled
# to MAX_DIMENSION units; PX_PER_MM converts those units to millimeters
# for the physical width/height of the SVG root.
MAX_DIMENSION = 560
PX_PER_MM = 3.759

# K-means limits for posterize mode
MAX_KMEANS_COLORS = 10000  # Unique colors fed to clustering before subsampling
KMEANS_MAX_ITERATIONS = 10
KMEANS_TOLERANCE = 1e-4

# Configuration file path
DEFAULT_CONFIG_FILE = Path.home() / ".serpentine_config.json"


class ProcessingMode(Enum):
    """How sampled pixels are split into color groups.

    AIDEV-NOTE: Each mode owns its color-group keys:
    grayscale -> "gray-<level>", posterize -> "color-<r>-<g>-<b>",
    cmyk -> "cyan"/"magenta"/"yellow"/"black", monochrome -> "monochrome".
    """

    GRAYSCALE = "grayscale"  # Evenly spaced gray levels across the brightness range
    POSTERIZE = "posterize"  # K-means clustered palette
    CMYK = "cmyk"  # One layer per subtractive ink channel
    MONOCHROME = "monochrome"  # A single layer in a chosen color


@dataclass(frozen=True)
class CurveControlSettings:
    """Tunable Bezier parameters for curved paths.

    Vertical/horizontal factors shape the legs inside a tile; junction
    factors shape the connecting curve between consecutive tiles of a
    continuous path.
    """

    # Vertical legs
    vertical_curve_offset_x: float = 0.15  # Sideways push of control points (x step)
    vertical_curve_first_point_y: float = 0.25  # First control point (x leg height)
    vertical_curve_second_point_y: float = 0.75  # Second control point (x leg height)

    # Horizontal legs
    horizontal_curve_offset_x: float = 0.0  # Shift of both control points (x span)
    horizontal_curve_offset_y: float = 0.15  # Outward bow (x effective tile height)
    horizontal_curve_first_point_x: float = 0.25  # First control point (0-1 of span)
    horizontal_curve_second_point_x: float = 0.75  # Second control point (0-1 of span)

    # Tile junctions
    junction_first_control_scale: float = 0.33  # (0-1) of junction length
    junction_second_control_scale: float = 0.33  # (0-1) of junction length
    junction_tangent_direction_x: float = 1.0  # Tangent X modifier (-4 to 4)
    junction_tangent_direction_y: float = 1.0  # Tangent Y modifier (-4 to 4)
    horizontal_junction_smoothing: float = 0.5  # Mostly horizontal junctions
    vertical_junction_smoothing: float = 0.5  # Mostly vertical junctions
    junction_continuity_factor: float = 0.1  # Blend weight of the ideal tangent

    # Tile size
    tile_height_scale: float = 0.95  # Fraction of tile height used by curves


DEFAULT_CURVE_CONTROLS = CurveControlSettings()


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot for one processing run.

    AIDEV-NOTE: Settings is never mutated by the pipeline. The tile size
    computed while sampling travels on SampledImage/ImageData instead.
    Use dataclasses.replace() to derive variants.
    """

    # Grid
    columns_count: int = 10
    rows_count: int = 10

    # Sampling
    brightness_threshold: int = 255  # Keep pixels at or below this brightness
    invert: bool = False  # Invert brightness (and the threshold test)

    # Density
    min_density: int = 2
    max_density: int = 5
    even_density: bool = False  # Legacy rule: densities are 0 or even
    density_smoothing: float = 0.0  # Neighbour blend weight (0-1)

    # Paths
    continuous_paths: bool = True
    curved_paths: bool = False
    path_distance_threshold: float = 10.0  # Break continuous paths on longer jumps

    # Color grouping
    processing_mode: ProcessingMode = ProcessingMode.POSTERIZE
    colors_amt: int = 5
    monochrome_color: str = "#000000"
    kmeans_seed: int | None = None  # Fixed seed for reproducible posterize runs

    # Display
    visible_paths: "dict[str, bool]" = field(default_factory=dict)
    curve_controls: CurveControlSettings = DEFAULT_CURVE_CONTROLS

    def is_visible(self, key: str) -> bool:
        """Groups are visible unless explicitly switched off."""
        return self.visible_paths.get(key, True) is not False

    def validate(self) -> None:
        """Check value ranges before processing.

        Raises:
            ProcessingError: If any value is out of range
        """
        from .image_processing.errors import ProcessingError

        if self.columns_count < 1 or self.rows_count < 1:
            raise ProcessingError(
                f"Grid must have at least one column and row, "
                f"got {self.columns_count}x{self.rows_count}"
            )
        if self.colors_amt < 1:
            raise ProcessingError(f"colors_amt must be >= 1, got {self.colors_amt}")
        if self.min_density < 0 or self.max_density < 0:
            raise ProcessingError("Densities must be non-negative")
        if self.min_density > self.max_density:
            raise ProcessingError(
                f"min_density ({self.min_density}) exceeds "
                f"max_density ({self.max_density})"
            )
        if not 0 <= self.brightness_threshold <= 255:
            raise ProcessingError(
                f"brightness_threshold must be within 0-255, "
                f"got {self.brightness_threshold}"
            )
        if not 0.0 <= self.density_smoothing <= 1.0:
            raise ProcessingError(
                f"density_smoothing must be within 0-1, got {self.density_smoothing}"
            )


@dataclass(frozen=True)
class PixelData:
    """One sampled grid cell."""

    x: int  # Grid column
    y: int  # Grid row
    brightness: int  # Luma-weighted, alpha-scaled (0-255)
    r: int
    g: int
    b: int
    a: int  # Alpha (0-255)


@dataclass
class PathPoint:
    """One tile's worth of pattern geometry.

    AIDEV-NOTE: x is the tile edge the pattern starts from: the left edge
    on even rows (direction +1) and the right edge on odd rows
    (direction -1), producing a serpentine traversal.
    """

    x: float  # Anchor X in output pixel space
    y: float  # Anchor Y (top edge of the tile)
    width: float  # Tile width
    height: float  # Tile height
    density: int  # Number of vertical strokes; 0 skips the tile
    row: int  # Source grid row
    direction: int  # +1 left-to-right, -1 right-to-left


@dataclass
class ColorGroup:
    """One visual layer: every point is drawn in the same color."""

    color: str  # Hex or CSS color name
    display_name: str
    points: "list[PathPoint]" = field(default_factory=list)
    hue: float = 0.0  # Presentation order only (0-360)
    brightness: float = 0.0  # Presentation order only (0-255)


@dataclass
class SampledImage:
    """Result of the pixel sampler.

    Carries the computed tile size explicitly so later stages never read
    it back from Settings.
    """

    pixels: "list[PixelData]"
    grid_width: int
    grid_height: int
    original_width: int
    original_height: int
    resized_width: int
    resized_height: int
    output_width: int
    output_height: int
    tile_width: float
    tile_height: float


@dataclass
class ImageData:
    """Full result of one processing run."""

    width: int  # Sampling grid columns
    height: int  # Sampling grid rows
    pixels: "list[PixelData]"
    original_width: int
    original_height: int
    resized_width: int
    resized_height: int
    output_width: int
    output_height: int
    columns_count: int
    rows_count: int
    tile_width: float
    tile_height: float
    color_groups: "dict[str, ColorGroup] | None" = None

    @classmethod
    def from_sample(cls, sample: SampledImage) -> "ImageData":
        """Build an ImageData (without color groups) from a sampler result."""
        return cls(
            width=sample.grid_width,
            height=sample.grid_height,
            pixels=sample.pixels,
            original_width=sample.original_width,
            original_height=sample.original_height,
            resized_width=sample.resized_width,
            resized_height=sample.resized_height,
            output_width=sample.output_width,
            output_height=sample.output_height,
            columns_count=sample.grid_width,
            rows_count=sample.grid_height,
            tile_width=sample.tile_width,
            tile_height=sample.tile_height,
        )
