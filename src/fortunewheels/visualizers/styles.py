"""
Palettes and drawing style for the wheel renderer.

Each palette is one color group:
[base, outer dots, inner circle, spokes / inner dots, center]
"""

from dataclasses import dataclass, field

PALETTES: list[list[str]] = [
    ["#45206A", "#FFD700", "#FF8C00", "#B0E0E6", "#8A2BE2"],  # deep purple, gold
    ["#D90429", "#F4D35E", "#F7B267", "#0A796F", "#2E4057"],  # fiery red, teal
    ["#A34A2A", "#F2AF29", "#E0A890", "#3E8914", "#D4327C"],  # earth, pink
    ["#004C6D", "#7FC2BF", "#FFC94F", "#D83A56", "#5C88BF"],  # ocean, amber
    ["#C11F68", "#F9E795", "#F5EEF8", "#2ECC71", "#8E44AD"],  # magenta, green
    ["#006D77", "#FF8C00", "#E29578", "#83C5BE", "#D64045"],  # teal, orange
]

BACKGROUND = "#2A363B"
LINK_COLOR = (255, 200, 100)

# Palette slots
BASE, OUTER_DOTS, INNER_CIRCLE, SPOKES, CENTER = range(5)


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """'#RRGGBB' -> (r, g, b)."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB, got {value!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def palette_rgb(group_id: int, palettes: list[list[str]] | None = None) -> list[tuple[int, int, int]]:
    palettes = palettes or PALETTES
    return [hex_to_rgb(c) for c in palettes[group_id % len(palettes)]]


@dataclass
class RenderConfig:
    """Drawing parameters for the wheel renderer."""
    background: str = BACKGROUND
    palettes: list[list[str]] = field(default_factory=lambda: [list(p) for p in PALETTES])

    connector_width: int = 5
    link_size: float = 10.0
    blob_size: float = 20.0
    blob_dots: int = 8

    inner_dot_count: int = 20
    stem_segments: int = 12

    show_button: bool = True

    def __post_init__(self):
        if not self.palettes:
            raise ValueError("At least one palette is required")
        for palette in self.palettes:
            if len(palette) != 5:
                raise ValueError(f"Palettes need 5 colors, got {palette}")
            for color in palette:
                hex_to_rgb(color)
        hex_to_rgb(self.background)
        if self.stem_segments < 1:
            raise ValueError("stem_segments must be >= 1")
