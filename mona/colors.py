"""
Client colors derived from a logo image.

The base color is the brightest saturated pixel of the logo (falling back to
the most saturated one, then to the average), pushed away from gray. Header
and sidebar colors are pale tints of it.
"""

import io
import math

from PIL import Image

GRAY_SATURATION = 0.15
VIVID_SATURATION = 0.2
MIN_BRIGHTNESS = 40
BOOST = 1.3
SAMPLE_SIZE = 100
SAMPLE_STRIDE = 4

# Stand-ins for near-gray colors, by dominant channel
VIVID_RED = "#ff5252"
VIVID_GREEN = "#69f0ae"
VIVID_BLUE = "#448aff"

RGB = tuple[int, int, int]


def _round(value: float) -> int:
    # Half-up, like the browser's Math.round
    return math.floor(value + 0.5)


def _clamp(value: int) -> int:
    return min(255, max(0, value))


def hex_to_rgb(value: str) -> RGB | None:
    value = (value or "").lstrip("#")
    if len(value) != 6:
        return None
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return None


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def saturation(r: int, g: int, b: int) -> float:
    high, low = max(r, g, b), min(r, g, b)
    return 0.0 if high == 0 else (high - low) / high


def boost_color(value: str) -> str:
    """Push a color away from gray. Near-gray colors become a vivid default."""
    rgb = hex_to_rgb(value)
    if rgb is None:
        return value
    r, g, b = rgb
    if saturation(r, g, b) < GRAY_SATURATION:
        top = max(r, g, b)
        if r == top:
            return VIVID_RED
        if g == top:
            return VIVID_GREEN
        return VIVID_BLUE

    average = (r + g + b) / 3
    return rgb_to_hex(*(_clamp(_round(c + (c - average) * BOOST)) for c in rgb))


def light_variant(value: str, lightness: float = 0.75, strength: float = 0.85) -> str:
    """A pale tint of the color, for header and sidebar backgrounds."""
    rgb = hex_to_rgb(value)
    if rgb is None:
        return "#ffffff"
    if saturation(*rgb) < GRAY_SATURATION:
        rgb = hex_to_rgb(boost_color(value))
    return rgb_to_hex(*(_round(255 - (255 - c) * strength * (1 - lightness)) for c in rgb))


def pick_base_color(pixels) -> str | None:
    """Choose the base color from an iterable of (r, g, b) samples."""
    total = [0, 0, 0]
    count = 0
    brightest, brightest_level = None, 0.0
    most_saturated, max_saturation = None, 0.0

    for r, g, b in pixels:
        sat = saturation(r, g, b)
        level = (r + g + b) / 3
        if sat > VIVID_SATURATION and level > brightest_level and level > MIN_BRIGHTNESS:
            brightest, brightest_level = (r, g, b), level
        if sat > max_saturation:
            most_saturated, max_saturation = (r, g, b), sat
        total[0] += r
        total[1] += g
        total[2] += b
        count += 1

    if count == 0:
        return None
    if brightest:
        return rgb_to_hex(*brightest)
    if most_saturated and max_saturation > VIVID_SATURATION:
        return rgb_to_hex(*most_saturated)
    return rgb_to_hex(*(_round(c / count) for c in total))


def palette_from_base(base: str) -> dict[str, str]:
    boosted = boost_color(base)
    return {
        "baseColor": boosted,
        "headerColor": light_variant(boosted),
        "sidebarColor": light_variant(boosted),
    }


def sample_pixels(image: Image.Image) -> list[RGB]:
    """Every 4th pixel of the image squeezed into at most 100x100.

    Transparent areas count as black.
    """
    size = (min(image.width, SAMPLE_SIZE), min(image.height, SAMPLE_SIZE))
    rgba = image.convert("RGBA").resize(size)
    flat = Image.new("RGB", size, (0, 0, 0))
    flat.paste(rgba, mask=rgba.getchannel("A"))
    return list(flat.getdata())[::SAMPLE_STRIDE]


def extract_colors(data: bytes) -> dict[str, str] | None:
    """Base/header/sidebar colors from encoded image bytes.

    Returns None when the bytes are not a decodable image or it is empty.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.width == 0 or image.height == 0:
                return None
            pixels = sample_pixels(image)
    except (OSError, ValueError, Image.DecompressionBombError):
        return None
    base = pick_base_color(pixels)
    return palette_from_base(base) if base else None
