"""
Tests for logo color extraction.
"""

import io

from PIL import Image

from mona import colors


def _png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class TestColorMath:
    def test_hex_round_trip(self):
        assert colors.hex_to_rgb("#1a2B3c") == (26, 43, 60)
        assert colors.rgb_to_hex(26, 43, 60) == "#1a2b3c"
        assert colors.hex_to_rgb("nope") is None

    def test_saturation(self):
        assert colors.saturation(0, 0, 0) == 0.0
        assert colors.saturation(255, 0, 0) == 1.0
        assert colors.saturation(100, 100, 100) == 0.0

    def test_boost_gray_picks_vivid_default(self):
        assert colors.boost_color("#808080") == colors.VIVID_RED
        assert colors.boost_color("#7f8a7f") == colors.VIVID_GREEN
        assert colors.boost_color("#7f7f8a") == colors.VIVID_BLUE

    def test_boost_pushes_away_from_average(self):
        # avg 100: 200 -> 330 (clamped), 50 -> -15 (clamped)
        assert colors.boost_color("#c83232") == "#ff0000"

    def test_boost_moderate(self):
        # r=120 g=90 b=90: avg 100 -> 120+26=146, 90-13=77
        assert colors.boost_color("#785a5a") == "#924d4d"

    def test_light_variant(self):
        # 255 - (255 - c) * 0.85 * 0.25
        assert colors.light_variant("#ff0000") == "#ffc9c9"
        assert colors.light_variant("bad") == "#ffffff"


class TestPickBaseColor:
    def test_prefers_brightest_saturated(self):
        pixels = [(200, 20, 20), (20, 220, 60), (250, 250, 250)]
        assert colors.pick_base_color(pixels) == "#14dc3c"

    def test_dark_saturated_falls_back_to_most_saturated(self):
        pixels = [(30, 0, 0), (10, 10, 10)]
        assert colors.pick_base_color(pixels) == "#1e0000"

    def test_gray_image_uses_average(self):
        pixels = [(100, 100, 100), (200, 200, 200)]
        assert colors.pick_base_color(pixels) == "#969696"

    def test_empty(self):
        assert colors.pick_base_color([]) is None


class TestExtractColors:
    def test_solid_logo(self):
        data = _png(Image.new("RGB", (40, 40), (0, 102, 204)))
        palette = colors.extract_colors(data)
        assert palette["baseColor"] == colors.boost_color("#0066cc")
        assert palette["headerColor"] == palette["sidebarColor"]
        assert palette["headerColor"] == colors.light_variant(palette["baseColor"])

    def test_transparent_logo_counts_as_black(self):
        data = _png(Image.new("RGBA", (10, 10), (255, 0, 0, 0)))
        palette = colors.extract_colors(data)
        # all-black average is gray: replaced by the vivid default
        assert palette["baseColor"] == colors.VIVID_RED

    def test_large_logo_is_downsampled(self):
        data = _png(Image.new("RGB", (640, 320), (255, 128, 0)))
        assert colors.extract_colors(data) is not None

    def test_not_an_image(self):
        assert colors.extract_colors(b"<html>404</html>") is None
