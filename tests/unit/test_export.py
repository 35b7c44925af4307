import base64
import io
import sys
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "pipeline"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from pixelart_pipeline.colors import Palette
from pixelart_pipeline.models import IntensityGrid
from pixelart_renderer.export import preview_data_url, render_svg, render_to_image

PALETTE = Palette(primary="#ff0000", secondary="#00ff00", accent="#0000ff", background="#ffffff", text="#000000")


class ExportTests(unittest.TestCase):
    def test_render_to_image(self):
        grid = IntensityGrid.from_levels([0, 15, 15, 0], levels=16)
        image = render_to_image(grid, PALETTE, 4)
        self.assertEqual(image.size, (4, 4))
        self.assertEqual(image.getpixel((0, 0)), (255, 0, 0))
        self.assertEqual(image.getpixel((3, 0)), (0, 0, 255))

    def test_missing_cells_show_background(self):
        grid = IntensityGrid(size=2, data=bytes([0]))
        image = render_to_image(grid, PALETTE, 4)
        self.assertEqual(image.getpixel((3, 3)), (255, 255, 255))

    def test_preview_data_url_is_png(self):
        grid = IntensityGrid.from_levels([0] * 4, levels=16)
        url = preview_data_url(grid, PALETTE, 8)
        self.assertTrue(url.startswith("data:image/png;base64,"))
        raw = base64.b64decode(url.split(",", 1)[1])
        with Image.open(io.BytesIO(raw)) as im:
            self.assertEqual(im.size, (8, 8))

    def test_svg_has_one_rect_per_cell(self):
        grid = IntensityGrid.from_levels([0, 5, 10, 15], levels=16)
        svg = render_svg(grid, PALETTE, pixel_size=3)
        self.assertTrue(svg.startswith("<svg"))
        self.assertIn('width="6"', svg)
        self.assertIn('shape-rendering="crispEdges"', svg)
        self.assertEqual(svg.count("<rect"), 4)
        self.assertIn('fill="#ff0000"', svg)
        self.assertIn('x="3" y="3"', svg)

    def test_svg_skips_missing_cells(self):
        grid = IntensityGrid(size=2, data=bytes([0, 0, 0]))
        self.assertEqual(render_svg(grid, PALETTE).count("<rect"), 3)


if __name__ == "__main__":
    unittest.main()
