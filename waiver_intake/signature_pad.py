import io
import math

from PIL import Image, ImageDraw

from waiver_intake.embedded import EmbeddedImage


class SignaturePad:
    """
    Freehand signature surface.

    Coordinates passed to the pointer methods are CSS pixels; the raster is
    scaled by the device pixel ratio so exports stay sharp on phones.
    Strokes live on a transparent ink layer, the opaque white background is
    only added on export.
    """

    HEIGHT = 160 # fixed height; keeps layout steady on phones
    LINE_WIDTH = 2
    INK_COLOR = (17, 17, 17, 255) # #111
    BACKGROUND = (255, 255, 255, 255)
    INK_SAMPLE_STEP = 4

    def __init__(self, container_width=600, device_pixel_ratio=1):
        self.width = 0
        self.height = 0
        self.dpr = 1
        self.drawing = False
        self._last = None
        self._ink = None
        self._draw = None
        self.resize(container_width, device_pixel_ratio)

    @property
    def size(self):
        """Raster size in device pixels."""
        return self.width, self.height

    def resize(self, container_width, device_pixel_ratio=None):
        """Re-initialises the surface. Anything drawn so far is lost."""
        if device_pixel_ratio is not None:
            self.dpr = max(1, device_pixel_ratio or 1)
        self.css_width = container_width
        self.width = int(math.floor(container_width * self.dpr))
        self.height = int(math.floor(self.HEIGHT * self.dpr))
        self._reset()

    def clear(self):
        self._reset()

    def _reset(self):
        self._ink = Image.new('RGBA', (max(self.width, 1), max(self.height, 1)), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._ink)
        self.drawing = False
        self._last = None

    # --- Pointer events ---

    def pointer_down(self, x, y):
        self.drawing = True
        self._last = (x, y)

    def pointer_move(self, x, y):
        if not self.drawing:
            return
        self._stroke(self._last, (x, y))
        self._last = (x, y)

    def pointer_up(self):
        self.drawing = False
        self._last = None

    def draw_stroke(self, points):
        """Convenience: down on the first point, move through the rest, up."""
        points = list(points)
        if not points:
            return
        self.pointer_down(*points[0])
        for x, y in points[1:]:
            self.pointer_move(x, y)
        self.pointer_up()

    def _stroke(self, start, end):
        width = max(1, int(round(self.LINE_WIDTH * self.dpr)))
        x0, y0 = start[0] * self.dpr, start[1] * self.dpr
        x1, y1 = end[0] * self.dpr, end[1] * self.dpr
        self._draw.line([(x0, y0), (x1, y1)], fill=self.INK_COLOR, width=width)

        # Round caps
        r = width / 2
        for cx, cy in ((x0, y0), (x1, y1)):
            self._draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=self.INK_COLOR)

    # --- Inspection / export ---

    def has_ink(self):
        """
        True if any sampled pixel of the ink layer is non-transparent.
        Samples every 4th pixel on both axes, so a 1px stroke falling between
        samples can be missed.
        """
        if not self.width or not self.height:
            return False

        alpha = self._ink.getchannel('A').load()
        step = self.INK_SAMPLE_STEP
        for y in range(0, self.height, step):
            for x in range(0, self.width, step):
                if alpha[x, y] > 0:
                    return True
        return False

    def export(self):
        """PNG of the strokes over the white background."""
        image = Image.new('RGBA', self._ink.size, self.BACKGROUND)
        image.alpha_composite(self._ink)

        buf = io.BytesIO()
        image.save(buf, format='PNG')
        return EmbeddedImage(buf.getvalue(), 'image/png')
