from io import BytesIO
from typing import Iterable

from PIL import Image, ImageColor, ImageDraw, ImageFont

from vision_demo.core.render import Clear, Dot, DrawCommand, FillRect, Polyline, StrokeRect, Text

_FONT_CACHE: dict[int, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}


def _font(size: int):
    font = _FONT_CACHE.get(size)
    if font is None:
        font = ImageFont.load_default(size=size)
        _FONT_CACHE[size] = font
    return font


def _rgb(color: str) -> tuple[int, int, int]:
    return ImageColor.getrgb(color)[:3]


def _box(x: float, y: float, width: float, height: float) -> tuple[float, float, float, float]:
    left, right = sorted((x, x + width))
    top, bottom = sorted((y, y + height))
    return left, top, right, bottom


class PillowSurface:
    """Executes draw commands onto an RGB Pillow image.

    Coordinates follow the canvas convention: origin top-left, ``Text.y`` is
    the baseline and ``Text.rotation`` is counter-clockwise degrees. Anything
    outside the image is clipped.
    """

    def __init__(self, width: int, height: int, background: str = '#ffffff') -> None:
        self.background = background
        self.image = Image.new('RGB', (width, height), _rgb(background))
        self._draw = ImageDraw.Draw(self.image)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def execute(self, commands: Iterable[DrawCommand]) -> 'PillowSurface':
        for command in commands:
            self._apply(command)
        return self

    def _apply(self, command: DrawCommand) -> None:
        if isinstance(command, Clear):
            if self.image.size != (command.width, command.height):
                self.image = Image.new('RGB', (command.width, command.height), _rgb(self.background))
                self._draw = ImageDraw.Draw(self.image)
            else:
                self._draw.rectangle((0, 0, command.width, command.height), fill=_rgb(self.background))
        elif isinstance(command, FillRect):
            if command.width and command.height:
                self._draw.rectangle(_box(command.x, command.y, command.width, command.height), fill=_rgb(command.color))
        elif isinstance(command, StrokeRect):
            self._draw.rectangle(
                _box(command.x, command.y, command.width, command.height),
                outline=_rgb(command.color),
                width=command.line_width,
            )
        elif isinstance(command, Polyline):
            self._draw.line(list(command.points), fill=_rgb(command.color), width=command.line_width)
        elif isinstance(command, Dot):
            r = command.radius
            self._draw.ellipse((command.x - r, command.y - r, command.x + r, command.y + r), fill=_rgb(command.color))
        elif isinstance(command, Text):
            self._text(command)
        else:
            raise TypeError(f'Unsupported draw command {type(command).__name__}')

    def _text(self, command: Text) -> None:
        font = _font(command.size)
        left, top, right, bottom = self._draw.textbbox((0, 0), command.text, font=font)
        text_width = right - left
        text_height = bottom - top
        if command.rotation:
            label = Image.new('L', (int(text_width) + 2, int(text_height) + 2), 0)
            ImageDraw.Draw(label).text((1 - left, 1 - top), command.text, fill=255, font=font)
            label = label.rotate(command.rotation, expand=True, resample=Image.Resampling.BICUBIC)
            ink = Image.new('RGB', label.size, _rgb(command.color))
            x = command.x - label.width / 2 if command.align == 'center' else command.x
            self.image.paste(ink, (int(round(x)), int(round(command.y))), label)
            return
        x = command.x - text_width / 2 if command.align == 'center' else command.x
        self._draw.text((x - left, command.y - bottom), command.text, fill=_rgb(command.color), font=font)

    def to_png(self) -> bytes:
        buffer = BytesIO()
        self.image.save(buffer, format='PNG')
        return buffer.getvalue()


def rasterize(commands: list[DrawCommand]) -> PillowSurface:
    if not commands or not isinstance(commands[0], Clear):
        raise ValueError('Draw command list must start with Clear.')
    first = commands[0]
    return PillowSurface(first.width, first.height).execute(commands)
