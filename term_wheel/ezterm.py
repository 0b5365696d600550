from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Callable, ClassVar

import numpy as np
from blessed import Terminal

# A changed cell is (char, (fg, bg, bold))
CellStyle = tuple["RGBA | None", "RGBA", bool]
ScreenCell = tuple[str, CellStyle]


@dataclass
class RGBA:
    r: float
    g: float
    b: float
    a: float = 1.0

    WHITE: ClassVar[RGBA]
    GREEN: ClassVar[RGBA]
    ORANGE: ClassVar[RGBA]
    LIGHT_BLUE: ClassVar[RGBA]
    GOLD: ClassVar[RGBA]

    def __mul__(self, other: float | RGBA):
        if isinstance(other, RGBA):
            return RGBA(
                min(1.0, self.r * other.r),
                min(1.0, self.g * other.g),
                min(1.0, self.b * other.b),
                min(1.0, self.a * other.a),
            )

        return RGBA(
            min(1.0, self.r * other),
            min(1.0, self.g * other),
            min(1.0, self.b * other),
            self.a,
        )

    @classmethod
    def from_hex(cls, hex_color: str) -> RGBA:
        """`#RRGGBB` -> RGBA"""
        value: str = hex_color.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Expected #RRGGBB, got {hex_color!r}")
        r, g, b = (int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))
        return cls(r, g, b)


RGBA.WHITE = RGBA(1.0, 1.0, 1.0)
RGBA.GREEN = RGBA(0.0, 1.0, 0.0)
RGBA.ORANGE = RGBA(1.0, 0.5, 0.0)
RGBA.LIGHT_BLUE = RGBA(0.65, 0.85, 0.9)
RGBA.GOLD = RGBA(1.0, 0.85, 0.0)

BACKGROUND_COLOR: RGBA = RGBA(0.08, 0.08, 0.1)


@dataclass
class RichText:
    text: str
    text_color: RGBA = field(default_factory=lambda: RGBA.WHITE)
    bg_color: RGBA | None = None
    bold: bool = False


@dataclass
class ScreenBuffer:
    width: int
    height: int
    chars: np.ndarray  # shape (height, width), dtype='<U1'
    styles: np.ndarray  # shape (height, width), dtype=object, each element: (fg, bg, bold)


@dataclass
class Screen:
    width: int
    height: int
    old_buffer: ScreenBuffer = field(init=False)
    new_buffer: ScreenBuffer = field(init=False)

    def __post_init__(self):
        self.old_buffer = create_buffer(self.width, self.height)
        self.new_buffer = create_buffer(self.width, self.height)


@dataclass
class DrawCall:
    x: int
    y: int
    rich_text: RichText | list[RichText]


@dataclass
class FPSCounter:
    ema: float = 0.0
    alpha: float = 0.08


def lerp_rgb(a: RGBA, b: RGBA, t: float) -> RGBA:
    """
    Linear interpolation between two colors.
    t = 0 → returns a
    t = 1 → returns b
    """
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b

    return RGBA(
        a.r + (b.r - a.r) * t,
        a.g + (b.g - a.g) * t,
        a.b + (b.b - a.b) * t,
        a.a + (b.a - a.a) * t,
    )


def mul_darken(rich_text: RichText, value: float) -> RichText:
    """Fades `text_color` and `bg_color` (if any) towards the background."""

    new_text_color: RGBA = lerp_rgb(BACKGROUND_COLOR, rich_text.text_color, value)
    new_bg_color: RGBA | None = rich_text.bg_color

    if new_bg_color:
        new_bg_color = lerp_rgb(BACKGROUND_COLOR, new_bg_color, value)

    return RichText(rich_text.text, new_text_color, new_bg_color, rich_text.bold)


def create_buffer(width: int, height: int) -> ScreenBuffer:
    chars = np.full((height, width), " ", dtype="<U1")
    styles = np.empty((height, width), dtype=object)
    default_style: CellStyle = (None, BACKGROUND_COLOR, False)
    for y in range(height):
        for x in range(width):
            styles[y, x] = default_style
    return ScreenBuffer(width, height, chars, styles)


def buffer_diff(screen: Screen) -> list[tuple[int, int, ScreenCell]]:
    old = screen.old_buffer
    new = screen.new_buffer

    mask_chars = old.chars != new.chars

    # Styles are tuples of dataclasses, compare them cell by cell
    def style_neq(a, b):
        return a[0] != b[0] or a[1] != b[1] or a[2] != b[2]

    style_cmp = np.frompyfunc(style_neq, 2, 1)
    mask_styles = style_cmp(old.styles, new.styles).astype(bool)

    ys, xs = np.nonzero(mask_chars | mask_styles)

    diffs = [(int(y), int(x), (str(new.chars[y, x]), new.styles[y, x])) for y, x in zip(ys, xs)]

    screen.old_buffer = ScreenBuffer(new.width, new.height, new.chars.copy(), new.styles.copy())
    screen.new_buffer = create_buffer(screen.width, screen.height)

    return diffs  # pyright: ignore


def flush_diffs(term: Terminal, diffs: list[tuple[int, int, ScreenCell]]) -> None:
    output: list[str] = []
    for y, x, (char, (fg, bg, bold)) in diffs:
        output.append(term.move_xy(x, y) + _make_style(term, fg, bg, bold) + char + term.normal)

    sys.stdout.write("".join(output))
    sys.stdout.flush()


def create_fps_limiter(
    fps: float,
    poll_interval: float = 0.001,
    spin_reserve: float = 0.002,
) -> Callable[[], float]:
    """
    Drift-correcting frame limiter.
    Returns a callable that blocks until the next frame and returns the elapsed frame time.
    """
    target = 1.0 / float(fps)
    next_frame = time.perf_counter() + target

    def wait_for_next_frame() -> float:
        nonlocal next_frame
        target_time = next_frame
        now = time.perf_counter()

        # Coarse sleep, leaving a small reserve
        while (remaining := target_time - now - spin_reserve) > 0:
            time.sleep(min(poll_interval, remaining))
            now = time.perf_counter()

        # Busy wait the reserve
        while time.perf_counter() < target_time:
            pass

        end = time.perf_counter()
        dt = end - (next_frame - target)

        # Schedule on absolute time, resync when running late
        next_frame = target_time + target
        if end > next_frame:
            next_frame = end + target

        return dt

    return wait_for_next_frame


def update_fps_counter(fps_counter: FPSCounter, dt: float) -> None:
    if dt <= 0.0:
        return
    inst = 1.0 / dt
    if fps_counter.ema <= 0.0:
        fps_counter.ema = inst
    else:
        fps_counter.ema = fps_counter.ema * (1.0 - fps_counter.alpha) + inst * fps_counter.alpha


def _make_style(term: Terminal, fg: RGBA | None, bg: RGBA | None, bold: bool) -> str:
    if not term.does_styling:
        return term.normal

    fg_str = term.color_rgb(*_rgb_to_rgb_int(fg if fg is not None else RGBA.WHITE))
    bg_str = term.on_color_rgb(*_rgb_to_rgb_int(bg if bg is not None else BACKGROUND_COLOR))
    bold_str = term.bold if bold else ""
    return f"{term.normal}{bold_str}{fg_str}{bg_str}"


def _rgb_to_rgb_int(color: RGBA) -> tuple[int, int, int]:
    arr = np.array((color.r, color.g, color.b), dtype=np.float64)
    scaled = np.clip(np.round(arr * 255.0), 0, 255).astype(np.int32)
    return int(scaled[0]), int(scaled[1]), int(scaled[2])


def print_at(screen: Screen, x: int, y: int, text: str | RichText | list[str | RichText]) -> None:
    """
    Writes text into `screen.new_buffer` at (x, y), clipping at the edges.
    Keeps the existing background when a segment has no `bg_color`.
    """
    buf: ScreenBuffer = screen.new_buffer

    if isinstance(text, str):
        segments = [RichText(text)]
    elif isinstance(text, RichText):
        segments = [text]
    else:
        segments = [seg if isinstance(seg, RichText) else RichText(seg) for seg in text]

    if not (0 <= y < buf.height):
        return

    px = x
    for seg in segments:
        for i, char in enumerate(seg.text):
            cx = px + i
            if cx >= buf.width:
                break
            if cx < 0:
                continue

            _, existing_bg, _ = buf.styles[y, cx]
            bg = seg.bg_color if seg.bg_color is not None else existing_bg

            buf.chars[y, cx] = char
            buf.styles[y, cx] = (seg.text_color, bg, seg.bold)

        px += len(seg.text)


def clear_screen(term: Terminal, color: RGBA = BACKGROUND_COLOR) -> None:
    """Paints the whole terminal with `color`, used on startup and resize."""
    bg_str: str = term.on_color_rgb(*_rgb_to_rgb_int(color))
    sys.stdout.write(term.normal + bg_str + term.home + term.clear)
    sys.stdout.flush()