import math

from term_wheel.config import Config
from term_wheel.confetti import render_confetti
from term_wheel.context import Context
from term_wheel.ezterm import RGBA, DrawCall, RichText, lerp_rgb
from term_wheel.history import History, HistoryEntry
from term_wheel.input import CONFIRMATION_PROMPTS, HELP_TEXT
from term_wheel.layout import CELL_ASPECT, Layout, calc_layout
from term_wheel.popup_text import render_all_text_popups
from term_wheel.spin_phase import SpinPhase
from term_wheel.wheel import PALETTE, POINTER_ANGLE, WheelModel, sector_at_direction

LABEL_COLOR: RGBA = RGBA.from_hex("#555555")
OUTLINE_COLOR: RGBA = RGBA.from_hex("#DDDDDD")
TITLE_COLOR: RGBA = lerp_rgb(RGBA.GOLD, RGBA.WHITE, 0.5)
DIM_COLOR: RGBA = RGBA.WHITE * 0.5
PLACEHOLDER_TEXT: str = "Add some items"


def render_wheel(cx: int, cy: int, radius: int, wheel: WheelModel) -> list[DrawCall]:
    if not wheel.items:
        return render_placeholder(cx, cy, radius)

    draw_calls: list[DrawCall] = []
    count: int = len(wheel.items)
    half_width: int = int(radius * CELL_ASPECT)

    # Sector fill
    for row in range(cy - radius, cy + radius + 1):
        for col in range(cx - half_width, cx + half_width + 1):
            dx: float = (col - cx) / CELL_ASPECT
            dy: float = float(row - cy)
            if math.hypot(dx, dy) > radius + 0.25:
                continue

            # Screen y grows downwards, so atan2 already measures clockwise from "right"
            direction: float = math.atan2(dy, dx)
            index: int = sector_at_direction(direction, wheel.angle, count)
            fill = RichText(" ", bg_color=PALETTE[index % len(PALETTE)])
            draw_calls.append(DrawCall(col, row, fill))

    # Labels along each sector's bisector
    label_radius: float = radius * 0.6
    max_label_len: int = max(3, radius)
    for sector in wheel.sectors():
        mid: float = sector.mid_angle
        label: str = _truncate(sector.label, max_label_len)

        lx: int = round(cx + math.cos(mid) * label_radius * CELL_ASPECT - len(label) / 2)
        ly: int = round(cy + math.sin(mid) * label_radius)
        draw_calls.append(DrawCall(lx, ly, RichText(label, LABEL_COLOR, bold=True)))

    draw_calls.extend(render_pointer(cx, cy, radius))
    return draw_calls


def render_placeholder(cx: int, cy: int, radius: int) -> list[DrawCall]:
    draw_calls: list[DrawCall] = []
    half_width: int = int(radius * CELL_ASPECT)

    for row in range(cy - radius, cy + radius + 1):
        for col in range(cx - half_width, cx + half_width + 1):
            dist: float = math.hypot((col - cx) / CELL_ASPECT, row - cy)
            if abs(dist - radius) < 0.5:
                draw_calls.append(DrawCall(col, row, RichText("·", OUTLINE_COLOR)))

    draw_calls.append(
        DrawCall(cx - len(PLACEHOLDER_TEXT) // 2, cy, RichText(PLACEHOLDER_TEXT, OUTLINE_COLOR))
    )
    return draw_calls


def render_pointer(cx: int, cy: int, radius: int) -> list[DrawCall]:
    px: int = round(cx + math.cos(POINTER_ANGLE) * radius * CELL_ASPECT)
    py: int = round(cy + math.sin(POINTER_ANGLE) * (radius + 1))
    return [DrawCall(px, py, RichText("▼", RGBA.GOLD, bold=True))]


def render_item_list(
    x: int,
    y: int,
    wheel: WheelModel,
    cursor: int,
    visible_rows: int,
) -> list[DrawCall]:
    draw_calls: list[DrawCall] = [
        DrawCall(x, y, RichText(f"Items ({len(wheel.items)})", TITLE_COLOR, bold=True))
    ]

    # Keep the cursor inside the visible window
    first: int = max(0, min(cursor - visible_rows // 2, len(wheel.items) - visible_rows))
    for row, index in enumerate(range(first, min(first + visible_rows, len(wheel.items)))):
        is_cursor: bool = index == cursor
        marker: str = "›" if is_cursor else " "
        text_color: RGBA = RGBA.WHITE if is_cursor else RGBA.WHITE * 0.75

        draw_calls.append(
            DrawCall(
                x,
                y + 1 + row,
                [
                    RichText(f"{marker} "),
                    RichText("■ ", PALETTE[index % len(PALETTE)]),
                    RichText(wheel.items[index].label, text_color, bold=is_cursor),
                ],
            )
        )

    return draw_calls


def render_history(x: int, y: int, history: History, visible_rows: int) -> list[DrawCall]:
    draw_calls: list[DrawCall] = [DrawCall(x, y, RichText("History", TITLE_COLOR, bold=True))]

    entries: list[HistoryEntry] = history.latest(visible_rows)
    if not entries:
        draw_calls.append(DrawCall(x, y + 1, RichText("  (none yet)", DIM_COLOR)))

    for row, entry in enumerate(entries):
        draw_calls.append(DrawCall(x, y + 1 + row, RichText(f"  {entry}", RGBA.LIGHT_BLUE)))

    return draw_calls


def render_frame(ctx: Context, config: Config) -> list[DrawCall]:
    layout: Layout = calc_layout(ctx.screen.width, ctx.screen.height)
    draw_calls: list[DrawCall] = []

    draw_calls.extend(
        render_wheel(layout.wheel_x, layout.wheel_y, layout.wheel_radius, ctx.wheel)
    )

    draw_calls.extend(
        render_item_list(
            layout.panel_x,
            1,
            ctx.wheel,
            ctx.list_cursor,
            config.item_list_visible_rows,
        )
    )
    draw_calls.extend(
        render_history(
            layout.panel_x,
            config.item_list_visible_rows + 3,
            ctx.history,
            config.history_visible_rows,
        )
    )

    # Result line
    if ctx.result_text:
        draw_calls.append(
            DrawCall(2, layout.result_y, RichText(ctx.result_text, RGBA.GOLD, bold=True))
        )

    # Input line, or the yes/no prompt while a confirmation is pending
    if ctx.pending_confirmation is not None:
        prompt: str = CONFIRMATION_PROMPTS[ctx.pending_confirmation]
        draw_calls.append(
            DrawCall(2, layout.input_y, RichText(f"{prompt} [y/N]", RGBA.ORANGE, bold=True))
        )
    else:
        draw_calls.append(
            DrawCall(
                2,
                layout.input_y,
                [RichText("Add: ", DIM_COLOR), RichText(ctx.input_buffer + "▏")],
            )
        )

    draw_calls.append(DrawCall(2, layout.help_y, RichText(HELP_TEXT, DIM_COLOR)))

    # Phase indicator
    phase_text: str = ctx.controller.phase.name
    phase_color: RGBA = RGBA.GREEN if ctx.controller.phase == SpinPhase.IDLE else RGBA.ORANGE
    draw_calls.append(
        DrawCall(
            ctx.screen.width - len(phase_text) - 1,
            0,
            RichText(phase_text, lerp_rgb(phase_color, RGBA.WHITE, 0.6)),
        )
    )

    # FPS display
    fps_text: str = f"{ctx.fps_counter.ema:5.1f} FPS"
    draw_calls.append(
        DrawCall(
            ctx.screen.width - len(fps_text) - 1,
            1,
            RichText(fps_text, lerp_rgb(RGBA.GREEN, RGBA.WHITE, 0.6) * 0.7),
        )
    )

    draw_calls.extend(render_all_text_popups(ctx.all_text_popups, ctx.game_time))
    draw_calls.extend(render_confetti(ctx.confetti, ctx.game_time))

    return draw_calls


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"
