import argparse
import logging
import random
from collections.abc import Sequence

from blessed import Terminal
from blessed.keyboard import Keystroke

from term_wheel.config import Config
from term_wheel.confetti import prune_confetti, spawn_confetti, update_confetti
from term_wheel.context import Context, elapsed_fraction
from term_wheel.ezterm import (
    DrawCall,
    FPSCounter,
    Screen,
    buffer_diff,
    clear_screen,
    create_fps_limiter,
    flush_diffs,
    print_at,
    update_fps_counter,
)
from term_wheel.history import History
from term_wheel.input import clamp_list_cursor, get_action, map_input, resolve_action
from term_wheel.render import render_frame
from term_wheel.spin import SpinController, WinnerResolved
from term_wheel.wheel import WheelModel

logger = logging.getLogger(__name__)

# Confetti fires from the horizontal centre, a bit below the middle of the screen
CONFETTI_ORIGIN_Y_FRAC: float = 0.6


def create_context(screen: Screen, config: Config, labels: Sequence[str] = ()) -> Context:
    """Builds the wheel, history and controller and wires their callbacks into the context once."""
    wheel = WheelModel()
    history = History()
    controller = SpinController(wheel, history, config)
    ctx = Context(
        screen=screen,
        game_time=0.0,
        wheel=wheel,
        history=history,
        controller=controller,
        fps_counter=FPSCounter(),
    )

    def request_redraw() -> None:
        ctx.redraw_requested = True

    def show_winner(winner: WinnerResolved) -> None:
        ctx.result_text = f"Winner: {winner.label}!"

    def celebrate(winner: WinnerResolved) -> None:
        ctx.confetti.extend(
            spawn_confetti(
                ctx.screen.width / 2,
                ctx.screen.height * CONFETTI_ORIGIN_Y_FRAC,
                ctx.game_time,
                config,
            )
        )

    def on_idle() -> None:
        clamp_list_cursor(ctx)
        ctx.redraw_requested = True

    wheel.on_change = request_redraw
    controller.on_redraw = request_redraw
    controller.on_winner = show_winner
    controller.on_celebrate = celebrate
    controller.on_idle = on_idle

    for label in labels:
        wheel.add_item(label)

    return ctx


def tick(dt: float, ctx: Context, term: Terminal, config: Config) -> None:
    if (term.width, term.height) != (ctx.screen.width, ctx.screen.height):
        ctx.screen = Screen(term.width, term.height)
        clear_screen(term)
        ctx.redraw_requested = True

    # --- Inputs ---
    key_event: Keystroke = term.inkey(timeout=0.0)

    if input := map_input(key_event):
        if action := get_action(ctx, input, str(key_event)):
            resolve_action(ctx, action, config, str(key_event))

    # --- Wheel logic ---
    ctx.game_time += dt
    ctx.controller.tick(dt)

    update_confetti(ctx.confetti, dt)
    ctx.confetti = prune_confetti(ctx.confetti, ctx.game_time)

    # Cleanup all finished popups
    ctx.all_text_popups = [
        p
        for p in ctx.all_text_popups
        if elapsed_fraction(ctx.game_time, p.start_timestamp, p.duration_sec) < 1.0
    ]

    update_fps_counter(ctx.fps_counter, dt / config.game_speed)

    # --- Rendering ---
    effects_running: bool = bool(ctx.confetti or ctx.all_text_popups)
    if not (ctx.redraw_requested or effects_running):
        return
    ctx.redraw_requested = False

    draw_calls: list[DrawCall] = render_frame(ctx, config)

    for draw_call in draw_calls:
        print_at(ctx.screen, draw_call.x, draw_call.y, draw_call.rich_text)
    flush_diffs(term, buffer_diff(ctx.screen))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Spin a wheel of items in the terminal.")
    parser.add_argument("items", nargs="*", help="Initial wheel items")
    parser.add_argument("--fps", type=float, default=Config.fps_limit, help="Frame rate limit")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible confetti")
    parser.add_argument("--log-file", help="Write logs to this file (logging is off otherwise)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for --log-file (default: INFO)",
    )
    return parser.parse_args(argv)


def configure_logging(log_file: str | None, level: str) -> None:
    # The terminal belongs to the renderer, so logs never go to stderr
    if log_file is None:
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)
        return

    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)
    if args.seed is not None:
        random.seed(args.seed)

    term = Terminal()
    config = Config(fps_limit=args.fps)
    ctx = create_context(Screen(term.width, term.height), config, args.items)
    logger.info("Starting with %d items", len(ctx.wheel.items))

    fps_limiter = create_fps_limiter(config.fps_limit)

    with (
        term.cbreak(),
        term.hidden_cursor(),
        term.fullscreen(),
    ):
        dt: float = 0.0

        clear_screen(term)

        while not ctx.quit_requested:
            dt *= config.game_speed
            tick(dt, ctx, term, config)
            dt = fps_limiter()

    logger.info("Quit after %d winners", len(ctx.history.entries))


if __name__ == "__main__":
    main()
