import logging
from enum import Enum, auto

from blessed.keyboard import Keystroke

from term_wheel.config import Config
from term_wheel.context import Context
from term_wheel.errors import TooFewItemsError, WheelError
from term_wheel.ezterm import RGBA, RichText
from term_wheel.layout import calc_layout
from term_wheel.popup_text import TextPopup
from term_wheel.spin_phase import SpinPhase

logger = logging.getLogger(__name__)


class Input(Enum):
    QUIT = auto()
    UP = auto()
    DOWN = auto()
    CONFIRM = auto()
    BACKSPACE = auto()
    TOGGLE_SPIN = auto()
    DELETE_ITEM = auto()
    CLEAR_ITEMS = auto()
    CLEAR_HISTORY = auto()
    CLEAR_ALL = auto()
    TEXT = auto()


class Action(Enum):
    QUIT_APP = auto()
    TYPE_CHAR = auto()
    ERASE_CHAR = auto()
    ADD_ITEM = auto()
    START_SPIN = auto()
    STOP_SPIN = auto()
    LIST_MOVE_CURSOR_UP = auto()
    LIST_MOVE_CURSOR_DOWN = auto()
    REMOVE_ITEM = auto()
    CLEAR_ITEMS = auto()
    CLEAR_HISTORY = auto()
    CLEAR_ALL = auto()
    CONFIRM_PENDING = auto()
    CANCEL_PENDING = auto()


KEYMAP: dict[str, Input] = {
    "KEY_UP": Input.UP,
    "KEY_DOWN": Input.DOWN,
    "KEY_ENTER": Input.CONFIRM,
    "KEY_BACKSPACE": Input.BACKSPACE,
    "KEY_TAB": Input.TOGGLE_SPIN,
    "KEY_DELETE": Input.DELETE_ITEM,
    "KEY_F2": Input.CLEAR_ITEMS,
    "KEY_F3": Input.CLEAR_HISTORY,
    "KEY_F4": Input.CLEAR_ALL,
    "KEY_ESCAPE": Input.QUIT,
}

# Actions that only run after a "y" answer
CONFIRMATION_PROMPTS: dict[Action, str] = {
    Action.CLEAR_HISTORY: "Delete the whole history?",
    Action.CLEAR_ALL: "Clear all items and the history?",
}

HELP_TEXT: str = (
    "Enter add · Tab start/stop · ↑↓ select · Del remove · "
    "F2 clear items · F3 clear history · F4 clear all · Esc quit"
)

NOTICE_COLOR: RGBA = RGBA.from_hex("#FFB7B2")


def map_input(keystroke: Keystroke) -> Input | None:
    if keystroke.is_sequence:
        return KEYMAP.get(keystroke.name or "")

    char: str = str(keystroke)
    if char == "\t":
        return Input.TOGGLE_SPIN
    if char in ("\n", "\r"):
        return Input.CONFIRM
    if len(char) == 1 and char.isprintable():
        return Input.TEXT
    return None


def get_action(ctx: Context, input: Input, char: str = "") -> Action | None:
    if input == Input.QUIT:
        return Action.QUIT_APP

    if ctx.pending_confirmation is not None:
        if input == Input.TEXT and char.lower() == "y":
            return Action.CONFIRM_PENDING
        return Action.CANCEL_PENDING

    phase: SpinPhase = ctx.controller.phase
    item_count: int = len(ctx.wheel.items)

    match input:
        case Input.TEXT:
            return Action.TYPE_CHAR

        case Input.BACKSPACE if ctx.input_buffer:
            return Action.ERASE_CHAR

        case Input.CONFIRM if ctx.input_buffer.strip():
            return Action.ADD_ITEM

        case Input.TOGGLE_SPIN if phase == SpinPhase.IDLE:
            return Action.START_SPIN

        case Input.TOGGLE_SPIN if phase == SpinPhase.SPINNING:
            return Action.STOP_SPIN

        case Input.UP if ctx.list_cursor > 0:
            return Action.LIST_MOVE_CURSOR_UP

        case Input.DOWN if ctx.list_cursor < item_count - 1:
            return Action.LIST_MOVE_CURSOR_DOWN

        case Input.DELETE_ITEM if item_count > 0:
            return Action.REMOVE_ITEM

        case Input.CLEAR_ITEMS if item_count > 0:
            return Action.CLEAR_ITEMS

        case Input.CLEAR_HISTORY if ctx.history.entries:
            return Action.CLEAR_HISTORY

        case Input.CLEAR_ALL if item_count > 0 or ctx.history.entries or ctx.result_text:
            return Action.CLEAR_ALL

    return None


def resolve_action(ctx: Context, action: Action, config: Config, char: str = "") -> None:
    """This mutates `ctx` directly. Rejected wheel operations become a notice."""

    ctx.redraw_requested = True

    try:
        _resolve_action(ctx, action, char)
    except TooFewItemsError as e:
        logger.info("Spin rejected: %s", e)
        push_notice(ctx, f"Add at least {e.required} items to spin", config)
    except WheelError as e:
        logger.info("%s rejected: %s", action.name, e)
        push_notice(ctx, str(e), config)


def push_notice(ctx: Context, text: str, config: Config) -> None:
    notice_y: int = calc_layout(ctx.screen.width, ctx.screen.height).notice_y
    ctx.all_text_popups.append(
        TextPopup(
            x=2,
            y=notice_y,
            text=RichText(text, NOTICE_COLOR, bold=True),
            duration_sec=config.notice_duration_sec,
            start_timestamp=ctx.game_time,
        )
    )


def clamp_list_cursor(ctx: Context) -> None:
    ctx.list_cursor = max(0, min(ctx.list_cursor, len(ctx.wheel.items) - 1))


def _resolve_action(ctx: Context, action: Action, char: str) -> None:
    match action:
        case Action.QUIT_APP:
            ctx.quit_requested = True

        case Action.TYPE_CHAR:
            ctx.input_buffer += char

        case Action.ERASE_CHAR:
            ctx.input_buffer = ctx.input_buffer[:-1]

        case Action.ADD_ITEM:
            if ctx.wheel.add_item(ctx.input_buffer) is not None:
                ctx.list_cursor = len(ctx.wheel.items) - 1
            ctx.input_buffer = ""

        case Action.START_SPIN:
            ctx.controller.start()
            ctx.result_text = ""

        case Action.STOP_SPIN:
            ctx.controller.stop()

        case Action.LIST_MOVE_CURSOR_UP:
            ctx.list_cursor -= 1

        case Action.LIST_MOVE_CURSOR_DOWN:
            ctx.list_cursor += 1

        case Action.REMOVE_ITEM:
            ctx.wheel.remove_item(ctx.list_cursor)
            clamp_list_cursor(ctx)

        case Action.CLEAR_ITEMS:
            ctx.wheel.clear()
            ctx.list_cursor = 0

        case Action.CLEAR_HISTORY | Action.CLEAR_ALL:
            ctx.pending_confirmation = action

        case Action.CONFIRM_PENDING:
            pending: Action | None = ctx.pending_confirmation
            ctx.pending_confirmation = None

            if pending in (Action.CLEAR_HISTORY, Action.CLEAR_ALL):
                ctx.history.clear()
            if pending == Action.CLEAR_ALL:
                ctx.wheel.clear()
                ctx.list_cursor = 0
                ctx.result_text = ""

        case Action.CANCEL_PENDING:
            ctx.pending_confirmation = None
