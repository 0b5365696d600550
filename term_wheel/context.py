from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from term_wheel.confetti import ConfettiParticle
    from term_wheel.ezterm import FPSCounter, Screen
    from term_wheel.history import History
    from term_wheel.input import Action
    from term_wheel.popup_text import TextPopup
    from term_wheel.spin import SpinController
    from term_wheel.wheel import WheelModel


@dataclass
class Context:
    screen: Screen
    game_time: float
    wheel: WheelModel
    history: History
    controller: SpinController
    fps_counter: FPSCounter
    input_buffer: str = ""
    list_cursor: int = 0
    pending_confirmation: Action | None = None
    result_text: str = ""
    confetti: list[ConfettiParticle] = field(default_factory=list)
    all_text_popups: list[TextPopup] = field(default_factory=list)
    redraw_requested: bool = True
    quit_requested: bool = False


def elapsed_fraction(game_time: float, start_timestamp: float, duration: float) -> float:
    """
    Returns a value in [0, 1] representing how far through the effect we are.
    1 means the effect is finished.
    """
    if duration <= 0.0:
        return 1.0  # instantly expired
    t = (game_time - start_timestamp) / duration
    return max(0.0, min(1.0, t))
