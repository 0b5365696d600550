import logging
from dataclasses import dataclass
from typing import Callable

from term_wheel.config import Config
from term_wheel.context import elapsed_fraction
from term_wheel.errors import InvalidPhaseTransitionError, TooFewItemsError
from term_wheel.history import History, HistoryEntry
from term_wheel.spin_phase import SpinPhase
from term_wheel.wheel import Item, WheelModel

logger = logging.getLogger(__name__)

MIN_ITEMS_TO_SPIN = 2


@dataclass(frozen=True)
class WinnerResolved:
    label: str
    sequence: int
    index: int


class SpinController:
    """Drives `WheelModel.angle` through Idle → Spinning → Decelerating → Resolving → Idle.

    The host calls `tick(dt)` once per frame with the elapsed wall-clock seconds.
    Nothing here blocks or sleeps: the deceleration and the winner display delay
    are both measured against the controller's own clock.
    """

    def __init__(
        self,
        wheel: WheelModel,
        history: History,
        config: Config,
        on_redraw: Callable[[], None] | None = None,
        on_winner: Callable[[WinnerResolved], None] | None = None,
        on_celebrate: Callable[[WinnerResolved], None] | None = None,
        on_idle: Callable[[], None] | None = None,
    ) -> None:
        self.wheel = wheel
        self.history = history
        self.config = config
        self.on_redraw = on_redraw
        self.on_winner = on_winner
        self.on_celebrate = on_celebrate
        self.on_idle = on_idle

        self.phase: SpinPhase = SpinPhase.IDLE
        self.rotation_speed: float = 0.0
        self.clock: float = 0.0

        self.deceleration_start_speed: float = 0.0
        self.deceleration_started_at: float = 0.0
        self.resolved_at: float = 0.0
        self.last_winner: WinnerResolved | None = None
        self._pending_winner: Item | None = None

    @property
    def can_start(self) -> bool:
        return self.phase == SpinPhase.IDLE and len(self.wheel.items) >= MIN_ITEMS_TO_SPIN

    def start(self) -> None:
        if self.phase != SpinPhase.IDLE:
            logger.warning("start() rejected while %s", self.phase.name)
            raise InvalidPhaseTransitionError("start", self.phase)

        item_count: int = len(self.wheel.items)
        if item_count < MIN_ITEMS_TO_SPIN:
            logger.warning("start() rejected with %d items", item_count)
            raise TooFewItemsError(item_count, MIN_ITEMS_TO_SPIN)

        self.rotation_speed = self.config.cruise_speed
        self.last_winner = None
        self._set_phase(SpinPhase.SPINNING)

    def stop(self) -> None:
        if self.phase != SpinPhase.SPINNING:
            logger.warning("stop() rejected while %s", self.phase.name)
            raise InvalidPhaseTransitionError("stop", self.phase)

        self.deceleration_start_speed = self.rotation_speed
        self.deceleration_started_at = self.clock
        self._set_phase(SpinPhase.DECELERATING)

    def tick(self, dt: float) -> None:
        self.clock += dt

        match self.phase:
            case SpinPhase.IDLE:
                pass

            case SpinPhase.SPINNING:
                self._advance()

            case SpinPhase.DECELERATING:
                t: float = elapsed_fraction(
                    self.clock,
                    self.deceleration_started_at,
                    self.config.deceleration_duration_sec,
                )

                if t < 1.0:
                    # Linear ease-out keyed to elapsed time, not to the tick count
                    self.rotation_speed = self.deceleration_start_speed * (1.0 - t)
                    self._advance()
                else:
                    self.rotation_speed = 0.0
                    self._resolve()

            case SpinPhase.RESOLVING:
                delay_t: float = elapsed_fraction(
                    self.clock,
                    self.resolved_at,
                    self.config.winner_display_delay_sec,
                )

                if delay_t >= 1.0:
                    self._remove_winner()

    def _advance(self) -> None:
        self.wheel.angle += self.rotation_speed
        self._request_redraw()

    def _resolve(self) -> None:
        if not self.wheel.items:
            # Everything was deleted mid-spin, nothing to pick from
            logger.warning("Spin finished on an empty wheel, no winner")
            self._set_phase(SpinPhase.IDLE)
            self._notify_idle()
            return

        self._set_phase(SpinPhase.RESOLVING)

        index: int = self.wheel.sector_at(self.wheel.angle)
        item: Item = self.wheel.items[index]
        entry: HistoryEntry = self.history.peek(item.label)
        winner = WinnerResolved(item.label, entry.sequence, index)

        self.last_winner = winner
        self._pending_winner = item
        self.resolved_at = self.clock
        logger.info("Winner #%d: %r (sector %d)", winner.sequence, winner.label, index)

        if self.on_winner is not None:
            self.on_winner(winner)
        if self.on_celebrate is not None:
            self.on_celebrate(winner)
        self.history.record(item.label)

    def _remove_winner(self) -> None:
        item: Item | None = self._pending_winner
        self._pending_winner = None

        # Look up by identity, the list may have been edited during the delay
        if item is not None and not self.wheel.discard(item):
            logger.info("Winner %r was already removed from the wheel", item.label)

        self._set_phase(SpinPhase.IDLE)
        self._request_redraw()
        self._notify_idle()

    def _set_phase(self, phase: SpinPhase) -> None:
        logger.debug("%s -> %s", self.phase.name, phase.name)
        self.phase = phase

    def _request_redraw(self) -> None:
        if self.on_redraw is not None:
            self.on_redraw()

    def _notify_idle(self) -> None:
        if self.on_idle is not None:
            self.on_idle()
