import math

import pytest

from term_wheel.config import Config
from term_wheel.errors import InvalidPhaseTransitionError, TooFewItemsError
from term_wheel.history import History
from term_wheel.spin import SpinController, WinnerResolved
from term_wheel.spin_phase import SpinPhase
from term_wheel.wheel import POINTER_ANGLE, WheelModel, sector_width

DT: float = 1.0 / 60.0
MAX_TICKS: int = 10_000


class Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def redraw(self) -> None:
        self.events.append(("redraw", None))

    def winner(self, winner: WinnerResolved) -> None:
        self.events.append(("winner", winner))

    def celebrate(self, winner: WinnerResolved) -> None:
        self.events.append(("celebrate", winner))

    def idle(self) -> None:
        self.events.append(("idle", None))

    def named(self, name: str) -> list[object]:
        return [payload for event, payload in self.events if event == name]


def make_controller(
    labels: list[str],
    config: Config | None = None,
    recorder: Recorder | None = None,
) -> SpinController:
    wheel = WheelModel()
    for label in labels:
        wheel.add_item(label)
    recorder = recorder or Recorder()
    return SpinController(
        wheel,
        History(),
        config or Config(),
        on_redraw=recorder.redraw,
        on_winner=recorder.winner,
        on_celebrate=recorder.celebrate,
        on_idle=recorder.idle,
    )


def tick_until(controller: SpinController, phase: SpinPhase, dt: float = DT) -> int:
    for ticks in range(1, MAX_TICKS):
        controller.tick(dt)
        if controller.phase == phase:
            return ticks
    raise AssertionError(f"never reached {phase.name}, stuck in {controller.phase.name}")


def center_of(index: int, count: int) -> float:
    return POINTER_ANGLE - (index + 0.5) * sector_width(count)


def test_initial_state():
    controller = make_controller(["A", "B"])

    assert controller.phase == SpinPhase.IDLE
    assert controller.wheel.angle == 0.0
    assert controller.rotation_speed == 0.0


@pytest.mark.parametrize("labels", [[], ["A"]])
def test_start_needs_two_items(labels: list[str]):
    controller = make_controller(labels)

    with pytest.raises(TooFewItemsError) as excinfo:
        controller.start()

    assert excinfo.value.item_count == len(labels)
    assert controller.phase == SpinPhase.IDLE
    assert controller.rotation_speed == 0.0
    assert not controller.can_start


def test_start_with_two_items_spins_at_cruise_speed():
    config = Config(cruise_speed=0.3)
    controller = make_controller(["A", "B"], config)

    assert controller.can_start
    controller.start()

    assert controller.phase == SpinPhase.SPINNING
    assert controller.rotation_speed == 0.3


def test_spinning_adds_constant_speed_per_tick():
    recorder = Recorder()
    controller = make_controller(["A", "B"], recorder=recorder)
    controller.start()

    for _ in range(10):
        controller.tick(DT)

    assert controller.phase == SpinPhase.SPINNING
    assert controller.wheel.angle == pytest.approx(10 * Config().cruise_speed)
    assert len(recorder.named("redraw")) == 10


def test_spinning_never_stops_on_its_own():
    controller = make_controller(["A", "B"])
    controller.start()

    for _ in range(60 * 60):
        controller.tick(DT)

    assert controller.phase == SpinPhase.SPINNING
    assert controller.rotation_speed == Config().cruise_speed


def test_idle_tick_does_not_move():
    controller = make_controller(["A", "B"])
    controller.tick(DT)

    assert controller.wheel.angle == 0.0


def test_stop_while_idle_is_rejected():
    controller = make_controller(["A", "B"])

    with pytest.raises(InvalidPhaseTransitionError):
        controller.stop()

    assert controller.phase == SpinPhase.IDLE


def test_start_while_spinning_is_rejected():
    controller = make_controller(["A", "B"])
    controller.start()

    with pytest.raises(InvalidPhaseTransitionError):
        controller.start()

    assert controller.phase == SpinPhase.SPINNING


def test_stop_twice_is_rejected():
    controller = make_controller(["A", "B"])
    controller.start()
    controller.stop()

    with pytest.raises(InvalidPhaseTransitionError):
        controller.stop()

    assert controller.phase == SpinPhase.DECELERATING


def test_stop_captures_current_speed():
    controller = make_controller(["A", "B"])
    controller.start()
    controller.tick(DT)
    controller.stop()

    assert controller.phase == SpinPhase.DECELERATING
    assert controller.deceleration_start_speed == Config().cruise_speed


def test_deceleration_is_strictly_decreasing_and_takes_five_seconds():
    controller = make_controller(["A", "B", "C"])
    controller.start()
    controller.tick(DT)
    controller.stop()
    stopped_at = controller.clock

    speeds: list[float] = [controller.rotation_speed]
    while controller.phase == SpinPhase.DECELERATING:
        controller.tick(DT)
        speeds.append(controller.rotation_speed)

    assert controller.phase == SpinPhase.RESOLVING
    assert speeds[-1] == 0.0
    assert all(later < earlier for earlier, later in zip(speeds, speeds[1:]))

    elapsed = controller.clock - stopped_at
    assert 5.0 <= elapsed < 5.0 + 2 * DT


def test_deceleration_speed_follows_linear_ease_out():
    controller = make_controller(["A", "B"])
    controller.start()
    controller.stop()

    # 2.5 seconds in is half way
    for _ in range(25):
        controller.tick(0.1)

    assert controller.rotation_speed == pytest.approx(Config().cruise_speed * 0.5)


@pytest.mark.parametrize("dt", [1.0 / 30.0, 1.0 / 60.0, 1.0 / 144.0])
def test_deceleration_duration_is_independent_of_frame_rate(dt: float):
    controller = make_controller(["A", "B"])
    controller.start()
    controller.stop()

    tick_until(controller, SpinPhase.RESOLVING, dt)

    assert controller.clock == pytest.approx(5.0, abs=dt * 1.01)


def test_winner_is_resolved_once_and_removed_after_delay():
    recorder = Recorder()
    controller = make_controller(["A", "B", "C", "D"], recorder=recorder)
    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    winner = controller.last_winner
    assert winner is not None
    assert recorder.named("winner") == [winner]
    assert controller.wheel.labels[winner.index] == winner.label
    assert len(controller.wheel.items) == 4

    resolved_at = controller.clock
    tick_until(controller, SpinPhase.IDLE)

    assert controller.clock - resolved_at >= Config().winner_display_delay_sec
    assert len(controller.wheel.items) == 3
    assert recorder.named("idle") == [None]

    for _ in range(600):
        controller.tick(DT)
    assert len(recorder.named("winner")) == 1


def test_winner_removal_keeps_other_items_in_order():
    labels = ["A", "B", "C", "D", "E"]
    controller = make_controller(labels)
    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)
    winner = controller.last_winner
    assert winner is not None

    tick_until(controller, SpinPhase.IDLE)

    expected = labels[: winner.index] + labels[winner.index + 1 :]
    assert controller.wheel.labels == expected


def test_resolution_side_effects_run_in_order():
    order: list[str] = []
    wheel = WheelModel()
    wheel.add_item("A")
    wheel.add_item("B")
    history = History()

    controller = SpinController(
        wheel,
        history,
        Config(),
        on_winner=lambda w: order.append(f"winner:{len(history.entries)}"),
        on_celebrate=lambda w: order.append(f"celebrate:{len(history.entries)}"),
    )
    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    assert order == ["winner:0", "celebrate:0"]
    assert len(history.entries) == 1


def test_winner_payload_matches_history_entry():
    recorder = Recorder()
    controller = make_controller(["A", "B"], recorder=recorder)
    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    winner = recorder.named("winner")[0]
    assert isinstance(winner, WinnerResolved)
    assert recorder.named("celebrate") == [winner]
    assert controller.history.entries[-1].sequence == winner.sequence
    assert controller.history.entries[-1].label == winner.label


def test_cannot_start_while_resolving():
    controller = make_controller(["A", "B", "C"])
    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    with pytest.raises(InvalidPhaseTransitionError):
        controller.start()
    assert not controller.can_start

    tick_until(controller, SpinPhase.IDLE)
    assert controller.can_start
    controller.start()
    assert controller.phase == SpinPhase.SPINNING


def test_history_sequence_survives_clears():
    controller = make_controller(["A", "B", "C", "D"])

    for _ in range(2):
        controller.start()
        controller.stop()
        tick_until(controller, SpinPhase.RESOLVING)
        tick_until(controller, SpinPhase.IDLE)

    controller.history.clear()
    controller.wheel.clear()
    controller.wheel.add_item("E")
    controller.wheel.add_item("F")

    controller.start()
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    assert [e.sequence for e in controller.history.entries] == [3]
    last_winner = controller.last_winner
    assert last_winner is not None
    assert last_winner.sequence == 3


def test_duplicate_labels_remove_the_selected_one():
    config = Config(cruise_speed=1e-6)
    controller = make_controller(["A", "A", "B"], config)
    first, second, third = controller.wheel.items

    controller.start()
    controller.wheel.angle = center_of(1, 3)
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)
    tick_until(controller, SpinPhase.IDLE)

    assert controller.wheel.items == [first, third]
    assert controller.wheel.items[0] is first


def test_editing_during_delay_removes_winner_by_identity():
    config = Config(cruise_speed=1e-6)
    controller = make_controller(["A", "B", "C", "D"], config)

    controller.start()
    controller.wheel.angle = center_of(2, 4)
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)
    assert controller.last_winner is not None
    assert controller.last_winner.label == "C"

    # Shift the winner's index before the pending removal fires
    controller.wheel.remove_item(0)
    tick_until(controller, SpinPhase.IDLE)

    assert controller.wheel.labels == ["B", "D"]


def test_winner_already_deleted_during_delay():
    config = Config(cruise_speed=1e-6)
    controller = make_controller(["A", "B", "C"], config)

    controller.start()
    controller.wheel.angle = center_of(0, 3)
    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    controller.wheel.remove_item(0)
    tick_until(controller, SpinPhase.IDLE)

    assert controller.wheel.labels == ["B", "C"]


def test_clearing_during_spin_resolves_no_winner():
    recorder = Recorder()
    controller = make_controller(["A", "B"], recorder=recorder)
    controller.start()
    controller.stop()
    controller.wheel.clear()

    tick_until(controller, SpinPhase.IDLE)

    assert recorder.named("winner") == []
    assert controller.history.entries == []
    assert controller.last_winner is None
    assert recorder.named("idle") == [None]


def test_pizza_sushi_tacos_scenario():
    config = Config(cruise_speed=1e-6)
    controller = make_controller(["Pizza", "Sushi", "Tacos"], config)

    controller.start()
    controller.tick(DT)
    controller.wheel.angle = math.pi / 2
    assert controller.wheel.sector_at() == 1

    controller.stop()
    tick_until(controller, SpinPhase.RESOLVING)

    assert controller.last_winner == WinnerResolved("Sushi", 1, 1)
    assert [str(e) for e in controller.history.entries] == ["1. Sushi"]
    assert controller.wheel.labels == ["Pizza", "Sushi", "Tacos"]

    tick_until(controller, SpinPhase.IDLE)

    assert controller.wheel.labels == ["Pizza", "Tacos"]
