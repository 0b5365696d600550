class WheelError(Exception):
    """Base class for rejected wheel operations. None of these are fatal."""


class TooFewItemsError(WheelError):
    def __init__(self, item_count: int, required: int = 2) -> None:
        super().__init__(f"Need at least {required} items to spin, got {item_count}")
        self.item_count = item_count
        self.required = required


class IndexOutOfRangeError(WheelError, IndexError):
    def __init__(self, index: int, item_count: int) -> None:
        super().__init__(f"No item at index {index} (wheel has {item_count} items)")
        self.index = index
        self.item_count = item_count


class InvalidPhaseTransitionError(WheelError):
    def __init__(self, operation: str, phase: object) -> None:
        super().__init__(f"Cannot {operation} while {getattr(phase, 'name', phase)}")
        self.operation = operation
        self.phase = phase


class EmptyWheelError(WheelError):
    def __init__(self) -> None:
        super().__init__("The wheel has no sectors")
