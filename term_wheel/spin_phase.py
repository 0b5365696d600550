from enum import Enum, auto


class SpinPhase(Enum):
    IDLE = auto()
    SPINNING = auto()
    DECELERATING = auto()
    RESOLVING = auto()
