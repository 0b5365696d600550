def ease_in(t: float, exponent: float = 2.0) -> float:
    t = max(0.0, min(1.0, t))
    return t**exponent


def ease_out(t: float, exponent: float = 2.0) -> float:
    t = max(0.0, min(1.0, t))
    return 1.0 - (1.0 - t) ** exponent
