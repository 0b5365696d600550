from dataclasses import dataclass

# Terminal cells are roughly twice as tall as they are wide
CELL_ASPECT: float = 2.0
MIN_WHEEL_RADIUS: int = 3


@dataclass
class Layout:
    wheel_x: int
    wheel_y: int
    wheel_radius: int
    panel_x: int
    result_y: int
    input_y: int
    help_y: int
    notice_y: int


def calc_layout(width: int, height: int) -> Layout:
    # Leave room for the pointer above the wheel and four status rows below it
    radius_by_height: int = (height - 8) // 2
    radius_by_width: int = int((width // 2 - 6) / (2 * CELL_ASPECT))
    radius: int = max(MIN_WHEEL_RADIUS, min(radius_by_height, radius_by_width))

    wheel_x: int = 2 + int(radius * CELL_ASPECT)
    wheel_y: int = 2 + radius
    bottom: int = wheel_y + radius + 2

    return Layout(
        wheel_x=wheel_x,
        wheel_y=wheel_y,
        wheel_radius=radius,
        panel_x=wheel_x + int(radius * CELL_ASPECT) + 6,
        result_y=bottom,
        input_y=bottom + 1,
        help_y=bottom + 2,
        notice_y=bottom + 3,
    )
