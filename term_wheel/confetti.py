import math
import random
from dataclasses import dataclass

from term_wheel.config import Config
from term_wheel.context import elapsed_fraction
from term_wheel.curves import ease_in, ease_out
from term_wheel.ezterm import RGBA, DrawCall, RichText, mul_darken

CONFETTI_COLORS: list[RGBA] = [
    RGBA.from_hex("#FFB7B2"),
    RGBA.from_hex("#B2E2F2"),
    RGBA.from_hex("#B2F2BB"),
]
CONFETTI_CHARS: str = "*+•·▪"

# Cells per second, cells per second squared
MIN_LAUNCH_SPEED: float = 12.0
MAX_LAUNCH_SPEED: float = 40.0
GRAVITY: float = 28.0
DRAG: float = 1.6


@dataclass
class ConfettiParticle:
    x: float
    y: float
    vx: float
    vy: float
    char: str
    color: RGBA
    start_timestamp: float
    duration_sec: float


def spawn_confetti(
    origin_x: float,
    origin_y: float,
    game_time: float,
    config: Config,
    rng: random.Random | None = None,
) -> list[ConfettiParticle]:
    """A burst fired upwards from (origin_x, origin_y) within the configured spread."""
    rand = rng if rng is not None else random
    half_spread: float = math.radians(config.confetti_spread_deg) / 2.0
    particles: list[ConfettiParticle] = []

    for _ in range(config.confetti_particle_count):
        direction: float = -math.pi / 2.0 + rand.uniform(-half_spread, half_spread)
        speed: float = rand.uniform(MIN_LAUNCH_SPEED, MAX_LAUNCH_SPEED)

        particles.append(
            ConfettiParticle(
                x=origin_x,
                y=origin_y,
                # Terminal cells are about twice as tall as they are wide
                vx=math.cos(direction) * speed * 2.0,
                vy=math.sin(direction) * speed,
                char=rand.choice(CONFETTI_CHARS),
                color=rand.choice(CONFETTI_COLORS),
                start_timestamp=game_time,
                duration_sec=config.confetti_duration_sec * rand.uniform(0.6, 1.0),
            )
        )

    return particles


def update_confetti(particles: list[ConfettiParticle], dt: float) -> None:
    """Mutates `particles` in place."""
    drag: float = math.exp(-DRAG * dt)

    for particle in particles:
        particle.vx *= drag
        particle.vy = particle.vy * drag + GRAVITY * dt
        particle.x += particle.vx * dt
        particle.y += particle.vy * dt


def prune_confetti(particles: list[ConfettiParticle], game_time: float) -> list[ConfettiParticle]:
    return [
        p for p in particles if elapsed_fraction(game_time, p.start_timestamp, p.duration_sec) < 1.0
    ]


def render_confetti(particles: list[ConfettiParticle], game_time: float) -> list[DrawCall]:
    draw_calls: list[DrawCall] = []

    for particle in particles:
        t: float = elapsed_fraction(game_time, particle.start_timestamp, particle.duration_sec)
        if t >= 1.0:
            continue

        # Quick pop in, slow fade out
        alpha: float = ease_out(min(1.0, t * 10.0)) * (1.0 - ease_in(t))
        rich_text = mul_darken(RichText(particle.char, particle.color, bold=True), alpha)

        draw_calls.append(DrawCall(round(particle.x), round(particle.y), rich_text))

    return draw_calls
