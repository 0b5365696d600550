from dataclasses import dataclass


@dataclass
class Config:
    game_speed: float = 1.0
    fps_limit: float = 60.0
    cruise_speed: float = 0.2
    deceleration_duration_sec: float = 5.0
    winner_display_delay_sec: float = 2.0
    confetti_particle_count: int = 150
    confetti_duration_sec: float = 1.6
    confetti_spread_deg: float = 70.0
    notice_duration_sec: float = 2.5
    history_visible_rows: int = 10
    item_list_visible_rows: int = 12
