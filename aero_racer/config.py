import os
from dataclasses import dataclass, field


def _default_high_score_path():
    return os.path.join(os.path.expanduser("~"), ".aero_racer", "highscore.json")


@dataclass(frozen=True)
class RacerConfig:
    """Every tunable constant of the racer in one place.

    Distances are in road units (1.6 is the horizon, 0 the player plane),
    times in milliseconds and speeds in road units per tick.
    """

    # Track
    LANES = 3

    # Speed and score
    base_speed: float = 0.055
    speed_increment: float = 0.000005
    score_rate: float = 2.0

    # Steering
    smoothing: float = 0.12
    tilt_gain: float = 15.0
    lane_shift_epsilon: float = 0.1
    start_lane: int = 1

    # Obstacles
    spawn_z: float = 1.6
    despawn_z: float = -0.2
    base_spawn_interval: float = 1800.0
    min_spawn_interval: float = 700.0
    spawn_accel: float = 12000.0
    collision_z_min: float = -0.05
    collision_z_max: float = 0.12
    collision_lane_width: float = 0.55

    # Background
    particle_count: int = 40

    # Display
    width: int = 800
    height: int = 600
    fps: int = 60

    # Audio
    sample_rate: int = 44100
    engine_volume: float = 0.15
    engine_block_ms: int = 50
    muted: bool = False

    high_score_path: str = field(default_factory=_default_high_score_path)

    def __post_init__(self):
        if self.base_spawn_interval <= 0 or self.min_spawn_interval <= 0:
            raise ValueError("spawn intervals must be positive")
        if self.min_spawn_interval > self.base_spawn_interval:
            raise ValueError(
                f"min_spawn_interval ({self.min_spawn_interval}) exceeds "
                f"base_spawn_interval ({self.base_spawn_interval})"
            )
        if not 0 < self.smoothing <= 1:
            raise ValueError(f"smoothing must be in (0, 1], got {self.smoothing}")
        if self.width <= 0 or self.height <= 0 or self.fps <= 0:
            raise ValueError("width, height and fps must be positive")

    @property
    def frame_ms(self):
        return 1000.0 / self.fps


DEFAULT_CONFIG = RacerConfig()
