from enum import Enum

from .config import DEFAULT_CONFIG

OBSTACLE_PALETTE = ("#f87171", "#fbbf24", "#c084fc", "#22d3ee")


class GameState(Enum):
    LOADING = "LOADING"
    START = "START"
    PLAYING = "PLAYING"
    GAMEOVER = "GAMEOVER"


class Obstacle:
    """A block sitting in one lane, approaching the player as z shrinks."""
    def __init__(self, obstacle_id, lane, z, color):
        self.id = obstacle_id
        self.lane = lane
        self.z = z
        self.color = color

    def __repr__(self):
        return f"Obstacle(id={self.id}, lane={self.lane}, z={self.z:.3f}, color={self.color!r})"


class BackgroundParticle:
    """A decorative streak in normalized screen space."""
    def __init__(self, x, y, speed, length):
        self.x = x
        self.y = y
        self.speed = speed
        self.length = length

    @classmethod
    def random(cls, rng):
        return cls(
            x=float(rng.random()),
            y=float(rng.random()),
            speed=0.01 + float(rng.random()) * 0.02,
            length=5 + float(rng.random()) * 15,
        )


class GameRunState:
    """Mutable state of one play session."""

    def __init__(self, config=DEFAULT_CONFIG, particles=None):
        self.score = 0.0
        self.player_lane = float(config.start_lane)
        self.player_position = float(config.start_lane)
        self.speed = config.base_speed
        self.tilt = 0.0
        self.obstacles = []
        self.particles = particles if particles is not None else []
        self.frame_count = 0
        self.last_spawn_time = 0.0
        self.next_obstacle_id = 1

    @classmethod
    def fresh(cls, rng, config=DEFAULT_CONFIG):
        particles = [BackgroundParticle.random(rng) for _ in range(config.particle_count)]
        return cls(config, particles=particles)
