from collections import namedtuple

from .config import DEFAULT_CONFIG
from .models import OBSTACLE_PALETTE, Obstacle

StepEvents = namedtuple("StepEvents", ["lane_shift", "collision"])


def spawn_interval(speed, config=DEFAULT_CONFIG):
    """Milliseconds that must pass between two spawns at the given speed."""
    return max(config.min_spawn_interval, config.base_spawn_interval - speed * config.spawn_accel)


def find_collision(state, config=DEFAULT_CONFIG):
    """Return the first obstacle overlapping the ship, or None."""
    for obs in state.obstacles:
        if not (config.collision_z_min < obs.z < config.collision_z_max):
            continue
        if abs(obs.lane - state.player_position) < config.collision_lane_width:
            return obs
    return None


def advance_background(state, rng):
    """Scroll the background streaks. Runs in every game state."""
    for p in state.particles:
        p.y += p.speed + state.speed
        if p.y > 1:
            p.y = 0.0
            p.x = float(rng.random())


def advance(state, now_ms, target_lane, rng, config=DEFAULT_CONFIG):
    """Advance a playing session by one tick.

    `now_ms` is the session clock, `target_lane` the latest lane from input.
    Mutates `state` and returns the StepEvents the tick produced.
    """
    state.frame_count += 1
    state.score += state.speed * config.score_rate
    state.speed += config.speed_increment

    # --- Steering ---
    lane_shift = abs(target_lane - state.player_lane) > config.lane_shift_epsilon
    state.player_lane = float(target_lane)

    prev_position = state.player_position
    state.player_position += (state.player_lane - state.player_position) * config.smoothing
    state.tilt = (state.player_position - prev_position) * config.tilt_gain

    # --- Obstacles ---
    for obs in state.obstacles:
        obs.z -= state.speed
    state.obstacles = [obs for obs in state.obstacles if obs.z > config.despawn_z]

    if now_ms - state.last_spawn_time > spawn_interval(state.speed, config):
        state.obstacles.append(Obstacle(
            obstacle_id=state.next_obstacle_id,
            lane=int(rng.integers(0, config.LANES)),
            z=config.spawn_z,
            color=OBSTACLE_PALETTE[int(rng.integers(0, len(OBSTACLE_PALETTE)))],
        ))
        state.next_obstacle_id += 1
        state.last_spawn_time = now_ms

    collision = find_collision(state, config)

    advance_background(state, rng)

    return StepEvents(lane_shift=lane_shift, collision=collision)
