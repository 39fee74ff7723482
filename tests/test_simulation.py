import numpy as np
import pytest

from aero_racer.config import RacerConfig
from aero_racer.models import OBSTACLE_PALETTE, GameRunState, Obstacle
from aero_racer.simulation import advance, advance_background, find_collision, spawn_interval

FRAME_MS = 1000 / 60


def make_state(rng, config=None):
    return GameRunState.fresh(rng, config or RacerConfig())


def test_fresh_state(rng):
    state = make_state(rng)
    assert state.score == 0
    assert state.obstacles == []
    assert len(state.particles) == 40
    assert state.player_lane == 1
    assert state.player_position == 1
    assert state.speed == pytest.approx(0.055)
    for p in state.particles:
        assert 0 <= p.x < 1 and 0 <= p.y < 1
        assert 0.01 <= p.speed <= 0.03
        assert 5 <= p.length <= 20


def test_speed_increases_and_score_never_drops(rng):
    state = make_state(rng)
    for i in range(1, 300):
        speed, score = state.speed, state.score
        advance(state, i * FRAME_MS, 1, rng)
        assert state.speed > speed
        assert state.score >= score


def test_score_accumulates_speed_times_rate(rng):
    state = make_state(rng)
    advance(state, FRAME_MS, 1, rng)
    assert state.score == pytest.approx(0.055 * 2)


def test_smoothing_first_tick(rng):
    state = make_state(rng)
    state.player_position = 0.0
    state.player_lane = 0.0
    advance(state, FRAME_MS, 2, rng)
    assert state.player_position == pytest.approx(0.24)
    assert state.tilt == pytest.approx(0.24 * 15)


def test_smoothing_converges_without_overshoot(rng):
    state = make_state(rng)
    state.player_position = 0.0
    state.player_lane = 0.0
    for i in range(1, 200):
        advance(state, i * FRAME_MS, 2, rng)
        state.obstacles = []
        assert state.player_position <= 2
    assert state.player_position == pytest.approx(2, abs=1e-6)


def test_lane_shift_fires_once_per_change(rng):
    state = make_state(rng)
    events = [advance(state, i * FRAME_MS, lane, rng).lane_shift
              for i, lane in enumerate([2, 2, 2, 0, 0, 1], start=1)]
    assert events == [True, False, False, True, False, True]


def test_obstacles_move_by_speed_and_despawn(rng):
    state = make_state(rng)
    state.obstacles = [
        Obstacle(1, 0, -0.15, OBSTACLE_PALETTE[0]),
        Obstacle(2, 2, 1.0, OBSTACLE_PALETTE[1]),
    ]
    state.next_obstacle_id = 3
    advance(state, FRAME_MS, 1, rng)
    assert [o.id for o in state.obstacles] == [2]
    assert state.obstacles[0].z == pytest.approx(1.0 - state.speed)


def test_despawned_ids_never_return(rng):
    state = make_state(rng)
    gone = set()
    seen = set()
    for i in range(1, 3000):
        state.player_position = 5.0  # park the ship off the road so nothing collides
        state.player_lane = 5.0
        advance(state, i * FRAME_MS, 5, rng)
        live = {o.id for o in state.obstacles}
        assert all(o.z > -0.2 for o in state.obstacles)
        assert not (live & gone)
        gone |= seen - live
        seen |= live
    assert len(gone) > 3


def test_spawn_interval_is_floored():
    config = RacerConfig()
    assert spawn_interval(0.0, config) == 1800
    assert spawn_interval(0.055, config) == pytest.approx(1800 - 660)
    assert spawn_interval(0.5, config) == 700
    assert spawn_interval(1000.0, config) == 700


def test_first_spawn_waits_for_interval(rng):
    state = make_state(rng)
    advance(state, 1000, 1, rng)
    assert state.obstacles == []
    advance(state, 1200, 1, rng)
    assert len(state.obstacles) == 1
    obs = state.obstacles[0]
    assert obs.z == pytest.approx(1.6)
    assert obs.lane in (0, 1, 2)
    assert obs.color in OBSTACLE_PALETTE
    assert state.last_spawn_time == 1200


def test_spawns_never_closer_than_minimum_at_high_speed(rng):
    state = make_state(rng)
    state.speed = 50.0
    spawn_times = []
    for i in range(1, 2000):
        now = i * FRAME_MS
        before = state.next_obstacle_id
        state.player_position = state.player_lane = 5.0
        advance(state, now, 5, rng)
        if state.next_obstacle_id != before:
            spawn_times.append(now)
    gaps = np.diff(spawn_times)
    assert len(gaps) > 10
    assert gaps.min() > 700


def test_collision_window_boundaries():
    config = RacerConfig()
    state = GameRunState(config)

    def hit(z, position, lane=0):
        state.obstacles = [Obstacle(1, lane, z, OBSTACLE_PALETTE[0])]
        state.player_position = position
        return find_collision(state, config) is not None

    assert hit(0.1, 0.54)
    assert not hit(0.1, 0.56)
    assert hit(0.11, 0.0)
    assert hit(-0.04, 0.0)
    assert not hit(0.12, 0.0)
    assert not hit(-0.05, 0.0)
    assert not hit(0.5, 0.0)


def test_advance_reports_first_collision(rng):
    state = make_state(rng)
    state.obstacles = [
        Obstacle(1, 1, 0.15, OBSTACLE_PALETTE[0]),
        Obstacle(2, 1, 0.14, OBSTACLE_PALETTE[1]),
    ]
    events = advance(state, FRAME_MS, 1, rng)
    assert events.collision is state.obstacles[0]
    assert events.collision.id == 1


def test_near_miss_in_adjacent_lane(rng):
    state = make_state(rng)
    state.obstacles = [Obstacle(1, 0, 0.15, OBSTACLE_PALETTE[0])]
    events = advance(state, FRAME_MS, 1, rng)
    assert events.collision is None


def test_background_particles_wrap(rng):
    state = make_state(rng)
    p = state.particles[0]
    p.y, p.speed = 0.99, 0.02
    advance_background(state, rng)
    assert p.y == 0.0
    assert 0 <= p.x < 1


def test_advance_is_deterministic_for_same_draws():
    def run(seed):
        rng = np.random.default_rng(seed)
        state = GameRunState.fresh(rng)
        for i in range(1, 600):
            advance(state, i * FRAME_MS, (i // 50) % 3, rng)
        return [(o.id, o.lane, round(o.z, 9), o.color) for o in state.obstacles], state.score

    assert run(7) == run(7)
