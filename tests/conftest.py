import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from aero_racer.config import RacerConfig


class RecordingAudio:
    """Stands in for AudioSynth and records what the game asked for."""

    def __init__(self):
        self.calls = []
        self.engine_running = False

    def resume(self):
        self.calls.append("resume")
        return False

    def start_engine(self):
        self.calls.append("start_engine")
        self.engine_running = True

    def update_engine(self, speed, dt_ms):
        self.calls.append("update_engine")

    def stop_engine(self):
        self.calls.append("stop_engine")
        self.engine_running = False

    def play_lane_shift(self):
        self.calls.append("lane_shift")

    def play_collision(self):
        self.calls.append("collision")


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def config(tmp_path):
    return RacerConfig(
        width=320,
        height=240,
        muted=True,
        high_score_path=str(tmp_path / "highscore.json"),
    )


@pytest.fixture
def audio():
    return RecordingAudio()
