import os

import gymnasium as gym
from gymnasium.spaces import MultiDiscrete
import numpy as np
import pygame

from .config import DEFAULT_CONFIG
from .models import GameRunState
from .renderer import render
from .simulation import advance
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")


class GameEnv(gym.Env):
    """
    The hand-steered racer as a headless environment. Each step is one display
    tick; the action carries the target lane and whether a hand was detected.
    When no hand is detected the last lane is held, as in the live game.
    """
    metadata = {"render_modes": ["rgb_array"]}

    user_guide = (
        "Controls: choose a lane (0 left, 1 centre, 2 right). The second action component "
        "is 1 while the hand is visible; 0 keeps the previous lane."
    )

    game_description = (
        "Neon hover-racer on a three-lane highway. Speed keeps rising; dodge every block."
    )

    auto_advance = True

    MAX_STEPS = 5000
    COLLISION_PENALTY = -10.0

    def __init__(self, render_mode="rgb_array", config=DEFAULT_CONFIG):
        super().__init__()
        self.config = config
        self.render_mode = render_mode
        self.SCREEN_WIDTH, self.SCREEN_HEIGHT = config.width, config.height

        self.observation_space = gym.spaces.Box(
            low=0, high=255, shape=(self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3), dtype=np.uint8
        )
        self.action_space = MultiDiscrete([config.LANES, 2])

        pygame.init()
        self.screen = pygame.Surface((self.SCREEN_WIDTH, self.SCREEN_HEIGHT))

        self.state = None
        self.steps = 0
        self.game_over = False
        self.target_lane = config.start_lane

        self.reset()
        self.validate_implementation()

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)

        self.state = GameRunState.fresh(self.np_random, self.config)
        self.steps = 0
        self.game_over = False
        self.target_lane = self.config.start_lane

        return self._get_observation(), self._get_info()

    def step(self, action):
        if self.game_over:
            return self._get_observation(), 0.0, True, False, self._get_info()

        lane, hand_present = int(action[0]), int(action[1])
        if hand_present:
            self.target_lane = lane

        self.steps += 1
        score_before = self.state.score
        events = advance(
            self.state, self.steps * self.config.frame_ms, self.target_lane,
            self.np_random, self.config,
        )
        reward = self.state.score - score_before

        terminated = False
        if events.collision is not None:
            self.game_over = True
            terminated = True
            reward += self.COLLISION_PENALTY
            # sfx: collision noise burst
        if self.steps >= self.MAX_STEPS:
            terminated = True

        return self._get_observation(), float(reward), terminated, False, self._get_info()

    def _get_observation(self):
        render(self.screen, self.state, self.SCREEN_WIDTH, self.SCREEN_HEIGHT)
        arr = pygame.surfarray.array3d(self.screen)
        return np.transpose(arr, (1, 0, 2)).astype(np.uint8)

    def render(self):
        return self._get_observation()

    def _get_info(self):
        return {
            "score": self.state.score,
            "steps": self.steps,
            "speed": self.state.speed,
            "obstacles": len(self.state.obstacles),
            "lane": self.target_lane,
        }

    def close(self):
        pygame.quit()

    def validate_implementation(self):
        # Test action space
        assert self.action_space.shape == (2,)
        assert self.action_space.nvec.tolist() == [self.config.LANES, 2]

        # Test observation space
        test_obs = self._get_observation()
        assert test_obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert test_obs.dtype == np.uint8

        # Test reset
        obs, info = self.reset()
        assert obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert isinstance(info, dict)

        # Test step
        test_action = self.action_space.sample()
        obs, reward, term, trunc, info = self.step(test_action)
        assert obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert isinstance(reward, (int, float))
        assert isinstance(term, bool)
        assert not trunc
        assert isinstance(info, dict)

        self.reset()
        print("✓ Implementation validated successfully")
