import numpy as np
import pygame

from .config import DEFAULT_CONFIG

LEFT_LANE, CENTER_LANE, RIGHT_LANE = 0, 1, 2

# Hand x thresholds after mirroring; between them is the centre lane
HAND_LEFT_EDGE = 0.38
HAND_RIGHT_EDGE = 0.62


def lane_from_hand_x(hand_center_x, mirrored=True):
    """Discretize a normalized hand x position (0..1 across the video) to a lane.

    Webcam previews are mirrored, so by default x is flipped first to make
    moving the hand left steer left.
    """
    x = 1.0 - hand_center_x if mirrored else hand_center_x
    if x < HAND_LEFT_EDGE:
        return LEFT_LANE
    if x > HAND_RIGHT_EDGE:
        return RIGHT_LANE
    return CENTER_LANE


class LaneInput:
    """Last-value-wins slot between the tracker and the game loop.

    The tracker may call in on its own cadence. The loop only ever reads
    `lane`, which holds its last known value while the hand is lost.
    """

    def __init__(self, config=DEFAULT_CONFIG):
        self.lanes = config.LANES
        self.lane = config.start_lane
        self.detected = False
        self.ready = False
        self._ready_listeners = []

    def on_lane_change(self, lane):
        self.lane = int(np.clip(int(lane), 0, self.lanes - 1))
        self.detected = True

    def on_input_lost(self):
        self.detected = False

    def on_input_ready(self):
        if self.ready:
            return
        self.ready = True
        for listener in self._ready_listeners:
            listener()

    def add_ready_listener(self, listener):
        self._ready_listeners.append(listener)
        if self.ready:
            listener()


class KeyboardLanes:
    """Stand-in tracker for local play: holding a key selects a lane."""

    KEY_LANES = {
        pygame.K_LEFT: LEFT_LANE, pygame.K_a: LEFT_LANE,
        pygame.K_DOWN: CENTER_LANE, pygame.K_s: CENTER_LANE,
        pygame.K_RIGHT: RIGHT_LANE, pygame.K_d: RIGHT_LANE,
    }

    def __init__(self, lane_input):
        self.lane_input = lane_input
        lane_input.on_input_ready()

    def poll(self, pressed=None):
        """Push the lane for the currently held keys; nothing held is centre."""
        if pressed is None:
            pressed = pygame.key.get_pressed()
        lane = CENTER_LANE
        for key, key_lane in self.KEY_LANES.items():
            if pressed[key]:
                lane = key_lane
                break
        self.lane_input.on_lane_change(lane)
        return lane
