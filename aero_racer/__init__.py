from .config import DEFAULT_CONFIG, RacerConfig
from .controls import KeyboardLanes, LaneInput, lane_from_hand_x
from .game import RacerGame
from .highscore import HighScoreStore
from .models import BackgroundParticle, GameRunState, GameState, Obstacle
from .simulation import StepEvents, advance, advance_background, find_collision, spawn_interval

__version__ = "0.1.0"
