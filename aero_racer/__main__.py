import argparse
import logging
import sys

import pygame

from .config import RacerConfig
from .controls import KeyboardLanes
from .game import RacerGame


def parse_args(argv=None):
    defaults = RacerConfig()
    parser = argparse.ArgumentParser(
        prog="aero_racer",
        description="Three-lane neon racer. Hold Left/A, Down/S or Right/D to pick a lane; "
                    "Space starts, Esc quits.",
    )
    parser.add_argument("--width", type=int, default=defaults.width)
    parser.add_argument("--height", type=int, default=defaults.height)
    parser.add_argument("--fps", type=int, default=defaults.fps)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--mute", action="store_true", help="disable all audio")
    parser.add_argument("--high-score-file", default=defaults.high_score_path)
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config = RacerConfig(
        width=args.width,
        height=args.height,
        fps=args.fps,
        muted=args.mute,
        high_score_path=args.high_score_file,
    )

    if not config.muted:
        # Mono 16-bit with a small buffer keeps the engine drone responsive
        pygame.mixer.pre_init(config.sample_rate, -16, 1, 512)
    pygame.init()
    game = None
    try:
        pygame.display.set_mode((config.width, config.height))
        pygame.display.set_caption("Aero-Hand Racer")

        game = RacerGame(config, seed=args.seed)
        keyboard = KeyboardLanes(game.lane_input)
        game.run(keyboard=keyboard)
    finally:
        if game is not None:
            game.audio.shutdown()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
