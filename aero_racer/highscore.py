import json
import logging
import math
import os

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "hand-racer-highscore"


class HighScoreStore:
    """A single integer best score, kept in a small JSON file."""

    def __init__(self, path, key=HIGH_SCORE_KEY):
        self.path = path
        self.key = key
        self.value = 0

    def load(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.value = int(data.get(self.key, 0))
        except FileNotFoundError:
            self.value = 0
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable high score file %s: %s", self.path, e)
            self.value = 0
        return self.value

    def submit(self, score):
        """Record a finished run. Returns True when it set a new high score."""
        final = int(math.floor(score))
        if final <= self.value:
            return False
        self.value = final
        self._save()
        return True

    def _save(self):
        data = {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                data = {}
        except (OSError, ValueError):
            data = {}
        data[self.key] = self.value
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
        except OSError as e:
            logger.warning("Could not save high score to %s: %s", self.path, e)
