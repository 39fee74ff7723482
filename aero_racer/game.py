import logging
import math

import numpy as np
import pygame

from .audio import AudioSynth
from .config import DEFAULT_CONFIG
from .controls import LaneInput
from .highscore import HighScoreStore
from .models import GameRunState, GameState
from .renderer import render
from .simulation import advance, advance_background

logger = logging.getLogger(__name__)

COLOR_UI_TEXT = (226, 232, 240)
COLOR_UI_DIM = (148, 163, 184)
COLOR_TITLE = (96, 165, 250)
COLOR_SENSOR_OK = (34, 197, 94)
COLOR_SENSOR_LOST = (239, 68, 68)
COLOR_CRASH = (127, 29, 29, 220)
COLOR_MENU = (2, 6, 23, 200)


class RacerGame:
    """Runs the racer: lifecycle, one tick per display refresh, callbacks.

    The loop keeps going in every game state so the background stays
    animated on menus; only PLAYING advances the gameplay fields.
    """

    def __init__(self, config=DEFAULT_CONFIG, lane_input=None, audio=None, high_scores=None,
                 on_score_update=None, on_game_over=None, seed=None):
        self.config = config
        self.np_random = np.random.default_rng(seed)
        self.lane_input = lane_input if lane_input is not None else LaneInput(config)
        self.audio = audio if audio is not None else AudioSynth(config)
        self.high_scores = high_scores if high_scores is not None else HighScoreStore(config.high_score_path)
        self.high_score = self.high_scores.load()
        self.on_score_update = on_score_update
        self.on_game_over = on_game_over

        self.game_state = GameState.LOADING
        self.state = GameRunState.fresh(self.np_random, config)
        self.final_score = None
        self.session_start_ms = 0
        self.running = False
        self._fonts = None

        self.lane_input.add_ready_listener(self.on_input_ready)

    # --- Lifecycle ---

    def on_input_ready(self):
        if self.game_state == GameState.LOADING:
            self.game_state = GameState.START
            logger.info("Input ready")

    def start(self, now_ms=0):
        """Begin a session from the start screen or after a crash."""
        if self.game_state not in (GameState.START, GameState.GAMEOVER):
            return False
        self.state = GameRunState.fresh(self.np_random, self.config)
        self.session_start_ms = now_ms
        self.final_score = None
        self.audio.resume()
        self.audio.start_engine()
        self.game_state = GameState.PLAYING
        logger.info("Session started (high score %d)", self.high_score)
        return True

    def game_over(self, final_score):
        """End the session. Later calls in the same session are ignored."""
        if self.game_state != GameState.PLAYING:
            return False
        self.game_state = GameState.GAMEOVER
        self.final_score = int(math.floor(final_score))
        self.audio.play_collision()
        self.audio.stop_engine()
        if self.high_scores.submit(final_score):
            self.high_score = self.high_scores.value
            logger.info("New high score: %d", self.high_score)
        logger.info("Crashed with score %d", self.final_score)
        if self.on_game_over is not None:
            self.on_game_over(final_score)
        return True

    def stop(self):
        self.running = False
        self.audio.stop_engine()

    # --- Per frame ---

    def tick(self, now_ms, dt_ms):
        if self.game_state != GameState.PLAYING:
            advance_background(self.state, self.np_random)
            return None

        events = advance(
            self.state, now_ms - self.session_start_ms, self.lane_input.lane,
            self.np_random, self.config,
        )
        if self.on_score_update is not None:
            self.on_score_update(self.state.score)
        if events.lane_shift:
            self.audio.play_lane_shift()
        self.audio.update_engine(self.state.speed, dt_ms)
        if events.collision is not None:
            self.game_over(self.state.score)
        return events

    def draw(self, surface):
        """Paint the frame; a lost surface skips this frame only."""
        if surface is None:
            return False
        try:
            width, height = surface.get_size()
            render(surface, self.state, width, height)
            self.draw_overlay(surface)
        except pygame.error as e:
            logger.debug("Skipping frame: %s", e)
            return False
        return True

    def run(self, clock=None, keyboard=None):
        """Main loop against the current display surface until quit."""
        clock = clock if clock is not None else pygame.time.Clock()
        self.running = True
        try:
            while self.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    elif event.type == pygame.KEYDOWN:
                        if event.key == pygame.K_ESCAPE:
                            self.running = False
                        elif event.key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_r):
                            self.start(pygame.time.get_ticks())

                if keyboard is not None:
                    keyboard.poll()

                dt_ms = clock.tick(self.config.fps)
                self.tick(pygame.time.get_ticks(), dt_ms)

                if self.draw(pygame.display.get_surface()):
                    try:
                        pygame.display.flip()
                    except pygame.error as e:
                        logger.debug("Display flip failed: %s", e)
        finally:
            self.stop()

    # --- Overlay ---

    def _get_fonts(self):
        if self._fonts is None:
            pygame.font.init()
            self._fonts = {
                "ui": pygame.font.SysFont("Consolas", 20, bold=True),
                "big": pygame.font.SysFont("Consolas", 48, bold=True),
            }
        return self._fonts

    def _blit_centered(self, surface, text, font, color, y):
        text_surf = font.render(text, True, color)
        surface.blit(text_surf, text_surf.get_rect(center=(surface.get_width() / 2, y)))

    def draw_overlay(self, surface):
        fonts = self._get_fonts()
        width, height = surface.get_size()

        if self.game_state == GameState.PLAYING:
            score_text = fonts["ui"].render(f"SCORE {int(self.state.score)}", True, COLOR_UI_TEXT)
            surface.blit(score_text, (16, 16))

            detected = self.lane_input.detected
            status = "SENSOR ACTIVE" if detected else "SEARCHING FOR HAND..."
            dot_color = COLOR_SENSOR_OK if detected else COLOR_SENSOR_LOST
            status_text = fonts["ui"].render(status, True, COLOR_UI_TEXT)
            status_x = width - status_text.get_width() - 16
            surface.blit(status_text, (status_x, 16))
            pygame.draw.circle(surface, dot_color, (status_x - 12, 16 + status_text.get_height() // 2), 6)
            return

        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill(COLOR_CRASH if self.game_state == GameState.GAMEOVER else COLOR_MENU)
        surface.blit(overlay, (0, 0))

        if self.game_state == GameState.LOADING:
            self._blit_centered(surface, "SYNCING HAND INTERFACE...", fonts["ui"], COLOR_TITLE, height / 2)
        elif self.game_state == GameState.START:
            self._blit_centered(surface, "AERO-HAND RACER", fonts["big"], COLOR_TITLE, height / 2 - 40)
            self._blit_centered(surface, "Press SPACE to launch", fonts["ui"], COLOR_UI_TEXT, height / 2 + 20)
            self._blit_centered(surface, f"High Score: {self.high_score}", fonts["ui"], COLOR_UI_DIM, height / 2 + 50)
        elif self.game_state == GameState.GAMEOVER:
            self._blit_centered(surface, "CRASHED!", fonts["big"], COLOR_UI_TEXT, height / 2 - 40)
            self._blit_centered(
                surface, f"Final Score: {self.final_score}   High: {self.high_score}",
                fonts["ui"], COLOR_UI_TEXT, height / 2 + 20,
            )
            self._blit_centered(surface, "Press SPACE to re-deploy", fonts["ui"], COLOR_UI_DIM, height / 2 + 50)
