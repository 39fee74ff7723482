"""
Procedural audio on top of pygame.mixer.

All waveforms are synthesized with numpy; nothing is loaded from disk. The
engine drone is streamed as short phase-continuous blocks queued on a reserved
channel, so its pitch can follow the game speed without clicks. One-shot
effects are built per call and played on whatever channel is free.
"""
import logging
import math

import numpy as np
import pygame

from .config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

ENGINE_BASE_FREQ = 40.0
ENGINE_FREQ_PER_SPEED = 1000.0
ENGINE_TIME_CONSTANT = 0.1  # seconds
ENGINE_CUTOFF = 200.0
ENGINE_CHANNEL = 0
MAX_HARMONICS = 64

LANE_SHIFT_SECONDS = 0.2
COLLISION_SECONDS = 0.5
COLLISION_SWEEP_SECONDS = 0.4
COLLISION_BLOCK = 512


def engine_frequency(speed):
    """Target drone pitch in Hz for a game speed."""
    return ENGINE_BASE_FREQ + speed * ENGINE_FREQ_PER_SPEED


def smooth_toward(current, target, dt_ms, time_constant=ENGINE_TIME_CONSTANT):
    """First-order approach of `current` to `target` over `dt_ms`."""
    if dt_ms <= 0:
        return current
    alpha = 1.0 - math.exp(-(dt_ms / 1000.0) / time_constant)
    return current + (target - current) * alpha


def _lowpass_response(freqs, cutoff):
    # Magnitude of a 12 dB/octave low-pass
    return 1.0 / (1.0 + (np.asarray(freqs, dtype=np.float64) / cutoff) ** 2)


def engine_block(freq, phase, n, sample_rate, cutoff=ENGINE_CUTOFF):
    """Band-limited, low-passed sawtooth.

    Returns (samples, next_phase). Feeding next_phase into the following call
    joins the blocks without a discontinuity even when freq changes.
    """
    t = np.arange(n, dtype=np.float64) / sample_rate
    phases = phase + 2 * np.pi * freq * t
    top = int(min(MAX_HARMONICS, max(1, (sample_rate / 2) // freq)))
    k = np.arange(1, top + 1, dtype=np.float64)
    amps = (2 / np.pi) * np.where(k % 2 == 1, 1.0, -1.0) / k * _lowpass_response(k * freq, cutoff)
    samples = amps @ np.sin(np.outer(k, phases))
    next_phase = (phase + 2 * np.pi * freq * n / sample_rate) % (2 * np.pi)
    return np.clip(samples, -1.0, 1.0).astype(np.float32), next_phase


def lane_shift_wave(sample_rate):
    """Short descending chirp: 440 Hz to 110 Hz, gain 0.1 to 0.01, 200 ms."""
    n = int(sample_rate * LANE_SHIFT_SECONDS)
    t = np.arange(n, dtype=np.float64) / sample_rate
    ratio = 110.0 / 440.0
    # Integral of an exponential frequency sweep
    k = math.log(ratio) / LANE_SHIFT_SECONDS
    phase = 2 * np.pi * 440.0 * (np.exp(k * t) - 1.0) / k
    gain = 0.1 * (0.01 / 0.1) ** (t / LANE_SHIFT_SECONDS)
    return (gain * np.sin(phase)).astype(np.float32)


def collision_wave(sample_rate, rng):
    """Noise burst whose low-pass cutoff falls from 1000 Hz to 40 Hz."""
    n = int(sample_rate * COLLISION_SECONDS)
    noise = rng.uniform(-1.0, 1.0, n)
    out = np.empty(n, dtype=np.float64)
    for start in range(0, n, COLLISION_BLOCK):
        block = noise[start:start + COLLISION_BLOCK]
        mid = (start + len(block) / 2) / sample_rate
        sweep = min(mid, COLLISION_SWEEP_SECONDS) / COLLISION_SWEEP_SECONDS
        cutoff = 1000.0 * (40.0 / 1000.0) ** sweep
        spectrum = np.fft.rfft(block)
        freqs = np.fft.rfftfreq(len(block), d=1.0 / sample_rate)
        out[start:start + len(block)] = np.fft.irfft(spectrum * _lowpass_response(freqs, cutoff), n=len(block))
    t = np.arange(n, dtype=np.float64) / sample_rate
    gain = 0.5 * (0.01 / 0.5) ** (t / COLLISION_SECONDS)
    return np.clip(out * gain, -1.0, 1.0).astype(np.float32)


def to_sound_array(samples, channels):
    """Float samples in [-1, 1] to the int16 layout pygame.sndarray expects."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    if channels > 1:
        pcm = np.repeat(pcm[:, None], channels, axis=1)
    return np.ascontiguousarray(pcm)


class AudioSynth:
    """Engine drone plus one-shot effects. Silently inert without a mixer."""

    def __init__(self, config=DEFAULT_CONFIG, rng=None):
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.available = False
        self.sample_rate = config.sample_rate
        self.channels = 1
        self.engine_running = False
        self.engine_freq = ENGINE_BASE_FREQ
        self.engine_target = ENGINE_BASE_FREQ
        self._engine_phase = 0.0
        self._engine_channel = None

    def resume(self):
        """Bring the mixer up, retrying if an earlier attempt failed."""
        if self.config.muted:
            return False
        if self.available:
            return True
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=self.config.sample_rate, size=-16, channels=1, buffer=512)
            frequency, size, channels = pygame.mixer.get_init()
            if size != -16:
                logger.warning("Unsupported mixer sample format %s, audio disabled", size)
                return False
            pygame.mixer.set_reserved(ENGINE_CHANNEL + 1)
            self._engine_channel = pygame.mixer.Channel(ENGINE_CHANNEL)
            self._engine_channel.set_volume(self.config.engine_volume)
            self.sample_rate, self.channels = frequency, channels
        except pygame.error as e:
            logger.warning("Audio unavailable, continuing without sound: %s", e)
            return False
        self.available = True
        logger.debug("Mixer ready: %d Hz, %d channel(s)", self.sample_rate, self.channels)
        return True

    def _make_sound(self, samples):
        return pygame.sndarray.make_sound(to_sound_array(samples, self.channels))

    def _next_engine_block(self):
        n = int(self.sample_rate * self.config.engine_block_ms / 1000)
        samples, self._engine_phase = engine_block(self.engine_freq, self._engine_phase, n, self.sample_rate)
        return self._make_sound(samples)

    # --- Engine ---

    def start_engine(self):
        self.engine_freq = ENGINE_BASE_FREQ
        self.engine_target = ENGINE_BASE_FREQ
        self._engine_phase = 0.0
        self.engine_running = True
        if self.available:
            self._engine_channel.play(self._next_engine_block())

    def update_engine(self, speed, dt_ms):
        if not self.engine_running:
            return
        self.engine_target = engine_frequency(speed)
        self.engine_freq = smooth_toward(self.engine_freq, self.engine_target, dt_ms)
        if not self.available:
            return
        if not self._engine_channel.get_busy():
            self._engine_channel.play(self._next_engine_block())
        elif self._engine_channel.get_queue() is None:
            self._engine_channel.queue(self._next_engine_block())

    def stop_engine(self):
        self.engine_running = False
        if self.available:
            self._engine_channel.stop()
            # Halting a channel starts its queued block; halt that too
            if self._engine_channel.get_busy():
                self._engine_channel.stop()

    # --- One-shots ---

    def play_lane_shift(self):
        if self.available:
            self._make_sound(lane_shift_wave(self.sample_rate)).play()

    def play_collision(self):
        if self.available:
            self._make_sound(collision_wave(self.sample_rate, self.rng)).play()

    def shutdown(self):
        self.stop_engine()
        if self.available:
            pygame.mixer.quit()
            self.available = False
