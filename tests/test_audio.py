import numpy as np
import pygame
import pytest

from aero_racer import audio as audio_mod
from aero_racer.audio import (
    ENGINE_BASE_FREQ,
    AudioSynth,
    collision_wave,
    engine_block,
    engine_frequency,
    lane_shift_wave,
    smooth_toward,
    to_sound_array,
)
from aero_racer.config import RacerConfig

SR = 22050


def rms(x):
    return float(np.sqrt(np.mean(np.square(x, dtype=np.float64))))


def test_engine_frequency_tracks_speed():
    assert engine_frequency(0.0) == ENGINE_BASE_FREQ
    assert engine_frequency(0.055) == pytest.approx(95.0)


def test_smoothing_approaches_target_without_snapping():
    assert smooth_toward(40.0, 100.0, 0) == 40.0
    one_tau = smooth_toward(40.0, 100.0, 100)
    assert one_tau == pytest.approx(40 + 60 * (1 - np.exp(-1)))
    value = 40.0
    for _ in range(200):
        value = smooth_toward(value, 100.0, 16)
        assert value <= 100.0
    assert value == pytest.approx(100.0, abs=1e-3)


def test_engine_blocks_join_seamlessly():
    whole, _ = engine_block(95.0, 0.0, 2000, SR)
    first, phase = engine_block(95.0, 0.0, 1000, SR)
    second, _ = engine_block(95.0, phase, 1000, SR)
    np.testing.assert_allclose(np.concatenate([first, second]), whole, atol=1e-4)


def test_engine_block_is_bounded_and_low_passed():
    samples, phase = engine_block(40.0, 0.0, SR, SR)
    assert samples.dtype == np.float32
    assert len(samples) == SR
    assert np.abs(samples).max() <= 1.0
    assert 0 <= phase < 2 * np.pi
    spectrum = np.abs(np.fft.rfft(samples))
    freqs = np.fft.rfftfreq(len(samples), 1 / SR)
    assert spectrum[freqs > 2000].max() < spectrum[np.argmin(np.abs(freqs - 40))] * 0.01


def test_lane_shift_chirp_decays():
    wave = lane_shift_wave(SR)
    assert len(wave) == int(SR * 0.2)
    assert np.abs(wave).max() <= 0.1 + 1e-6
    tenth = len(wave) // 10
    assert rms(wave[-tenth:]) < rms(wave[:tenth]) / 3


def test_collision_burst_decays_and_is_reproducible():
    a = collision_wave(SR, np.random.default_rng(3))
    b = collision_wave(SR, np.random.default_rng(3))
    assert len(a) == int(SR * 0.5)
    np.testing.assert_array_equal(a, b)
    tenth = len(a) // 10
    assert rms(a[-tenth:]) < rms(a[:tenth]) / 5


def test_sound_array_layout():
    samples = np.array([0.0, 1.0, -1.0, 2.0], dtype=np.float32)
    mono = to_sound_array(samples, 1)
    assert mono.dtype == np.int16
    assert mono.tolist() == [0, 32767, -32767, 32767]
    stereo = to_sound_array(samples, 2)
    assert stereo.shape == (4, 2)
    assert stereo.flags["C_CONTIGUOUS"]


def test_muted_synth_is_silent_noop():
    synth = AudioSynth(RacerConfig(muted=True))
    assert synth.resume() is False
    synth.start_engine()
    synth.update_engine(0.055, 100)
    assert synth.engine_target == pytest.approx(95.0)
    assert ENGINE_BASE_FREQ < synth.engine_freq < 95.0
    synth.play_lane_shift()
    synth.play_collision()
    synth.stop_engine()
    assert not synth.available
    assert not synth.engine_running


def test_mixer_failure_degrades_and_retries(monkeypatch):
    attempts = []

    def failing_init(*args, **kwargs):
        attempts.append(kwargs)
        raise pygame.error("No available audio device")

    monkeypatch.setattr(audio_mod.pygame.mixer, "get_init", lambda: None)
    monkeypatch.setattr(audio_mod.pygame.mixer, "init", failing_init)

    synth = AudioSynth(RacerConfig())
    assert synth.resume() is False
    assert synth.resume() is False
    assert len(attempts) == 2
    assert not synth.available
    synth.start_engine()
    synth.play_collision()
    synth.stop_engine()


def test_live_mixer_streams_engine_and_plays_effects():
    synth = AudioSynth(RacerConfig(), np.random.default_rng(0))
    assert synth.resume() is True
    try:
        assert synth.available
        frequency, _, channels = pygame.mixer.get_init()
        assert (synth.sample_rate, synth.channels) == (frequency, channels)

        synth.start_engine()
        channel = synth._engine_channel
        assert synth.engine_running
        assert channel.get_busy()

        synth.update_engine(0.055, 16)
        assert channel.get_busy()
        queued = channel.get_queue()
        if queued is not None:
            assert queued.get_length() == pytest.approx(0.05, abs=0.002)
        assert synth.engine_freq > ENGINE_BASE_FREQ

        synth.play_lane_shift()
        synth.play_collision()

        synth.stop_engine()
        assert not synth.engine_running
        assert not channel.get_busy()
    finally:
        synth.shutdown()
    assert not synth.available
    assert pygame.mixer.get_init() is None
