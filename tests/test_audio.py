"""Tests for memoscribe.audio modules."""

from __future__ import annotations

import io
import struct
import wave

import numpy as np
import pytest

from memoscribe.audio.chunker import frames_per_chunk, split_signal
from memoscribe.audio.decode import decode_audio
from memoscribe.audio.resample import resample, resampled_length
from memoscribe.audio.signal import Signal
from memoscribe.audio.wav import (
    HEADER_SIZE,
    MAX_WAV_BYTES,
    encode_wav,
    encoded_size,
    to_pcm16,
)
from memoscribe.exceptions import DecodeError, EncodingTooLargeError


def _rms(samples: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def _read_wav(data: bytes) -> tuple[wave.Wave_read, np.ndarray]:
    """Read a WAV buffer with the standard library reader."""
    reader = wave.open(io.BytesIO(data), "rb")
    raw = reader.readframes(reader.getnframes())
    ints = np.frombuffer(raw, dtype="<i2").reshape(-1, reader.getnchannels()).T
    floats = np.where(ints < 0, ints / 32768.0, ints / 32767.0)
    return reader, floats


class TestSignal:
    def test_mono_input_gets_channel_axis(self) -> None:
        """Test that 1-D samples become a single channel."""
        signal = Signal(samples=np.zeros(100), sample_rate=8000)
        assert signal.channels == 1
        assert signal.frames == 100
        assert signal.duration == pytest.approx(100 / 8000)

    def test_samples_are_read_only(self, make_signal) -> None:
        """Test that signal samples cannot be modified."""
        signal = make_signal()
        with pytest.raises(ValueError):
            signal.samples[0, 0] = 1.0

    def test_caller_array_stays_writable(self) -> None:
        data = np.zeros((2, 10), dtype=np.float32)
        Signal(samples=data, sample_rate=8000)
        data[0, 0] = 1.0

    def test_invalid_rate_raises(self) -> None:
        with pytest.raises(ValueError):
            Signal(samples=np.zeros(10), sample_rate=0)

    def test_three_dimensional_input_raises(self) -> None:
        with pytest.raises(ValueError):
            Signal(samples=np.zeros((1, 2, 3)), sample_rate=8000)


class TestResample:
    @pytest.mark.parametrize(
        "source_rate,frames",
        [(44100, 44100), (48000, 96000), (44100, 12345), (22050, 7), (8000, 16001)],
    )
    def test_rate_and_length(self, source_rate: int, frames: int) -> None:
        samples = np.random.default_rng(0).uniform(-0.5, 0.5, (2, frames))
        signal = Signal(samples=samples, sample_rate=source_rate)
        out = resample(signal, 16000)
        assert out.sample_rate == 16000
        assert out.channels == 2
        assert out.frames == resampled_length(frames, source_rate, 16000)
        assert out.frames == round(frames * 16000 / source_rate)
        assert abs(out.duration - signal.duration) <= 1 / 16000

    def test_same_rate_is_unchanged(self, make_signal) -> None:
        signal = make_signal(sample_rate=16000)
        out = resample(signal, 16000)
        np.testing.assert_array_equal(out.samples, signal.samples)

    def test_passband_tone_preserved(self, make_signal) -> None:
        """Test that a 1 kHz tone keeps its level through resampling."""
        signal = make_signal(frequency=1000.0, duration=1.0, sample_rate=48000, amplitude=0.5)
        out = resample(signal, 16000)
        assert _rms(out.samples[:, 1000:-1000]) == pytest.approx(0.5 / np.sqrt(2), abs=0.02)

    def test_tone_above_target_nyquist_is_filtered(self, make_signal) -> None:
        """Test that content above the new Nyquist rate is removed."""
        signal = make_signal(frequency=12000.0, duration=1.0, sample_rate=48000, amplitude=0.5)
        out = resample(signal, 16000)
        # 12 kHz would alias to 4 kHz without band limiting
        assert _rms(out.samples[:, 1000:-1000]) < 0.01

    def test_channels_stay_aligned(self, make_signal) -> None:
        """Test that resampling does not shift channels against each other."""
        mono = make_signal(frequency=440.0, sample_rate=44100)
        stereo = Signal(
            samples=np.stack([mono.samples[0], -mono.samples[0]]), sample_rate=44100
        )
        out = resample(stereo, 16000)
        np.testing.assert_allclose(out.samples[1], -out.samples[0], atol=1e-5)

    def test_zero_channels_raises(self) -> None:
        with pytest.raises(DecodeError):
            resample(Signal(samples=np.zeros((0, 100)), sample_rate=44100), 16000)

    def test_zero_frames_raises(self) -> None:
        with pytest.raises(DecodeError):
            resample(Signal(samples=np.zeros((1, 0)), sample_rate=44100), 16000)


class TestSplitSignal:
    @pytest.mark.parametrize(
        "frames,max_duration",
        [(16000 * 25 + 123, 10.0), (16000 * 20, 10.0), (1, 0.5), (99_999, 0.33333)],
    )
    def test_chunks_tile_signal(self, frames: int, max_duration: float) -> None:
        """Test that chunks cover every frame exactly once, in order."""
        samples = np.random.default_rng(1).uniform(-1, 1, (2, frames))
        signal = Signal(samples=samples, sample_rate=16000)
        chunks = split_signal(signal, max_duration)
        limit = frames_per_chunk(max_duration, 16000)

        assert sum(c.frames for c in chunks) == signal.frames
        assert chunks[0].start_frame == 0
        for previous, chunk in zip(chunks, chunks[1:]):
            assert chunk.start_frame == previous.end_frame
        for i, chunk in enumerate(chunks):
            assert chunk.index == i
            assert chunk.frames == min(limit, frames - chunk.start_frame)
        np.testing.assert_array_equal(
            np.concatenate([c.signal.samples for c in chunks], axis=1), signal.samples
        )

    def test_last_chunk_shorter(self) -> None:
        """Test that only the final chunk may be short."""
        signal = Signal(samples=np.zeros(16000 * 25), sample_rate=16000)
        chunks = split_signal(signal, 10.0)
        assert [c.frames for c in chunks] == [160000, 160000, 80000]

    def test_short_signal_single_chunk(self, make_signal) -> None:
        signal = make_signal(duration=2.0)
        chunks = split_signal(signal, 600.0)
        assert len(chunks) == 1
        np.testing.assert_array_equal(chunks[0].signal.samples, signal.samples)

    def test_zero_length_signal_no_chunks(self) -> None:
        signal = Signal(samples=np.zeros((1, 0)), sample_rate=16000)
        assert split_signal(signal, 600.0) == []

    def test_chunks_inherit_rate_and_channels(self, make_signal) -> None:
        chunks = split_signal(make_signal(duration=3.0, channels=2), 1.0)
        assert all(c.sample_rate == 16000 and c.channels == 2 for c in chunks)

    def test_duration_below_one_frame_raises(self, make_signal) -> None:
        with pytest.raises(ValueError):
            split_signal(make_signal(), 1e-6)


class TestEncodeWav:
    def test_header_fields(self, make_signal) -> None:
        """Test the canonical 44-byte header layout."""
        signal = make_signal(duration=0.5, sample_rate=16000, channels=2)
        data = encode_wav(signal)
        data_bytes = signal.frames * 2 * 2

        fields = struct.unpack("<4sI4s4sIHHIIHH4sI", data[:HEADER_SIZE])
        assert fields == (
            b"RIFF",
            36 + data_bytes,
            b"WAVE",
            b"fmt ",
            16,
            1,
            2,
            16000,
            16000 * 2 * 2,
            4,
            16,
            b"data",
            data_bytes,
        )
        assert len(data) == HEADER_SIZE + data_bytes == encoded_size(signal)

    def test_round_trip_with_wave_reader(self, make_signal) -> None:
        """Test that the stdlib wave reader decodes the output."""
        signal = make_signal(duration=0.25, sample_rate=16000, channels=2, amplitude=0.9)
        reader, decoded = _read_wav(encode_wav(signal))

        assert reader.getnchannels() == 2
        assert reader.getframerate() == 16000
        assert reader.getsampwidth() == 2
        assert reader.getnframes() == signal.frames
        np.testing.assert_allclose(decoded, signal.samples, atol=1 / 32768)

    def test_clamps_and_scales(self) -> None:
        """Test clipping and asymmetric int16 scaling."""
        samples = np.array([[1.5, -1.5, 1.0, -1.0, 0.0, 0.5]])
        ints = to_pcm16(samples)
        assert ints.tolist() == [[32767, -32768, 32767, -32768, 0, 16384]]

    def test_frames_are_interleaved(self) -> None:
        """Test frame-interleaved channel order."""
        signal = Signal(samples=np.array([[0.1, 0.2], [-0.1, -0.2]]), sample_rate=8000)
        body = encode_wav(signal)[HEADER_SIZE:]
        assert list(struct.unpack("<4h", body)) == [3277, -3277, 6553, -6554]

    def test_encodes_chunk(self, make_signal) -> None:
        chunk = split_signal(make_signal(duration=2.0), 1.0)[1]
        reader, _ = _read_wav(encode_wav(chunk))
        assert reader.getnframes() == chunk.frames

    def test_size_cap(self) -> None:
        signal = Signal(samples=np.zeros(1000), sample_rate=16000)
        with pytest.raises(EncodingTooLargeError) as exc:
            encode_wav(signal, max_bytes=1000)
        assert exc.value.size == HEADER_SIZE + 2000
        assert exc.value.limit == 1000

    def test_ten_minutes_at_16k_fits_default_cap(self) -> None:
        """Test that a default-sized chunk fits the upload cap."""
        signal = Signal(samples=np.zeros((1, 600 * 16000), dtype=np.float32), sample_rate=16000)
        assert encoded_size(signal) < MAX_WAV_BYTES

    def test_cap_disabled(self) -> None:
        signal = Signal(samples=np.zeros(1000), sample_rate=16000)
        assert len(encode_wav(signal, max_bytes=None)) == HEADER_SIZE + 2000


class TestDecodeAudio:
    def test_decode_wav(self, make_signal) -> None:
        signal = make_signal(duration=0.5, sample_rate=22050, channels=2)
        decoded = decode_audio(encode_wav(signal), "wav")
        assert decoded.sample_rate == 22050
        assert decoded.channels == 2
        assert decoded.frames == signal.frames
        np.testing.assert_allclose(decoded.samples, signal.samples, atol=2e-4)

    def test_decode_without_hint(self, make_signal) -> None:
        """Test that a missing type hint falls back to soundfile."""
        decoded = decode_audio(encode_wav(make_signal()), None)
        assert decoded.sample_rate == 16000

    def test_empty_buffer_raises(self) -> None:
        with pytest.raises(DecodeError):
            decode_audio(b"", "wav")

    def test_garbage_raises(self) -> None:
        with pytest.raises(DecodeError):
            decode_audio(b"definitely not audio", "wav")
