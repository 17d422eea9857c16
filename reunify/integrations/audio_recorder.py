"""
Microphone Recorder
===================

Captures a short voice message from the default input device using PyAudio
and hands it back as a WAV data URL.

The recorder is a small state machine::

    idle -> recording -> recorded
      \\         (retake)    /
       `--> error <-------'   (device could not be opened)

The audio stream is the only exclusive hardware resource in the application.
It is released before the recording is exposed, and ``close()`` releases it
even if ``stop()`` was never called.
"""

import io
import logging
import threading
import wave
from enum import Enum
from typing import Callable, List, Optional

from reunify.core import config
from reunify.core.errors import AudioDeviceError
from reunify.core.media import bytes_to_data_url, data_url_to_bytes

logger = logging.getLogger(__name__)


class RecordingStatus(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    RECORDED = "recorded"
    ERROR = "error"


def encode_wav(frames: List[bytes], sample_rate: int, channels: int, sample_width: int) -> bytes:
    """Wrap raw PCM frames in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(b"".join(frames))
    return buf.getvalue()


class AudioRecorder:
    """
    Record a voice message from the microphone.

    Args:
        on_recording_complete: Called with the WAV data URL after ``stop()``,
            and with an empty string after ``retake()``.
        sample_rate: Capture rate in Hz.
        channels: Number of input channels.
        frames_per_buffer: PyAudio buffer size.
    """

    def __init__(
        self,
        on_recording_complete: Optional[Callable[[str], None]] = None,
        sample_rate: int = config.AUDIO_SAMPLE_RATE,
        channels: int = config.AUDIO_CHANNELS,
        frames_per_buffer: int = config.AUDIO_FRAMES_PER_BUFFER,
    ):
        self.on_recording_complete = on_recording_complete
        self.sample_rate = sample_rate
        self.channels = channels
        self.frames_per_buffer = frames_per_buffer

        self.status = RecordingStatus.IDLE
        self.error = ""
        self.audio_url: Optional[str] = None

        self._pyaudio = None
        self._audio = None
        self._stream = None
        self._frames: List[bytes] = []
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self.status == RecordingStatus.RECORDING

    def start(self) -> bool:
        """Open the microphone and begin capturing.

        Returns:
            True if recording started. On failure the status becomes ``ERROR``
            with a fixed message and the device is released.
        """
        if self.is_recording:
            logger.warning("Recorder already running")
            return True

        try:
            import pyaudio

            self._pyaudio = pyaudio
            self._audio = pyaudio.PyAudio()
            with self._lock:
                self._frames = []
            self._stream = self._audio.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=self._on_audio,
            )
            self._stream.start_stream()
        except Exception as e:
            logger.error(f"Error accessing microphone: {e}")
            self._release()
            self.error = config.MSG_MIC_DENIED
            self.status = RecordingStatus.ERROR
            return False

        self.error = ""
        self.status = RecordingStatus.RECORDING
        logger.info(f"Recording started ({self.sample_rate}Hz, {self.channels} ch)")
        return True

    def _on_audio(self, in_data, frame_count, time_info, status_flags):
        with self._lock:
            self._frames.append(in_data)
        return (None, self._pyaudio.paContinue)

    def stop(self) -> Optional[str]:
        """Stop recording, release the microphone, and return the WAV data URL."""
        if not self.is_recording:
            return None

        # Release the device before exposing the recording
        self._release()

        with self._lock:
            frames = self._frames
            self._frames = []

        wav_bytes = encode_wav(frames, self.sample_rate, self.channels, config.AUDIO_SAMPLE_WIDTH)
        self.audio_url = bytes_to_data_url(wav_bytes, config.AUDIO_MIME_TYPE)
        self.status = RecordingStatus.RECORDED
        logger.info(f"Recording stopped ({len(wav_bytes)} bytes)")

        if self.on_recording_complete:
            self.on_recording_complete(self.audio_url)
        return self.audio_url

    def retake(self):
        """Discard the current recording and return to idle."""
        self._release()
        self.audio_url = None
        self.error = ""
        self.status = RecordingStatus.IDLE
        if self.on_recording_complete:
            self.on_recording_complete("")

    def _release(self):
        """Stop and close the stream and terminate PyAudio. Safe to call repeatedly."""
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                if stream.is_active():
                    stream.stop_stream()
            except Exception as e:
                logger.error(f"Error stopping audio stream: {e}")
            try:
                stream.close()
                logger.debug("Audio stream closed")
            except Exception as e:
                logger.error(f"Error closing audio stream: {e}")

        audio, self._audio = self._audio, None
        if audio is not None:
            try:
                audio.terminate()
            except Exception as e:
                logger.error(f"Error terminating PyAudio: {e}")

    def close(self):
        """Release the microphone even if recording was never stopped."""
        self._release()
        if self.status == RecordingStatus.RECORDING:
            with self._lock:
                self._frames = []
            self.status = RecordingStatus.IDLE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def play_audio(data_url: str, chunk_frames: int = config.AUDIO_FRAMES_PER_BUFFER):
    """
    Play a WAV data URL on the default output device. Blocks until finished.

    Raises:
        AudioDeviceError: PyAudio is not installed or the output device
            could not be opened.
    """
    try:
        import pyaudio
    except ImportError as e:
        raise AudioDeviceError("Audio playback requires PyAudio (pip install reunify[audio]).") from e

    wav_bytes = data_url_to_bytes(data_url)
    audio = pyaudio.PyAudio()
    stream = None
    try:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wav:
            try:
                stream = audio.open(
                    format=audio.get_format_from_width(wav.getsampwidth()),
                    channels=wav.getnchannels(),
                    rate=wav.getframerate(),
                    output=True,
                )
            except Exception as e:
                raise AudioDeviceError(f"Could not open the audio output device: {e}") from e
            data = wav.readframes(chunk_frames)
            while data:
                stream.write(data)
                data = wav.readframes(chunk_frames)
    finally:
        if stream is not None:
            stream.stop_stream()
            stream.close()
        audio.terminate()


def is_audio_available() -> bool:
    """Check if the PyAudio backend can be imported."""
    try:
        import pyaudio  # noqa: F401
        return True
    except ImportError:
        return False
