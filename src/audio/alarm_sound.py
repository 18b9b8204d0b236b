"""
Looping alarm tone.
Synthesizes a beep pattern with numpy and plays it through PyAudio on a
worker thread until stopped.
"""

import threading
from typing import Optional

import numpy as np

from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)

# Import PyAudio only if available
try:
    import pyaudio
    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    logger.warning("PyAudio not available, alarm sound will be disabled")


def build_alarm_tone(sample_rate: int = None, frequency: float = None,
                     beep_duration: float = None, pause_duration: float = None,
                     beep_count: int = None, volume: float = None) -> np.ndarray:
    """
    Build one loop iteration of the alarm: N beeps separated by silence.

    Returns:
        int16 mono samples
    """
    sample_rate = sample_rate or settings.ALARM_SAMPLE_RATE
    frequency = frequency or settings.ALARM_TONE_FREQUENCY
    beep_duration = beep_duration or settings.ALARM_BEEP_DURATION
    pause_duration = pause_duration or settings.ALARM_PAUSE_DURATION
    beep_count = beep_count or settings.ALARM_BEEP_COUNT
    volume = settings.ALARM_VOLUME if volume is None else volume

    t = np.arange(int(sample_rate * beep_duration)) / sample_rate
    beep = np.sin(2 * np.pi * frequency * t)

    # Short linear fade in/out to avoid clicks
    fade = min(len(beep) // 10, int(sample_rate * 0.01))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade)
        beep[:fade] *= ramp
        beep[-fade:] *= ramp[::-1]

    silence = np.zeros(int(sample_rate * pause_duration))
    pattern = np.concatenate([np.concatenate([beep, silence]) for _ in range(beep_count)])

    return (pattern * volume * np.iinfo(np.int16).max).astype(np.int16)


class AlarmSound:
    """
    Alarm tone player.
    start() returns immediately; playback loops on a worker thread until stop().
    """

    def __init__(self, sample_rate: int = None, enabled: bool = True):
        """
        Initialize alarm sound.

        Args:
            sample_rate: Output sample rate (default from settings)
            enabled: If False, start() never plays anything
        """
        self.sample_rate = sample_rate or settings.ALARM_SAMPLE_RATE
        self.enabled = enabled and PYAUDIO_AVAILABLE
        self.tone = build_alarm_tone(sample_rate=self.sample_rate)

        self.pyaudio = None
        self.stop_event = threading.Event()
        self.worker: Optional[threading.Thread] = None

        if not self.enabled:
            logger.info("Alarm sound disabled")

    @property
    def is_playing(self) -> bool:
        return self.worker is not None and self.worker.is_alive()

    def start(self) -> bool:
        """
        Start looping the alarm tone.

        Returns:
            True if playback started
        """
        if not self.enabled:
            logger.debug("Alarm sound requested but sound is disabled")
            return False

        if self.is_playing:
            logger.debug("Alarm sound already playing")
            return True

        try:
            if self.pyaudio is None:
                self.pyaudio = pyaudio.PyAudio()

            stream = self.pyaudio.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=self.sample_rate,
                output=True,
                frames_per_buffer=settings.OUTPUT_CHUNK_SIZE
            )

        except Exception as e:
            logger.error(f"Failed to open audio output for alarm: {e}", exc_info=True)
            return False

        self.stop_event.clear()
        self.worker = threading.Thread(
            target=self._playback_loop,
            args=(stream,),
            name="alarm-sound",
            daemon=True
        )
        self.worker.start()

        logger.debug("Alarm sound started")
        return True

    def stop(self) -> None:
        """Stop playback and wait for the worker to finish."""
        self.stop_event.set()

        if self.worker is not None:
            self.worker.join(timeout=2.0)
            self.worker = None
            logger.debug("Alarm sound stopped")

    def _playback_loop(self, stream) -> None:
        """Write the tone in chunks so stop() takes effect quickly."""
        chunk = settings.OUTPUT_CHUNK_SIZE

        try:
            while not self.stop_event.is_set():
                for offset in range(0, len(self.tone), chunk):
                    if self.stop_event.is_set():
                        break
                    stream.write(self.tone[offset:offset + chunk].tobytes())

        except Exception as e:
            logger.error(f"Alarm playback error: {e}", exc_info=True)

        finally:
            try:
                stream.stop_stream()
                stream.close()
            except Exception as e:
                logger.error(f"Error closing alarm stream: {e}")

    def cleanup(self) -> None:
        """Release the audio device."""
        self.stop()

        if self.pyaudio is not None:
            self.pyaudio.terminate()
            self.pyaudio = None
            logger.debug("Alarm sound cleanup complete")
