"""
GPIO vibration motor.
Plays on/off millisecond patterns with async control.
"""

import asyncio
from typing import Optional, Sequence

from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)

# Import RPi.GPIO only if available and hardware is enabled
GPIO_AVAILABLE = False
GPIO = None

if settings.ENABLE_HARDWARE_GPIO:
    try:
        import RPi.GPIO as GPIO
        GPIO_AVAILABLE = True
    except ImportError:
        logger.warning("RPi.GPIO not available, vibration will be simulated")


class VibrationMotor:
    """
    Vibration motor on a GPIO pin.
    Falls back to simulation mode if GPIO is not available.
    """

    def __init__(self, pin: int = None):
        """
        Initialize vibration motor.

        Args:
            pin: GPIO pin number (BCM mode) (default from settings)
        """
        self.pin = pin or settings.VIBRATION_GPIO_PIN
        self.simulation_mode = not GPIO_AVAILABLE

        self.is_on = False
        self.pattern_task: Optional[asyncio.Task] = None

        if not self.simulation_mode:
            self._initialize_gpio()
        else:
            logger.debug(f"Vibration motor in SIMULATION mode (pin {self.pin})")

    def _initialize_gpio(self) -> None:
        """Initialize GPIO for motor control."""
        try:
            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)
            GPIO.setup(self.pin, GPIO.OUT)
            GPIO.output(self.pin, GPIO.LOW)

            logger.info(f"Vibration motor initialized on GPIO pin {self.pin}")

        except Exception as e:
            logger.error(f"Failed to initialize GPIO: {e}", exc_info=True)
            self.simulation_mode = True
            logger.info("Falling back to simulation mode")

    def _set(self, on: bool) -> None:
        if not self.simulation_mode:
            GPIO.output(self.pin, GPIO.HIGH if on else GPIO.LOW)
        self.is_on = on

    @property
    def is_vibrating(self) -> bool:
        return self.pattern_task is not None and not self.pattern_task.done()

    async def vibrate(self, pattern: Sequence[int] = None) -> None:
        """
        Start a vibration pattern.

        Args:
            pattern: Alternating on/off durations in milliseconds,
                     starting with "on" (default from settings)
        """
        if pattern is None:
            pattern = settings.VIBRATION_PATTERN_MS

        if self.is_vibrating:
            self.stop()

        self.pattern_task = asyncio.create_task(self._pattern_worker(tuple(pattern)))
        self.pattern_task.add_done_callback(self._pattern_done)
        logger.debug(f"Vibration started: {list(pattern)} ms")

    def stop(self) -> None:
        """Stop any running pattern and switch the motor off."""
        if self.pattern_task is not None:
            self.pattern_task.cancel()
            self.pattern_task = None

        self._set(False)

    async def _pattern_worker(self, pattern: Sequence[int]) -> None:
        """
        Worker coroutine stepping through the pattern.

        Args:
            pattern: Alternating on/off durations in milliseconds
        """
        try:
            for index, duration_ms in enumerate(pattern):
                self._set(index % 2 == 0)
                await asyncio.sleep(duration_ms / 1000.0)

        except asyncio.CancelledError:
            logger.debug("Vibration pattern cancelled")
            raise

        finally:
            self._set(False)

    @staticmethod
    def _pattern_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Vibration pattern failed: {error}", exc_info=error)

    def cleanup(self) -> None:
        """Clean up GPIO resources."""
        self.stop()

        if not self.simulation_mode and GPIO_AVAILABLE:
            try:
                GPIO.cleanup(self.pin)
                logger.info("Vibration GPIO cleanup complete")
            except Exception as e:
                logger.error(f"GPIO cleanup error: {e}")
