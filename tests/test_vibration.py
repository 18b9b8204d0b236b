import asyncio

from src.hardware.vibration import VibrationMotor


def test_pattern_runs_and_ends_off():
    motor = VibrationMotor()
    assert motor.simulation_mode
    states = []

    async def scenario():
        await motor.vibrate([20, 20, 20])
        await asyncio.sleep(0.01)
        states.append(motor.is_on)
        await motor.pattern_task

    asyncio.run(scenario())
    assert states == [True]
    assert not motor.is_on
    assert not motor.is_vibrating


def test_stop_cuts_pattern_short():
    motor = VibrationMotor()

    async def scenario():
        await motor.vibrate([5000])
        await asyncio.sleep(0.01)
        assert motor.is_on
        motor.stop()

    asyncio.run(scenario())
    assert not motor.is_on
    assert not motor.is_vibrating
    motor.cleanup()


def test_failing_output_is_logged(caplog):
    motor = VibrationMotor()

    def broken_set(on):
        if on:
            raise OSError("GPIO write failed")
        motor.is_on = False

    motor._set = broken_set

    async def scenario():
        await motor.vibrate([20, 20, 20])
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert not motor.is_vibrating
    assert "Vibration pattern failed: GPIO write failed" in caplog.text
