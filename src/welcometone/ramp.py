"""Playback volume fade, as a schedule of (seconds, volume) steps.

The player starts the looped tone at volume 0 and raises it on a fixed
timer until it reaches the target; stopping lowers it to 0 the same way
and then stops playback. The schedule here is what that timer does,
without the timer.
"""

import math

TARGET_VOLUME = 0.7
STEP = 0.02
INTERVAL = 0.01  # seconds between ticks


def fade_in_steps(
    start: float = 0.0,
    target: float = TARGET_VOLUME,
    step: float = STEP,
    interval: float = INTERVAL,
) -> list[tuple[float, float]]:
    """Volumes after each tick of a fade in.

    Each tick adds `step` while the volume is still below `target`, so the
    last volume may overshoot the target by less than one step.
    """
    if step <= 0 or interval <= 0:
        raise ValueError("step and interval must be positive")
    if not (math.isfinite(start) and math.isfinite(target)):
        raise ValueError("start and target must be finite")

    volume = start
    tick = 0
    steps = []
    while volume < target:
        tick += 1
        volume = round(volume + step, 10)
        steps.append((round(tick * interval, 10), volume))
    return steps


def fade_out_steps(
    start: float = TARGET_VOLUME,
    step: float = STEP,
    interval: float = INTERVAL,
) -> list[tuple[float, float]]:
    """Volumes after each tick of a fade out; the last entry is 0."""
    if step <= 0 or interval <= 0:
        raise ValueError("step and interval must be positive")
    if not math.isfinite(start):
        raise ValueError("start must be finite")

    volume = start
    tick = 0
    steps = []
    while volume > 0:
        tick += 1
        volume = max(round(volume - step, 10), 0.0)
        steps.append((round(tick * interval, 10), volume))
    return steps


def volume_at(elapsed: float, steps: list[tuple[float, float]], initial: float) -> float:
    """Volume at *elapsed* seconds into a fade schedule."""
    volume = initial
    for at, value in steps:
        if at > elapsed:
            break
        volume = value
    return volume
