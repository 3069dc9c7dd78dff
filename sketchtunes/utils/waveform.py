import random
from typing import Iterable, Optional

MIN_AMPLITUDE = 0.1
MAX_AMPLITUDE = 0.9


def generate_waveform(count: int, rng: Optional[random.Random] = None) -> list[float]:
    """
    Generate a placeholder waveform of ``count`` bars.

    Every value lies in [0.1, 0.9] so no bar is invisible or clipped.

    Args:
        count: Number of bars (must be positive)
        rng: Random source; a private one is used when omitted so the
            module-level ``random`` state is left untouched

    Raises:
        ValueError: If count is not a positive integer
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValueError(f"Waveform bar count must be a positive integer, got {count!r}")

    rng = rng or random.Random()
    return [rng.uniform(MIN_AMPLITUDE, MAX_AMPLITUDE) for _ in range(count)]


def waveform_for_track(track_id: str, count: int) -> list[float]:
    """Generated waveform seeded by the track id, stable across requests"""
    return generate_waveform(count, random.Random(track_id))


def validate_waveform(data: Iterable[float]) -> list[float]:
    """
    Check caller-supplied waveform data.

    Raises:
        ValueError: If any amplitude is outside [0.0, 1.0]
    """
    samples = [float(value) for value in data]
    for index, value in enumerate(samples):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Waveform amplitude at index {index} out of range: {value}")
    return samples
