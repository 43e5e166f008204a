"""Phase illustration identifiers, one per 1/31 of the synodic month."""

import math

PHASE_IMAGE_COUNT = 31

# Index 0 is the new moon, 15 is the full moon.
MOON_IMAGES: tuple[str, ...] = tuple(
    f"moon_phase_{i:02d}.png" for i in range(PHASE_IMAGE_COUNT)
)


def phase_image_index(phase_value: float) -> int:
    """Map a phase value (0..1) to an image index in [0, 30].

    Non-finite values select the new moon image.
    """
    if not math.isfinite(phase_value):
        return 0
    return math.floor(phase_value * PHASE_IMAGE_COUNT) % PHASE_IMAGE_COUNT
