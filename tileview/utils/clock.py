"""Wall-clock helper shared by the player model and the renderer."""

import time


def now_ms() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000.0
