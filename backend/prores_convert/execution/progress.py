"""
Converter activity progress.

ffmpeg writes a continuous diagnostic stream to stderr while it runs.
Each chunk that arrives is treated as a heartbeat and nudges progress
up by one point. This is an activity indicator, NOT a measurement of how
much of the file has been encoded: a long clip will sit at 99 for most
of its runtime, a short one may finish well before reaching it.

The value only ever moves forward and never reaches 100 until the
converter has exited successfully.
"""

# Progress assigned to a freshly submitted job
PROGRESS_INITIAL = 1

# Highest value the heartbeat heuristic may report
PROGRESS_CEILING = 99

# Pinned on successful completion
PROGRESS_COMPLETE = 100


def next_activity_progress(current: int) -> int:
    """
    Return progress after one heartbeat.

    Args:
        current: Progress before the heartbeat

    Returns:
        current + 1, capped at PROGRESS_CEILING (never decreases)
    """
    if current >= PROGRESS_CEILING:
        return current
    return min(PROGRESS_CEILING, max(current, 0) + 1)
