"""
Converter execution.

ffmpeg is the sole conversion engine. This package builds its command
line, reports heuristic progress and supervises the running process.

ProcessSupervisor depends on the job registry and is imported from
prores_convert.execution.supervisor directly.
"""

from .errors import (
    ExecutionError,
    ConverterNotFoundError,
    ConverterLaunchError,
)
from .ffmpeg import (
    find_ffmpeg,
    build_ffmpeg_args,
    build_ffmpeg_command,
)
from .progress import (
    PROGRESS_INITIAL,
    PROGRESS_CEILING,
    PROGRESS_COMPLETE,
    next_activity_progress,
)

__all__ = [
    # Errors
    "ExecutionError",
    "ConverterNotFoundError",
    "ConverterLaunchError",
    # Command construction
    "find_ffmpeg",
    "build_ffmpeg_args",
    "build_ffmpeg_command",
    # Progress heuristic
    "PROGRESS_INITIAL",
    "PROGRESS_CEILING",
    "PROGRESS_COMPLETE",
    "next_activity_progress",
]
