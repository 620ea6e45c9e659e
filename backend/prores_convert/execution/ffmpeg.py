"""
FFmpeg invocation for ProRes 4444 XQ output.

Design rules:
- Fixed codec parameters: prores_ks, profile 4444xq, 12-bit 4:4:4, Apple vendor tag
- Native frame rate and aspect: no -r, no fps filter, no scaling
- First video stream only; first audio stream optional
- Argument order is significant: global → input → per-output → output path
"""

import os
import shutil
from typing import List, Optional

from .errors import ConverterNotFoundError

# Video encoding parameters
PRORES_ENCODER = "prores_ks"
PRORES_PROFILE = "4444xq"
PRORES_PIXEL_FORMAT = "yuv444p12le"
PRORES_VENDOR_TAG = "apl0"

# Audio is re-encoded to uncompressed 24-bit PCM when kept
PCM_AUDIO_CODEC = "pcm_s24le"

OUTPUT_EXTENSION = "mov"

COMMON_FFMPEG_PATHS = [
    "/usr/local/bin/ffmpeg",
    "/usr/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
]


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_ffmpeg(override: Optional[str] = None) -> Optional[str]:
    """
    Find the ffmpeg binary path.

    Discovery priority:
    1. Explicit override (from configuration)
    2. PATH lookup
    3. Common install locations

    Args:
        override: Explicit binary path; must exist and be executable

    Returns:
        Path to ffmpeg, or None if it cannot be found

    Raises:
        ConverterNotFoundError: If an override is given but unusable
    """
    if override:
        if not _is_executable(override):
            raise ConverterNotFoundError(
                f"Configured ffmpeg path does not exist or is not executable: {override}"
            )
        return override

    ffmpeg_path = shutil.which("ffmpeg")
    if ffmpeg_path:
        return ffmpeg_path

    for path in COMMON_FFMPEG_PATHS:
        if _is_executable(path):
            return path

    return None


def build_ffmpeg_args(
    input_path: str,
    output_path: str,
    keep_audio: bool = True,
    copy_metadata: bool = True,
) -> List[str]:
    """
    Build the ffmpeg argument vector (without the binary).

    Args:
        input_path: Source media file
        output_path: Destination .mov file (overwritten if present)
        keep_audio: Map the first audio stream, if any, as PCM; otherwise drop audio
        copy_metadata: Copy global metadata from the input

    Returns:
        Ordered argument list
    """
    args = [
        "-y",
        "-i", input_path,
        "-c:v", PRORES_ENCODER,
        "-profile:v", PRORES_PROFILE,
        "-pix_fmt", PRORES_PIXEL_FORMAT,
        "-vendor", PRORES_VENDOR_TAG,
    ]

    # Must precede the stream mapping
    if copy_metadata:
        args.extend(["-map_metadata", "0"])

    args.extend(["-map", "0:v:0"])

    if keep_audio:
        # Trailing "?" makes the audio stream optional
        args.extend(["-map", "0:a?"])
        args.extend(["-c:a", PCM_AUDIO_CODEC])
    else:
        args.append("-an")

    args.append(output_path)

    return args


def build_ffmpeg_command(
    ffmpeg_path: str,
    input_path: str,
    output_path: str,
    keep_audio: bool = True,
    copy_metadata: bool = True,
) -> List[str]:
    """Build the full command line: binary followed by build_ffmpeg_args()."""
    return [ffmpeg_path] + build_ffmpeg_args(
        input_path,
        output_path,
        keep_audio=keep_audio,
        copy_metadata=copy_metadata,
    )
