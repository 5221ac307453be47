"""
Transcoding service.

Builds ffmpeg argument lists for Vimeo-ready H.264/AAC output and runs them.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path


class TranscodeError(Exception):
    """Raised when ffmpeg exits non-zero or cannot be started"""

    pass


@dataclass
class ProcessedFileInfo:
    """Information about a transcoded file"""

    path: Path
    file_size: int
    extension: str


def _video_args(profile):
    return [
        '-c:v', profile.video_codec,
        '-crf', str(profile.crf),
        '-preset', profile.preset,
        '-profile:v', profile.video_profile,
        '-level:v', profile.video_level,
        '-pix_fmt', profile.pix_fmt,
        '-vf', profile.video_filter(),
        '-r', profile.frame_rate_arg,
        '-g', str(profile.keyframe_interval),
        '-keyint_min', str(profile.min_keyframe_interval),
        '-sc_threshold', '0',
        '-force_key_frames', 'expr:gte(t,n_forced*2)',
    ]


def _audio_args(profile):
    return [
        '-c:a', profile.audio_codec,
        '-b:a', profile.audio_bitrate,
        '-ar', str(profile.audio_sample_rate),
    ]


def _container_args():
    # moov atom first so playback can start before the download finishes
    return ['-movflags', '+faststart', '-max_muxing_queue_size', '1024']


def build_transcode_command(input_path, output_path, profile):
    """ffmpeg argv re-encoding a video file with the given profile"""
    return (
        ['ffmpeg', '-y', '-i', str(input_path)]
        + _video_args(profile)
        + _audio_args(profile)
        + _container_args()
        + [str(output_path)]
    )


def build_composition_command(image_path, audio_path, output_path, profile):
    """
    ffmpeg argv pairing a looped still image with an audio-only file.

    -shortest ends the output with the audio track.
    """
    video_args = _video_args(profile)
    # -tune belongs right after the codec selection
    video_args[2:2] = ['-tune', 'stillimage']
    return (
        ['ffmpeg', '-y', '-loop', '1', '-i', str(image_path), '-i', str(audio_path)]
        + video_args
        + _audio_args(profile)
        + ['-shortest']
        + _container_args()
        + [str(output_path)]
    )


def run_ffmpeg(cmd, output_path, logger=None):
    """
    Run an ffmpeg command, removing partial output on failure.

    Only the exit code is inspected; stderr is logged when it fails.

    Returns:
        ProcessedFileInfo

    Raises:
        TranscodeError: If ffmpeg cannot start or exits non-zero
    """

    def log(message):
        if logger:
            logger(message)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    log(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        if output_path.exists():
            output_path.unlink()
        raise TranscodeError(f'ffmpeg could not be started: {e}')

    if result.returncode != 0:
        if result.stderr:
            log(f'ffmpeg stderr: {result.stderr[-2000:]}')
        if output_path.exists():
            output_path.unlink()
        raise TranscodeError(f'ffmpeg failed with code {result.returncode}')

    file_size = output_path.stat().st_size if output_path.exists() else 0
    log(f'Transcoding complete: {file_size} bytes')

    return ProcessedFileInfo(path=output_path, file_size=file_size, extension=output_path.suffix)


def transcode_for_vimeo(input_path, output_path, profile, logger=None):
    """
    Re-encode a downloaded flavor into a Vimeo-ready MP4.

    Args:
        input_path: Path to the downloaded original
        output_path: Path for the output file
        profile: EncodingProfile
        logger: Optional callable(str) for logging

    Returns:
        ProcessedFileInfo
    """
    if logger:
        logger(
            f'Transcoding {input_path} at {profile.target_width}x{profile.target_height} '
            f'{profile.frame_rate_arg}fps, GOP {profile.keyframe_interval}'
        )
    cmd = build_transcode_command(input_path, output_path, profile)
    return run_ffmpeg(cmd, output_path, logger=logger)


def compose_still_image(image_path, audio_path, output_path, profile, logger=None):
    """
    Create a video from a still image and an audio-only file.

    Args:
        image_path: Still image used as the video stream
        audio_path: Downloaded audio-only original
        output_path: Path for the output file
        profile: EncodingProfile (frame and GOP for the still)
        logger: Optional callable(str) for logging

    Returns:
        ProcessedFileInfo
    """
    if logger:
        logger(f'Combining static image {image_path} with audio {audio_path}')
    cmd = build_composition_command(image_path, audio_path, output_path, profile)
    return run_ffmpeg(cmd, output_path, logger=logger)
