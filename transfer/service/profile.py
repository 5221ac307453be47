"""
Encoding profile selection.

Fixed mode uses the constants from configuration. Adaptive mode derives the
output frame and GOP from the probed source stream.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from transfer.service.media_info import compute_frame_rate


@dataclass(frozen=True)
class EncodingProfile:
    """Parameters handed to ffmpeg for one output file"""

    target_width: int
    target_height: int
    frame_rate: float
    keyframe_interval: int
    pad: bool = True
    video_codec: str = 'libx264'
    crf: int = 18
    preset: str = 'medium'
    pix_fmt: str = 'yuv420p'
    video_profile: str = 'high'
    video_level: str = '4.0'
    audio_codec: str = 'aac'
    audio_bitrate: str = '320k'
    audio_sample_rate: int = 48000
    # exact source rate as (num, den) when probed, e.g. (30000, 1001)
    frame_rate_fraction: Optional[Tuple[int, int]] = None

    @property
    def min_keyframe_interval(self):
        return max(1, int(round(self.frame_rate)))

    @property
    def frame_rate_arg(self):
        if self.frame_rate_fraction:
            num, den = self.frame_rate_fraction
            return str(num) if den == 1 else f'{num}/{den}'
        if float(self.frame_rate).is_integer():
            return str(int(self.frame_rate))
        return f'{self.frame_rate:.3f}'.rstrip('0').rstrip('.')

    def video_filter(self):
        """Scale (and letterbox when padding) to the target frame"""
        w, h = self.target_width, self.target_height
        if self.pad:
            return (
                f'scale={w}:{h}:force_original_aspect_ratio=decrease,'
                f'pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,format={self.pix_fmt}'
            )
        return f'scale={w}:{h},format={self.pix_fmt}'


def _even(value):
    # yuv420p needs even dimensions
    return max(2, (int(round(value)) // 2) * 2)


def scale_dimensions(width, height, preferred=(1920, 1080), minimum=(1280, 720)):
    """
    Pick the output frame for a source resolution.

    - Larger than the preferred frame on either side: fit inside it,
      preserving aspect ratio.
    - Smaller than the minimum on either side: scale up to the preferred
      frame, letterboxed.
    - Otherwise: keep the source size.

    Returns:
        tuple: (width, height, pad)

    Example:
        >>> scale_dimensions(3840, 2160)
        (1920, 1080, False)
        >>> scale_dimensions(640, 360)
        (1920, 1080, True)
    """
    preferred_w, preferred_h = preferred
    minimum_w, minimum_h = minimum

    if not width or not height:
        return preferred_w, preferred_h, True

    if width > preferred_w or height > preferred_h:
        factor = min(preferred_w / width, preferred_h / height)
        return _even(width * factor), _even(height * factor), False

    if width < minimum_w or height < minimum_h:
        return preferred_w, preferred_h, True

    return _even(width), _even(height), False


def keyframe_interval(frame_rate, fallback=48):
    """
    Two seconds worth of frames.

    Example:
        >>> keyframe_interval(25)
        50
        >>> keyframe_interval(0)
        48
    """
    if not frame_rate:
        return fallback
    return int(round(frame_rate * 2)) or fallback


def _codec_settings(config):
    return {
        'video_codec': config.video_codec,
        'crf': config.video_crf,
        'preset': config.video_preset,
        'pix_fmt': config.pix_fmt,
        'video_profile': config.video_profile,
        'video_level': config.video_level,
        'audio_codec': config.audio_codec,
        'audio_bitrate': config.audio_bitrate,
        'audio_sample_rate': config.audio_sample_rate,
    }


def fixed_profile(config):
    """The constant profile: preferred frame, default frame rate, letterboxed"""
    width, height = config.preferred_frame
    frame_rate = float(config.default_frame_rate)
    return EncodingProfile(
        target_width=width,
        target_height=height,
        frame_rate=frame_rate,
        keyframe_interval=keyframe_interval(frame_rate, config.keyframe_fallback),
        pad=True,
        **_codec_settings(config),
    )


def derive_profile(info, config):
    """
    Build a profile from a probed source stream.

    Args:
        info: MediaStreamInfo
        config: MigrationConfig

    Returns:
        EncodingProfile
    """
    frame_rate = compute_frame_rate(
        info.frame_rate_num, info.frame_rate_den, default=config.default_frame_rate
    )
    width, height, pad = scale_dimensions(
        info.width, info.height, preferred=config.preferred_frame, minimum=config.minimum_frame
    )
    fraction = None
    if (info.frame_rate_num or 0) > 0 and (info.frame_rate_den or 0) > 0:
        fraction = (info.frame_rate_num, info.frame_rate_den)
    return EncodingProfile(
        target_width=width,
        target_height=height,
        frame_rate=frame_rate,
        keyframe_interval=keyframe_interval(frame_rate, config.keyframe_fallback),
        pad=pad,
        frame_rate_fraction=fraction,
        **_codec_settings(config),
    )
