"""Conversion planning.

Decides, per stream kind, whether the source stream is copied, re-encoded
or dropped, and which encoder is used when it is re-encoded.
"""

import logging

from vconv.core.codecs import (
    ContainerFormat,
    StreamKind,
    can_copy,
    default_encoder,
)
from vconv.executor.transcode.types import (
    ConversionPlan,
    ConversionSettings,
    StreamDecision,
)
from vconv.introspector.interface import ProbeResult

logger = logging.getLogger(__name__)


def decide_stream(
    target: ContainerFormat,
    kind: StreamKind,
    source_codec: str,
    include: bool,
    override_encoder: str | None,
) -> tuple[StreamDecision, str | None]:
    """Decide what happens to one stream kind.

    Rules, first match wins:
    excluded by the user -> DROP; absent from the source -> DROP;
    explicit codec override -> ENCODE with the override;
    source codec accepted by the target -> COPY;
    otherwise -> ENCODE with the target's default encoder.

    Args:
        target: Destination container.
        kind: Stream kind being decided.
        source_codec: Probed codec, "" when the source lacks this kind.
        include: Whether the user wants this stream kind in the output.
        override_encoder: Encoder from an explicit codec choice, or None.

    Returns:
        Tuple of (decision, encoder). Encoder is None unless ENCODE.
    """
    if not include or not source_codec:
        return StreamDecision.DROP, None
    if override_encoder is not None:
        return StreamDecision.ENCODE, override_encoder
    if can_copy(target, kind, source_codec):
        return StreamDecision.COPY, None
    return StreamDecision.ENCODE, default_encoder(target, kind)


def plan_conversion(
    probe: ProbeResult,
    target: ContainerFormat,
    settings: ConversionSettings,
) -> ConversionPlan:
    """Build the conversion plan for a probed source.

    Args:
        probe: Codecs reported by the prober.
        target: Destination container.
        settings: User settings.

    Returns:
        ConversionPlan with video/audio decisions and encoders.
    """
    video, video_encoder = decide_stream(
        target,
        StreamKind.VIDEO,
        probe.video_codec,
        settings.include_video,
        settings.video_codec.encoder,
    )
    audio, audio_encoder = decide_stream(
        target,
        StreamKind.AUDIO,
        probe.audio_codec,
        settings.include_audio,
        settings.audio_codec.encoder,
    )

    plan = ConversionPlan(
        target=target,
        video=video,
        audio=audio,
        video_encoder=video_encoder,
        audio_encoder=audio_encoder,
        source_video_codec=probe.video_codec,
        source_audio_codec=probe.audio_codec,
    )
    logger.info(
        "Planned %s conversion: video=%s audio=%s (%s)",
        target.value,
        video.value,
        audio.value,
        plan.classification.value,
        extra={
            "target": target.value,
            "video_decision": video.value,
            "audio_decision": audio.value,
        },
    )
    return plan
