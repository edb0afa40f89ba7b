"""Classification of probed files into transformation plans."""

from anivault.domain.models import (
    DirectMove,
    MultiSubtitleMerge,
    PlainTranscode,
    ProbeResult,
    SingleSubtitleBurn,
    TransformPlan,
)


def classify(
    probe: ProbeResult, target_language: str, passthrough_codec: str
) -> TransformPlan:
    """Decide how a file must be transformed.

    Pure function: no I/O, deterministic for a given input.

    Args:
        probe: Probe result for the file.
        target_language: Language tag of subtitles to burn in.
        passthrough_codec: Video codec the output accepts without re-encoding.

    Returns:
        DirectMove if the codec is acceptable and there is nothing to burn in,
        PlainTranscode if there is nothing to burn in, SingleSubtitleBurn for
        one matching track, MultiSubtitleMerge for several. Track indices are
        container subtitle-stream indices, in container order.
    """
    matching = probe.tracks_for_language(target_language)

    if not matching:
        if probe.video_codec.casefold() == passthrough_codec.casefold():
            return DirectMove()
        return PlainTranscode()

    if len(matching) == 1:
        return SingleSubtitleBurn(track_index=matching[0].index)

    return MultiSubtitleMerge(track_indices=tuple(t.index for t in matching))


def describe_plan(plan: TransformPlan) -> str:
    """Short human-readable plan description for log lines."""
    if isinstance(plan, DirectMove):
        return "move"
    elif isinstance(plan, PlainTranscode):
        return "transcode"
    elif isinstance(plan, SingleSubtitleBurn):
        return f"transcode + burn subtitle track {plan.track_index}"
    elif isinstance(plan, MultiSubtitleMerge):
        joined = ", ".join(str(i) for i in plan.track_indices)
        return f"transcode + merge and burn subtitle tracks {joined}"
    raise TypeError(f"Unknown plan: {plan!r}")
