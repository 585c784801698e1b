"""Result aggregator: reduces settled call results into the response envelope."""

from __future__ import annotations

from collections.abc import Sequence

from multiprompt.fanout.types import CallResult, FanOutResponse


def total_elapsed_ms(results: Sequence[CallResult]) -> int:
    """Overall wall time of a fan-out: the slowest call, since all run concurrently."""
    return max((r.elapsed_ms for r in results), default=0)


def aggregate(prompt: str, results: Sequence[CallResult]) -> FanOutResponse:
    """Build the FanOutResponse. Pure: results are kept as given, in order."""
    return FanOutResponse(
        prompt=prompt,
        results=list(results),
        total_ms=total_elapsed_ms(results),
    )
