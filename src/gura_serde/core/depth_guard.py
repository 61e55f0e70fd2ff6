"""Nesting limits for the recursive engines.

The serializer, the deserializer, the printer and the native conversions all
recurse once per level of nesting. A ``DepthGuard`` counts those levels and
raises ``GuraDepthLimitError`` before the interpreter runs out of stack,
which also stops self-referencing containers on the way out.

One guard belongs to one invocation; guards are never shared between
threads.

Python 3.13+.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from gura_serde.constants import MAX_DEPTH
from gura_serde.diagnostics import ErrorTemplate, GuraDepthLimitError

__all__ = ["DepthGuard", "depth_clamp"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DepthGuard:
    """Counts nesting levels while a value or tree is walked.

    Usage:
        guard = DepthGuard(max_depth=config.max_depth)
        with guard:
            node = schema.serialize(child, self)

    Attributes:
        max_depth: Deepest level allowed, clamped by ``depth_clamp``
        current_depth: Levels currently entered
    """

    max_depth: int = MAX_DEPTH
    current_depth: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.max_depth = depth_clamp(self.max_depth)

    def __enter__(self) -> DepthGuard:
        # Check first: __exit__ does not run when __enter__ raises.
        self.check()
        self.current_depth += 1
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.current_depth -= 1

    @property
    def depth(self) -> int:
        return self.current_depth

    def is_exceeded(self) -> bool:
        """True once no further level may be entered."""
        return self.current_depth >= self.max_depth

    def check(self) -> None:
        """Raise GuraDepthLimitError if no further level may be entered."""
        if self.is_exceeded():
            raise GuraDepthLimitError(ErrorTemplate.depth_exceeded(self.max_depth))


def depth_clamp(requested_depth: int, reserve_frames: int = 50, frames_per_level: int = 8) -> int:
    """Lower requested_depth to what the interpreter stack can hold.

    A nesting level costs several frames (engine method, access object,
    schema and visitor), so the recursion limit minus reserve_frames is
    divided by frames_per_level.

    Args:
        requested_depth: Depth asked for, usually ``GuraConfig.max_depth``
        reserve_frames: Frames kept free for the caller
        frames_per_level: Frames one nesting level costs

    Returns:
        requested_depth, or the safe maximum when that is lower (never below 1)

    Example:
        >>> import sys
        >>> sys.setrecursionlimit(450)
        >>> depth_clamp(100)  # (450 - 50) // 8 == 50
        50
    """
    limit = sys.getrecursionlimit()
    safe_depth = max(1, (limit - reserve_frames) // frames_per_level)
    if requested_depth <= safe_depth:
        return requested_depth
    logger.warning(
        "Requested depth %d exceeds what the Python recursion limit (%d) allows; "
        "clamping to %d. Raise sys.setrecursionlimit() to allow deeper documents.",
        requested_depth,
        limit,
        safe_depth,
    )
    return safe_depth
