"""Core infrastructure shared by both engines.

Python 3.13+.
"""

from .config import DEFAULT_CONFIG, GuraConfig
from .depth_guard import DepthGuard, depth_clamp

__all__ = ["DEFAULT_CONFIG", "DepthGuard", "GuraConfig", "depth_clamp"]
