"""Vision service adapters.

The Google adapter is imported lazily by the scanner so the SDK is only
loaded when a real client is built.
"""

from .base import VisionAdapter

__all__ = ["VisionAdapter"]
