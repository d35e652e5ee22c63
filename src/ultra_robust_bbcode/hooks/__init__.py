"""Hooks that pre- and post-process text around parsing and stripping.

Key Components:
    Hook: Base class with no-op lifecycle and text processing methods
    CensorHook: Masks blacklisted words before parsing
"""

from .base import Hook
from .censor import CensorHook

__all__ = [
    "CensorHook",
    "Hook",
]
