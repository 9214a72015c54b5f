"""Thin callers of the pipeline for common call-site shapes."""

from toonify.adapters.hooks import (
    AutoToon,
    HookConfig,
    ToonResult,
    add_toon_instructions,
    toon_method,
    with_toon,
)

__all__ = [
    "AutoToon",
    "HookConfig",
    "ToonResult",
    "add_toon_instructions",
    "toon_method",
    "with_toon",
]
