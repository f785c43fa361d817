"""Expose reusable UI components."""
from __future__ import annotations

from . import buttons, cards, feedback, forms, layout

__all__ = [
    "buttons",
    "cards",
    "feedback",
    "forms",
    "layout",
]
