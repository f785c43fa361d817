"""Feedback elements: toasts and empty states."""
from __future__ import annotations

from markupsafe import Markup, escape

from ..toasts import Toast

_TONES = {
    "success": "border-emerald-400/40 bg-emerald-500/10 text-emerald-100",
    "error": "border-rose-400/40 bg-rose-500/10 text-rose-100",
}


def toast(item: Toast | None) -> Markup:
    if item is None:
        return Markup("")
    tone = _TONES.get(item.tone, _TONES["success"])
    title = f'<p class="font-semibold">{escape(item.title)}</p>' if item.title else ""
    return Markup(
        f"""
        <div id="toast-root" role="status" class="fixed inset-x-0 top-5 z-50 flex justify-center">
            <div class="rounded-2xl border px-5 py-3 text-sm shadow-lg {tone}">{title}<p>{escape(item.message)}</p></div>
        </div>
        """
    )


def empty_state(title: str, message: str, *, action: Markup | None = None) -> Markup:
    return Markup(
        f"""
        <div class="py-16 text-center">
            <h2 class="mb-4 text-2xl font-semibold text-white">{escape(title)}</h2>
            <p class="mb-8 text-slate-400">{escape(message)}</p>
            {action or ""}
        </div>
        """
    )


__all__ = ["empty_state", "toast"]
