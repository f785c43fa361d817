"""Reusable button components for the UI."""
from __future__ import annotations

from typing import Any, Mapping

from markupsafe import Markup, escape

_PRIMARY = (
    "inline-flex items-center justify-center gap-2 rounded-full bg-indigo-600 px-5 py-2 text-sm font-semibold "
    "text-white shadow-lg shadow-indigo-500/30 transition hover:bg-indigo-500"
)
_GHOST = (
    "inline-flex items-center justify-center gap-2 rounded-full border border-slate-600/40 px-4 py-2 text-sm "
    "font-medium text-slate-100 transition hover:border-indigo-500 hover:text-indigo-300"
)


def primary(label: str, *, href: str | None = None, type_: str = "submit", id_: str | None = None) -> Markup:
    """Return a stylised primary button, or a link styled as one."""

    id_attr = f' id="{escape(id_)}"' if id_ else ""
    if href:
        return Markup(f'<a href="{escape(href)}" class="{_PRIMARY}"{id_attr}>{escape(label)}</a>')
    return Markup(f'<button type="{type_}" class="{_PRIMARY}"{id_attr}>{escape(label)}</button>')


def ghost(label: str, *, href: str | None = None, type_: str = "button") -> Markup:
    """Return a subtle button suitable for secondary actions."""

    if href:
        return Markup(f'<a href="{escape(href)}" class="{_GHOST}">{escape(label)}</a>')
    return Markup(f'<button type="{type_}" class="{_GHOST}">{escape(label)}</button>')


def like_button(post: Mapping[str, Any], *, enabled: bool = True) -> Markup:
    """Thumbs-up toggle wired to the like endpoint by ``likes.js``."""

    liked = bool(post.get("liked"))
    tone = "bg-indigo-600 text-white" if liked else "bg-slate-800/90 text-slate-200"
    disabled = "" if enabled else ' disabled title="Sign in to like posts"'
    return Markup(
        f"""
        <button type="button" data-like-button data-post-id="{escape(post['id'])}" aria-pressed="{str(liked).lower()}"
                class="inline-flex w-full items-center justify-center gap-2 rounded-full px-4 py-2 text-sm transition hover:bg-indigo-500 hover:text-white {tone}"{disabled}>
            <span aria-hidden="true">&#128077;</span>
            <span data-like-count>{int(post.get('likes') or 0)}</span>
            <span data-like-label>{escape(post.get('like_label') or 'Likes')}</span>
        </button>
        """
    )


__all__ = ["ghost", "like_button", "primary"]
