"""Card-style components for post listings."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from markupsafe import Markup, escape

from . import buttons


def format_date(value: datetime | None) -> str:
    return value.strftime("%b %d, %Y") if value else ""


def _cover(post: Mapping[str, Any]) -> str:
    if not post.get("image"):
        return ""
    return (
        f'<div class="aspect-video overflow-hidden rounded-t-3xl">'
        f'<img src="{escape(post["image"])}" alt="{escape(post["title"])}" class="h-full w-full object-cover"></div>'
    )


def _byline(post: Mapping[str, Any]) -> str:
    avatar = (
        f'<img src="{escape(post["author_image"])}" alt="{escape(post["author_name"])}" class="h-5 w-5 rounded-full">'
        if post.get("author_image")
        else '<span aria-hidden="true">&#128100;</span>'
    )
    return (
        f'<div class="flex items-center gap-4 text-xs text-slate-400">'
        f'<span class="flex items-center gap-1">{avatar}<span>{escape(post["author_name"])}</span></span>'
        f'<time>{escape(format_date(post.get("created_at")))}</time></div>'
    )


def post_card(post: Mapping[str, Any], *, show_author: bool = False) -> Markup:
    """Landing-page card: cover, byline, title link and summary."""

    byline = _byline(post) if show_author else ""
    excerpt = (
        f'<p class="mt-2 text-sm text-slate-300">{escape(post["excerpt"])}</p>' if post.get("excerpt") else ""
    )
    return Markup(
        f"""
        <article class="overflow-hidden rounded-3xl bg-slate-900/70 shadow-lg shadow-black/20 transition hover:shadow-indigo-600/20">
            {_cover(post)}
            <div class="flex flex-col gap-3 p-6">
                {byline}
                <h2 class="text-lg font-semibold text-white hover:text-indigo-300"><a href="/post/{escape(post['id'])}">{escape(post['title'])}</a></h2>
                {excerpt}
                <p class="text-sm text-slate-400">{escape(post['content'][:150])}...</p>
                <a href="/post/{escape(post['id'])}" class="text-sm font-semibold text-indigo-300 hover:text-indigo-200">Read more</a>
            </div>
        </article>
        """
    )


def feed_card(post: Mapping[str, Any], *, can_like: bool) -> Markup:
    """Signed-in feed card with an expandable body and the like toggle."""

    content = escape(post["content"])
    summary = escape(post["summary"])
    body = (
        f'<details class="group text-sm text-slate-300">'
        f'<summary class="cursor-pointer list-none"><span class="group-open:hidden">{summary}</span>'
        f'<span class="mt-1 block text-xs font-semibold text-indigo-300 group-open:hidden">Read more</span>'
        f'<span class="hidden text-xs font-semibold text-indigo-300 group-open:block">Show less</span></summary>'
        f'<p class="mt-2 whitespace-pre-line">{content}</p></details>'
    )
    return Markup(
        f"""
        <article class="flex flex-col overflow-hidden rounded-3xl bg-slate-900/70 shadow-lg shadow-black/20">
            {_cover(post)}
            <div class="flex flex-1 flex-col gap-2 p-6">
                <h2 class="text-lg font-semibold text-white">{escape(post['title'])}</h2>
                {body}
                <time class="text-xs text-slate-500">{escape(format_date(post.get('created_at')))}</time>
            </div>
            <div class="flex flex-col gap-2 px-6 pb-6">
                {buttons.ghost("Full Post", href=f"/post/{post['id']}")}
                {buttons.like_button(post, enabled=can_like)}
            </div>
        </article>
        """
    )


def dashboard_row(post: Mapping[str, Any]) -> Markup:
    """Row on the author's dashboard with view and edit links."""

    return Markup(
        f"""
        <li class="flex flex-wrap items-center justify-between gap-4 rounded-2xl bg-slate-900/70 p-5">
            <div>
                <p class="font-semibold text-white">{escape(post['title'])}</p>
                <p class="text-xs text-slate-400">{escape(format_date(post.get('created_at')))} &middot; {int(post['likes'])} {escape(post['like_label'])}</p>
            </div>
            <div class="flex gap-2">
                {buttons.ghost("View", href=f"/post/{post['id']}")}
                {buttons.ghost("Edit", href=f"/edit-post/{post['id']}")}
            </div>
        </li>
        """
    )


__all__ = ["dashboard_row", "feed_card", "format_date", "post_card"]
