"""Layout building blocks shared across pages."""
from __future__ import annotations

from markupsafe import Markup, escape

from ...backend import Identity

NAV_LINKS = (
    ("Home", "/home"),
    ("Dashboard", "/dashboard"),
    ("Write", "/create-post"),
    ("Profile", "/profile"),
)


def navbar(*, app_name: str, active: str | None = None, identity: Identity | None = None) -> Markup:
    links: list[str] = []
    for label, href in NAV_LINKS:
        text_class = "text-white" if active == href else "text-slate-300"
        links.append(
            f'<a href="{href}" class="rounded-full px-4 py-2 text-sm font-medium transition hover:text-white {text_class}">{label}</a>'
        )

    if identity is not None:
        session_control = (
            f'<span class="hidden text-xs text-slate-400 sm:inline">{escape(identity.email)}</span>'
            '<form method="post" action="/auth/sign-out">'
            '<button type="submit" class="rounded-full border border-indigo-500/40 px-4 py-2 text-sm font-semibold text-indigo-300 transition hover:bg-indigo-600/20">Sign out</button>'
            "</form>"
        )
    else:
        session_control = (
            '<a href="/auth" class="rounded-full border border-indigo-500/40 px-4 py-2 text-sm font-semibold text-indigo-300 transition hover:bg-indigo-600/20">Sign in</a>'
        )

    return Markup(
        f"""
        <header class="sticky top-0 z-40 border-b border-slate-800/60 bg-slate-950/90 backdrop-blur">
            <div class="mx-auto flex max-w-7xl flex-wrap items-center gap-3 px-4 py-4 sm:px-6">
                <a href="/" class="flex-1 text-lg font-semibold text-white">{escape(app_name)}</a>
                <nav class="flex flex-wrap items-center gap-1">{''.join(links)}</nav>
                <div class="flex items-center gap-3">{session_control}</div>
            </div>
        </header>
        """
    )


def footer(*, app_name: str, year: int) -> Markup:
    return Markup(
        f"""
        <footer class="border-t border-slate-800/60 px-6 pb-6 pt-10 text-slate-300">
            <div class="mx-auto max-w-7xl">
                <h2 class="mb-2 text-2xl font-bold text-white">{escape(app_name)}</h2>
                <p class="text-sm text-slate-400">Write. Share. Inspire. A platform for all voices.</p>
                <p class="mt-6 text-center text-sm text-slate-500">&copy; {year} {escape(app_name)}</p>
            </div>
        </footer>
        """
    )


__all__ = ["NAV_LINKS", "footer", "navbar"]
