"""Form field components styled with Tailwind."""
from __future__ import annotations

from markupsafe import Markup, escape

_INPUT_BASE = (
    "block w-full rounded-xl border border-slate-700/60 bg-slate-900/70 px-4 py-2.5 text-sm text-slate-100 "
    "placeholder:text-slate-500 focus:border-indigo-500 focus:ring-2 focus:ring-indigo-600 focus:ring-offset-0"
)


def _required(required: bool) -> str:
    return " required" if required else ""


def text_input(
    name: str,
    *,
    label: str,
    value: str | None = None,
    placeholder: str = "",
    type_: str = "text",
    required: bool = True,
    disabled: bool = False,
) -> Markup:
    disabled_attr = " disabled" if disabled else ""
    return Markup(
        f"""
        <label class="flex flex-col gap-2 text-sm font-medium text-slate-200" for="{name}">
            <span>{escape(label)}</span>
            <input id="{name}" name="{name}" type="{type_}" value="{escape(value or '')}" placeholder="{escape(placeholder)}" class="{_INPUT_BASE}"{_required(required)}{disabled_attr}>
        </label>
        """
    )


def password_input(name: str, *, label: str, placeholder: str = "", required: bool = True) -> Markup:
    return text_input(name, label=label, placeholder=placeholder, type_="password", required=required)


def textarea(
    name: str,
    *,
    label: str,
    value: str | None = None,
    placeholder: str = "",
    rows: int = 4,
    required: bool = False,
) -> Markup:
    return Markup(
        f"""
        <label class="flex flex-col gap-2 text-sm font-medium text-slate-200" for="{name}">
            <span>{escape(label)}</span>
            <textarea id="{name}" name="{name}" rows="{rows}" placeholder="{escape(placeholder)}" class="{_INPUT_BASE}"{_required(required)}>{escape(value or '')}</textarea>
        </label>
        """
    )


def file_input(name: str, *, label: str, accept: str = "image/*") -> Markup:
    return Markup(
        f"""
        <label class="flex flex-col gap-2 text-sm font-medium text-slate-200" for="{name}">
            <span>{escape(label)}</span>
            <input id="{name}" name="{name}" type="file" accept="{accept}" class="{_INPUT_BASE} file:mr-4 file:rounded-full file:border-0 file:bg-indigo-500 file:px-4 file:py-2 file:text-sm file:font-semibold file:text-white">
        </label>
        """
    )


def checkbox(name: str, *, label: str, checked: bool = False) -> Markup:
    state = " checked" if checked else ""
    return Markup(
        f"""
        <label class="flex cursor-pointer items-center gap-3 text-sm text-slate-200">
            <input id="{name}" name="{name}" type="checkbox" value="true" class="rounded border-slate-600 bg-slate-900"{state}>
            <span>{escape(label)}</span>
        </label>
        """
    )


__all__ = ["checkbox", "file_input", "password_input", "text_input", "textarea"]
