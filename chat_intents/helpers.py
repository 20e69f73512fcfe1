"""Presentation helpers shared by the built-in handlers."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER_RE = re.compile(r"{(\w+)}")

ONE_MB = 1_000_000
ONE_KB = 1_000

VALID_IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


def get_button_label(button: Mapping[str, Any]) -> str | None:
    """Button title; untitled phone-number buttons read "Call"."""
    title = button.get("title")
    if not title and button.get("type") == "phone_number":
        return "Call"
    return title


def interpolate_string(template: str, replacements: Mapping[str, str]) -> str:
    """Fill ``{key}`` placeholders; unknown keys become empty.

    >>> interpolate_string("{position} of {total}", {"position": "1", "total": "4"})
    '1 of 4'
    """
    return _PLACEHOLDER_RE.sub(lambda m: replacements.get(m.group(1), ""), template)


def get_file_name(file_name: str) -> str:
    """Name up to and including the last dot: ``document.pdf`` -> ``document.``"""
    dot = file_name.rfind(".")
    if dot > 0:
        return file_name[: dot + 1]
    return file_name


def get_file_extension(file_name: str) -> str | None:
    dot = file_name.rfind(".")
    if 0 < dot < len(file_name) - 1:
        return file_name[dot + 1 :]
    return None


def get_size_label(size: int | float) -> str:
    if size > ONE_MB:
        return f"{size / ONE_MB:.2f} MB"
    return f"{size / ONE_KB:.2f} KB"


def is_image_attachment(mime_type: str) -> bool:
    return mime_type in VALID_IMAGE_MIME_TYPES
