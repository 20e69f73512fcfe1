"""Dispatch — map matched rule names to the handlers that render them."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from chat_intents import handlers
from chat_intents.matcher import RuleMatch
from chat_intents.plugins import EffectiveRule
from chat_intents.rules import RuleOptions

logger = logging.getLogger(__name__)

BUILTIN_HANDLERS: Mapping[str, Callable[[], Any]] = {
    "XAppSubmit": handlers.render_xapp_submit,
    "Webchat3Event": handlers.render_webchat3_event,
    "DatePicker": handlers.render_date_picker,
    "TextWithButtons": handlers.render_text_with_buttons,
    "Image": handlers.render_image,
    "Video": handlers.render_video,
    "Audio": handlers.render_audio,
    "File": handlers.render_file,
    "List": handlers.render_list,
    "Gallery": handlers.render_gallery,
    "AdaptiveCard": handlers.render_adaptive_card,
    "Text": handlers.render_text,
}


@dataclass(frozen=True)
class ResolvedHandler:
    name: str
    handler: Any
    options: RuleOptions = field(default_factory=RuleOptions)


def handler_table(
    effective_rules: Iterable[EffectiveRule],
    builtin_handlers: Mapping[str, Any] = BUILTIN_HANDLERS,
) -> dict[str, Any]:
    """Name -> handler for an effective rule set.

    Plugin-originated entries (including overrides) use the plugin's handler;
    everything else comes from the built-in table.
    """
    table: dict[str, Any] = {}
    for entry in effective_rules:
        if entry.origin == "plugin":
            table[entry.name] = entry.handler
        elif entry.name in builtin_handlers:
            table[entry.name] = builtin_handlers[entry.name]
    return table


def resolve(
    matches: Iterable[RuleMatch],
    effective_rules: Iterable[EffectiveRule],
    builtin_handlers: Mapping[str, Any] = BUILTIN_HANDLERS,
) -> list[ResolvedHandler]:
    """Turn a match result into an ordered render plan.

    A name with no handler is dropped rather than raised, so one bad message
    never stops its siblings from rendering.
    """
    table = handler_table(effective_rules, builtin_handlers)
    resolved: list[ResolvedHandler] = []
    for matched in matches:
        handler = table.get(matched.name)
        if handler is None:
            logger.warning("No handler for matched rule %r, skipping", matched.name)
            continue
        resolved.append(ResolvedHandler(name=matched.name, handler=handler, options=matched.options))
    return resolved
