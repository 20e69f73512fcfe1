"""Matcher — classify a message against the effective rule set."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from chat_intents.config import ChatConfig
from chat_intents.message import Message
from chat_intents.plugins import EffectiveRule, Origin, Plugin, build_effective_rules
from chat_intents.rules import DEFAULT_RULES, Rule, RuleOptions

logger = logging.getLogger(__name__)

MessageLike = Message | Mapping[str, Any]
ConfigLike = ChatConfig | Mapping[str, Any] | None
PluginsLike = Iterable[Plugin | Mapping[str, Any]] | None


@dataclass(frozen=True)
class RuleMatch:
    """A matched rule name plus the layout hints its options carry."""

    name: str
    options: RuleOptions = field(default_factory=RuleOptions)
    origin: Origin = "builtin"

    @property
    def fullscreen(self) -> bool:
        return self.options.fullscreen

    @property
    def fullwidth(self) -> bool:
        return self.options.fullwidth


def as_message(message: MessageLike) -> Message:
    if isinstance(message, Message):
        return message
    return Message.from_payload(message)


class Matcher:
    """Evaluates messages against a fixed effective rule set.

    The effective rule set is built once, so a Matcher can be reused across
    every message rendered with the same plugins.
    """

    def __init__(self, plugins: PluginsLike = None, builtins: Iterable[Rule] = DEFAULT_RULES):
        self.rules: list[EffectiveRule] = build_effective_rules(builtins, plugins)

    @property
    def rule_names(self) -> list[str]:
        return [entry.name for entry in self.rules]

    def match(self, message: MessageLike, config: ConfigLike = None) -> list[RuleMatch]:
        """Return matched rules in evaluation order.

        Evaluation stops at the first match whose rule is not passthrough.
        An empty list means the message renders nothing.
        """
        message = as_message(message)
        config = ChatConfig.coerce(config)
        matched: list[RuleMatch] = []

        for entry in self.rules:
            rule = entry.rule
            try:
                hit = bool(rule.match(message, config))
            except Exception:
                logger.exception(
                    "Error in match function of rule %r (trace %s)", rule.name, message.trace_id
                )
                continue

            if not hit:
                continue

            matched.append(RuleMatch(name=rule.name, options=rule.options, origin=entry.origin))
            if not rule.options.passthrough:
                break

        logger.debug(
            "Message %s matched %s", message.trace_id or "-", [m.name for m in matched]
        )
        return matched


def match(
    message: MessageLike,
    config: ConfigLike = None,
    plugins: PluginsLike = None,
) -> list[RuleMatch]:
    """Classify one message with the built-in rules and the given plugins."""
    return Matcher(plugins).match(message, config)
