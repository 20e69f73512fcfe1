"""Plugin interface, registry and override resolution.

A plugin is a rule that brings its own handler. A plugin named like a built-in
rule takes over that rule's slot in the catalog; any other plugin is appended
after the built-ins. Invalid plugins are ignored rather than reported, since
plugin lists are often assembled from several sources.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from chat_intents.rules import DEFAULT_RULES, Predicate, Rule, RuleOptions

logger = logging.getLogger(__name__)

Origin = Literal["builtin", "plugin"]


@dataclass(frozen=True)
class Plugin:
    """An externally supplied rule carrying its own handler."""

    name: str
    match: Predicate
    handler: Any
    options: RuleOptions = field(default_factory=RuleOptions)

    def __post_init__(self) -> None:
        # Options may arrive in the {passthrough, fullscreen, fullwidth} mapping shape
        object.__setattr__(self, "options", RuleOptions.from_value(self.options))

    @classmethod
    def from_value(cls, value: Plugin | Mapping[str, Any]) -> Plugin | None:
        """Accept a Plugin or the ``{name, match, options, handler}`` mapping shape."""
        if isinstance(value, Plugin):
            return value
        if not isinstance(value, Mapping):
            return None
        return cls(
            name=value.get("name"),
            match=value.get("match"),
            handler=value.get("handler"),
            options=RuleOptions.from_value(value.get("options")),
        )

    @property
    def rule(self) -> Rule:
        return Rule(name=self.name, match=self.match, options=self.options)


@dataclass(frozen=True)
class EffectiveRule:
    """A rule in the resolved catalog, with the handler a plugin brought along."""

    rule: Rule
    handler: Any = None
    origin: Origin = "builtin"

    @property
    def name(self) -> str:
        return self.rule.name


def is_valid_handler(handler: Any) -> bool:
    """A handler is a callable or a non-empty structured object."""
    if handler is None or isinstance(handler, (str, bytes, int, float, bool)):
        return False
    if callable(handler):
        return True
    if isinstance(handler, Mapping):
        return len(handler) > 0
    return bool(getattr(handler, "__dict__", None))


def is_valid_plugin(plugin: Plugin) -> bool:
    return (
        isinstance(plugin.name, str)
        and bool(plugin.name)
        and callable(plugin.match)
        and is_valid_handler(plugin.handler)
    )


def _valid_plugins(plugins: Iterable[Plugin | Mapping[str, Any]]) -> list[Plugin]:
    """Drop invalid plugins and later duplicates of a name (first registered wins)."""
    accepted: dict[str, Plugin] = {}
    for value in plugins:
        plugin = Plugin.from_value(value)
        if plugin is None or not is_valid_plugin(plugin):
            logger.debug("Ignoring invalid plugin: %r", value)
            continue
        if plugin.name in accepted:
            logger.debug("Ignoring duplicate plugin %r", plugin.name)
            continue
        accepted[plugin.name] = plugin
    return list(accepted.values())


def build_effective_rules(
    builtins: Iterable[Rule] = DEFAULT_RULES,
    plugins: Iterable[Plugin | Mapping[str, Any]] | None = None,
) -> list[EffectiveRule]:
    """Merge plugins into the built-in catalog.

    Overrides keep the built-in's position; new plugins follow the built-ins in
    the order given.
    """
    effective = [EffectiveRule(rule=rule) for rule in builtins]
    positions = {entry.name: index for index, entry in enumerate(effective)}

    for plugin in _valid_plugins(plugins or ()):
        entry = EffectiveRule(rule=plugin.rule, handler=plugin.handler, origin="plugin")
        if plugin.name in positions:
            effective[positions[plugin.name]] = entry
        else:
            positions[plugin.name] = len(effective)
            effective.append(entry)

    return effective


class PluginRegistry:
    """Ordered registry of plugins, keyed by name."""

    def __init__(self, plugins: Iterable[Plugin | Mapping[str, Any]] | None = None) -> None:
        self._plugins: dict[str, Plugin] = {}
        for plugin in plugins or ():
            self.register(plugin)

    def register(self, plugin: Plugin | Mapping[str, Any]) -> None:
        for accepted in _valid_plugins([plugin]):
            if accepted.name in self._plugins:
                logger.debug("Plugin %r already registered, keeping the first", accepted.name)
                return
            self._plugins[accepted.name] = accepted

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._plugins.keys())

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    def effective_rules(self, builtins: Iterable[Rule] = DEFAULT_RULES) -> list[EffectiveRule]:
        return build_effective_rules(builtins, self)
