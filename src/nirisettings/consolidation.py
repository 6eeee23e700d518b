"""Finding window and layer rules that could be merged into one.

Rules that match on a single app-id (or layer namespace) and set exactly the
same effects can be written as one rule with an alternation pattern, e.g.
``^(steam|lutris)$``. This module only suggests; it never edits rules.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence

from nirisettings.models.rules import LayerRule, WindowRule

# Fields that identify or select a rule rather than describe what it does.
_NOT_EFFECTS = frozenset({"id", "name", "matches", "excludes"})


@dataclasses.dataclass
class ConsolidationSuggestion:
    description: str
    rule_ids: list[int]
    patterns: list[str]
    merged_pattern: str
    shared_settings: str


@dataclasses.dataclass
class ConsolidationAnalysis:
    window_suggestions: list[ConsolidationSuggestion] = dataclasses.field(default_factory=list)
    layer_suggestions: list[ConsolidationSuggestion] = dataclasses.field(default_factory=list)

    @property
    def has_suggestions(self) -> bool:
        return bool(self.window_suggestions or self.layer_suggestions)

    @property
    def total_suggestions(self) -> int:
        return len(self.window_suggestions) + len(self.layer_suggestions)

    @property
    def total_affected_rules(self) -> int:
        return sum(len(s.rule_ids) for s in self.window_suggestions + self.layer_suggestions)


def merged_pattern(patterns: Sequence[str]) -> str:
    """Join *patterns* into one anchored alternation.

    Anchors already present on a pattern are dropped first so that
    ``["^steam$", "lutris"]`` becomes ``^(steam|lutris)$``.
    """
    if not patterns:
        return ""
    patterns = [p.lstrip("^").rstrip("$") for p in patterns]
    return f"^({'|'.join(patterns)})$"


def effects(rule: WindowRule | LayerRule) -> dict[str, Any]:
    """The settings *rule* applies, without its id, name and matchers."""
    return {
        f.name: getattr(rule, f.name)
        for f in dataclasses.fields(rule)
        if f.name not in _NOT_EFFECTS
    }


def describe_effects(values: dict[str, Any]) -> str:
    parts = []
    for name, value in values.items():
        if value is None or value is False:
            continue
        label = name.replace("_", "-")
        if value is True:
            parts.append(label)
        elif isinstance(value, float):
            parts.append(f"{label} {value:.2f}")
        elif isinstance(value, str):
            parts.append(f'{label} "{value}"')
        else:
            parts.append(f"{label} {getattr(value, 'value', value)}")
    return ", ".join(parts) if parts else "default settings"


def _single_pattern(rule: WindowRule | LayerRule, key: str) -> str | None:
    """The one pattern *rule* matches on, or None if it matches on anything more."""
    if len(rule.matches) != 1 or rule.excludes:
        return None
    match = rule.matches[0]
    criteria = {f.name: getattr(match, f.name) for f in dataclasses.fields(match)}
    pattern = criteria.pop(key)
    if not pattern or any(v is not None for v in criteria.values()):
        return None
    return pattern


def _suggest(rules: Sequence[WindowRule | LayerRule], key: str, kind: str) -> list[ConsolidationSuggestion]:
    # Effects may hold unhashable values, so groups are found by equality.
    groups: list[tuple[dict[str, Any], list[tuple[int, str]]]] = []
    for rule in rules:
        pattern = _single_pattern(rule, key)
        if pattern is None:
            continue
        wanted = effects(rule)
        for shared, members in groups:
            if shared == wanted:
                members.append((rule.id, pattern))
                break
        else:
            groups.append((wanted, [(rule.id, pattern)]))

    suggestions = []
    for shared, members in groups:
        if len(members) < 2:
            continue
        patterns = [p for _, p in members]
        suggestions.append(ConsolidationSuggestion(
            description=f"{len(members)} {kind} rules with same settings",
            rule_ids=[rule_id for rule_id, _ in members],
            patterns=patterns,
            merged_pattern=merged_pattern(patterns),
            shared_settings=describe_effects(shared),
        ))
    return suggestions


def analyze_rules(
    window_rules: Sequence[WindowRule],
    layer_rules: Sequence[LayerRule],
) -> ConsolidationAnalysis:
    return ConsolidationAnalysis(
        window_suggestions=_suggest(window_rules, "app_id", "window"),
        layer_suggestions=_suggest(layer_rules, "namespace", "layer"),
    )
