"""Window and layer rules."""

from __future__ import annotations

import dataclasses

import nirisettings.constants as C
from nirisettings.models.enums import BlockOutFrom
from nirisettings.models.layout import PresetSize


@dataclasses.dataclass
class WindowMatch:
    """One ``match``/``exclude`` line; unset criteria are ``None``."""

    app_id: str | None = None
    title: str | None = None
    is_active: bool | None = None
    is_focused: bool | None = None
    is_floating: bool | None = None
    is_urgent: bool | None = None
    at_startup: bool | None = None

    def validate(self) -> None:
        C.limit_strings(self, ("app_id", "title"), C.MAX_PATTERN_LENGTH)


@dataclasses.dataclass
class WindowRule:
    id: int
    name: str | None = None
    matches: list[WindowMatch] = dataclasses.field(default_factory=list)
    excludes: list[WindowMatch] = dataclasses.field(default_factory=list)
    open_on_output: str | None = None
    open_on_workspace: str | None = None
    open_maximized: bool | None = None
    open_fullscreen: bool | None = None
    open_floating: bool | None = None
    open_focused: bool | None = None
    opacity: float | None = None
    block_out_from: BlockOutFrom | None = None
    geometry_corner_radius: int | None = None
    clip_to_geometry: bool | None = None
    draw_border_with_background: bool | None = None
    default_column_width: PresetSize | None = None
    min_width: int | None = None
    max_width: int | None = None
    min_height: int | None = None
    max_height: int | None = None
    variable_refresh_rate: bool | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {
            "opacity": C.OPACITY,
            "geometry_corner_radius": C.CORNER_RADIUS,
            "min_width": C.WINDOW_SIZE,
            "max_width": C.WINDOW_SIZE,
            "min_height": C.WINDOW_SIZE,
            "max_height": C.WINDOW_SIZE,
        })
        if self.default_column_width is not None:
            self.default_column_width = self.default_column_width.clamped()
        C.limit_strings(self, ("name", "open_on_output", "open_on_workspace"))
        self.matches = C.limit_list(self.matches, C.MAX_MATCHES_PER_RULE, "window rule matches")
        self.excludes = C.limit_list(self.excludes, C.MAX_MATCHES_PER_RULE, "window rule excludes")
        for match in self.matches + self.excludes:
            match.validate()


@dataclasses.dataclass
class WindowRuleSettings:
    rules: list[WindowRule] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        self.rules = C.limit_list(self.rules, C.MAX_WINDOW_RULES, "window rules")
        for rule in self.rules:
            rule.validate()

    def next_id(self) -> int:
        return max((r.id for r in self.rules), default=0) + 1


@dataclasses.dataclass
class LayerMatch:
    namespace: str | None = None
    at_startup: bool | None = None

    def validate(self) -> None:
        self.namespace = C.limit_string(self.namespace, C.MAX_PATTERN_LENGTH)


@dataclasses.dataclass
class LayerRule:
    id: int
    name: str | None = None
    matches: list[LayerMatch] = dataclasses.field(default_factory=list)
    excludes: list[LayerMatch] = dataclasses.field(default_factory=list)
    opacity: float | None = None
    block_out_from: BlockOutFrom | None = None
    geometry_corner_radius: int | None = None
    place_within_backdrop: bool | None = None
    baba_is_float: bool | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {
            "opacity": C.OPACITY,
            "geometry_corner_radius": C.CORNER_RADIUS,
        })
        self.name = C.limit_string(self.name)
        self.matches = C.limit_list(self.matches, C.MAX_MATCHES_PER_RULE, "layer rule matches")
        self.excludes = C.limit_list(self.excludes, C.MAX_MATCHES_PER_RULE, "layer rule excludes")
        for match in self.matches + self.excludes:
            match.validate()


@dataclasses.dataclass
class LayerRuleSettings:
    rules: list[LayerRule] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        self.rules = C.limit_list(self.rules, C.MAX_LAYER_RULES, "layer rules")
        for rule in self.rules:
            rule.validate()

    def next_id(self) -> int:
        return max((r.id for r in self.rules), default=0) + 1
