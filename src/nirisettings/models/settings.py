"""The aggregate settings root."""

from __future__ import annotations

import dataclasses

from nirisettings.models.display import (
    AnimationSettings,
    CursorSettings,
    OutputSettings,
    OverviewSettings,
    RecentWindowsSettings,
)
from nirisettings.models.input import (
    KeyboardSettings,
    MouseSettings,
    TabletSettings,
    TouchpadSettings,
    TouchSettings,
    TrackballSettings,
    TrackpointSettings,
)
from nirisettings.models.layout import (
    AppearanceSettings,
    BehaviorSettings,
    LayoutExtrasSettings,
)
from nirisettings.models.rules import LayerRuleSettings, WindowRuleSettings
from nirisettings.models.system import (
    DebugSettings,
    EnvironmentSettings,
    GestureSettings,
    KeybindingSettings,
    MiscSettings,
    StartupSettings,
    SwitchEventSettings,
    WorkspaceSettings,
)


@dataclasses.dataclass
class Settings:
    """One field per category; each field is persisted as one file."""

    appearance: AppearanceSettings = dataclasses.field(default_factory=AppearanceSettings)
    behavior: BehaviorSettings = dataclasses.field(default_factory=BehaviorSettings)
    keyboard: KeyboardSettings = dataclasses.field(default_factory=KeyboardSettings)
    mouse: MouseSettings = dataclasses.field(default_factory=MouseSettings)
    touchpad: TouchpadSettings = dataclasses.field(default_factory=TouchpadSettings)
    trackpoint: TrackpointSettings = dataclasses.field(default_factory=TrackpointSettings)
    trackball: TrackballSettings = dataclasses.field(default_factory=TrackballSettings)
    tablet: TabletSettings = dataclasses.field(default_factory=TabletSettings)
    touch: TouchSettings = dataclasses.field(default_factory=TouchSettings)
    outputs: OutputSettings = dataclasses.field(default_factory=OutputSettings)
    animations: AnimationSettings = dataclasses.field(default_factory=AnimationSettings)
    cursor: CursorSettings = dataclasses.field(default_factory=CursorSettings)
    overview: OverviewSettings = dataclasses.field(default_factory=OverviewSettings)
    workspaces: WorkspaceSettings = dataclasses.field(default_factory=WorkspaceSettings)
    keybindings: KeybindingSettings = dataclasses.field(default_factory=KeybindingSettings)
    layout_extras: LayoutExtrasSettings = dataclasses.field(default_factory=LayoutExtrasSettings)
    gestures: GestureSettings = dataclasses.field(default_factory=GestureSettings)
    layer_rules: LayerRuleSettings = dataclasses.field(default_factory=LayerRuleSettings)
    window_rules: WindowRuleSettings = dataclasses.field(default_factory=WindowRuleSettings)
    miscellaneous: MiscSettings = dataclasses.field(default_factory=MiscSettings)
    startup: StartupSettings = dataclasses.field(default_factory=StartupSettings)
    environment: EnvironmentSettings = dataclasses.field(default_factory=EnvironmentSettings)
    debug: DebugSettings = dataclasses.field(default_factory=DebugSettings)
    switch_events: SwitchEventSettings = dataclasses.field(default_factory=SwitchEventSettings)
    recent_windows: RecentWindowsSettings = dataclasses.field(default_factory=RecentWindowsSettings)

    def validate(self) -> None:
        """Clamp every numeric field into its documented range."""
        for f in dataclasses.fields(self):
            getattr(self, f.name).validate()

    @classmethod
    def section_names(cls) -> list[str]:
        return [f.name for f in dataclasses.fields(cls)]
