"""Colors and gradients as niri writes them (``"#rrggbbaa"``)."""

from __future__ import annotations

import dataclasses
import enum
import re
from typing import Union

from nirisettings.errors import ValidationError

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


@dataclasses.dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#rgb``, ``#rgba``, ``#rrggbb`` or ``#rrggbbaa``."""
        m = _HEX_RE.match(text.strip()) if isinstance(text, str) else None
        if m is None:
            raise ValidationError(f"Not a hex color: {text!r}")
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) == 6:
            digits += "ff"
        r, g, b, a = (int(digits[i:i + 2], 16) for i in range(0, 8, 2))
        return cls(r, g, b, a)

    def to_hex(self) -> str:
        if self.a == 255:
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"

    def __str__(self) -> str:
        return self.to_hex()


class GradientRelativeTo(enum.Enum):
    WINDOW = "window"
    WORKSPACE_VIEW = "workspace-view"


@dataclasses.dataclass(frozen=True)
class Gradient:
    start: Color
    end: Color
    angle: int = 180
    relative_to: GradientRelativeTo = GradientRelativeTo.WINDOW
    # e.g. "srgb", "oklab", "oklch longer hue"
    color_space: str | None = None


ColorOrGradient = Union[Color, Gradient]
