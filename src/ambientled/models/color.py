"""Color model for LED control."""

import math

from pydantic import BaseModel, ConfigDict, Field


def lerp_channel(a: float, b: float, factor: float) -> int:
    """Blend two channel values as ``a*factor + b*(1-factor)``, rounded half-up."""
    return math.floor(a * factor + b * (1.0 - factor) + 0.5)


class Color(BaseModel):
    """Standard 8-bit RGB color model.

    The model is frozen so colors can be shared between threads and used
    as dictionary keys.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red (0-255)")
    g: int = Field(ge=0, le=255, description="Green (0-255)")
    b: int = Field(ge=0, le=255, description="Blue (0-255)")

    @classmethod
    def off(cls) -> "Color":
        """Create off (black) color."""
        return cls(r=0, g=0, b=0)

    @classmethod
    def from_rgb(cls, rgb: tuple[int, int, int]) -> "Color":
        """Create a color from an (r, g, b) tuple."""
        r, g, b = rgb
        return cls(r=r, g=g, b=b)

    @classmethod
    def lerp(cls, a: "Color", b: "Color", factor: float) -> "Color":
        """Linearly interpolate between two colors.

        ``factor`` weights ``a``: 1.0 returns ``a``, 0.0 returns ``b``.
        Each channel is rounded half-up independently.

        Example:
            >>> Color.lerp(Color(r=255, g=0, b=0), Color.off(), 0.5)
            Color(r=128, g=0, b=0)
        """
        return cls(
            r=lerp_channel(a.r, b.r, factor),
            g=lerp_channel(a.g, b.g, factor),
            b=lerp_channel(a.b, b.b, factor),
        )

    def to_rgb_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Convert to CSS hex color string (e.g., '#FF0000').

        Example:
            >>> Color(r=255, g=0, b=0).to_hex()
            '#FF0000'
        """
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"
