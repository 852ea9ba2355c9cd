"""Strip configuration models.

These models mirror ``config.json``::

    {
      "ups": 30, "fps": 60, "lerp": 0.5,
      "strips": [
        {
          "type": "serial", "com": "Arduino", "leds": 180,
          "maxBrightness": 765, "reductionR": 1.0, "reductionG": 1.0, "reductionB": 1.0,
          "segments": [
            {"offset": 0, "length": 90, "display": 0, "x": 0, "y": 0,
             "width": 2560, "height": 40, "steps": 4, "orientation": true, "invert": false}
          ]
        }
      ]
    }

Python attribute names are snake_case; the on-disk camelCase and short
names are pydantic aliases. All models are frozen, so a parsed
``Configuration`` is an immutable snapshot that can be shared between
threads and swapped atomically.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from .enums import Orientation, StripType

MAX_BRIGHTNESS = 3 * 255


class _ConfigModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Segment(_ConfigModel):
    """Mapping from a rectangular screen region to a contiguous LED range."""

    offset: int = Field(ge=0, description="First LED of the segment")
    length: int = Field(ge=0, description="Number of LEDs in the segment")
    display_index: int = Field(alias="display", ge=0, description="Capture display index")
    x: int = Field(description="X offset of the region on the display")
    y: int = Field(description="Y offset of the region on the display")
    width: int = Field(ge=0, description="Region width in pixels")
    height: int = Field(ge=0, description="Region height in pixels")
    steps: int = Field(ge=1, description="Sub-samples averaged along the scan")
    orientation: Orientation = Field(description="Scan direction (true = horizontal)")
    invert: bool = Field(description="Map the region to the LEDs in reverse order")

    @field_validator("orientation", mode="before")
    @classmethod
    def parse_orientation(cls, value: Any) -> Any:
        """Accept the on-disk boolean as well as the enum value."""
        if isinstance(value, bool):
            return Orientation.HORIZONTAL if value else Orientation.VERTICAL
        return value

    @field_serializer("orientation")
    def serialize_orientation(self, orientation: Orientation) -> bool:
        """Serialize orientation back to the on-disk boolean."""
        return orientation is Orientation.HORIZONTAL

    @property
    def end(self) -> int:
        """Index one past the last LED of the segment."""
        return self.offset + self.length


class Strip(_ConfigModel):
    """One physical LED chain and the transport that reaches it."""

    type: StripType = Field(description="Transport type (serial or network)")
    ip: str = Field(default="", description="Receiver host for network strips")
    port: int = Field(default=0, ge=0, le=65535, description="Receiver port for network strips")
    device_id: str = Field(default="", alias="com", description="Logical serial device name")
    led_count: int = Field(alias="leds", gt=0, description="Number of LEDs on the strip")
    segments: tuple[Segment, ...] = Field(default=(), description="Screen region mappings")
    max_brightness: int = Field(
        default=MAX_BRIGHTNESS,
        alias="maxBrightness",
        ge=0,
        le=MAX_BRIGHTNESS,
        description="Cap on r+g+b after reduction (0-765)",
    )
    reduction_r: float = Field(default=1.0, alias="reductionR", ge=0.0, le=1.0)
    reduction_g: float = Field(default=1.0, alias="reductionG", ge=0.0, le=1.0)
    reduction_b: float = Field(default=1.0, alias="reductionB", ge=0.0, le=1.0)
    baudrate: int = Field(default=115200, alias="baud", gt=0, description="Serial baud rate")

    @model_validator(mode="after")
    def check_addressing(self) -> "Strip":
        """Require the address fields of the selected transport."""
        if self.type is StripType.SERIAL and not self.device_id:
            raise ValueError("serial strips require 'com'")
        if self.type is StripType.NETWORK and (not self.ip or not self.port):
            raise ValueError("network strips require 'ip' and 'port'")
        return self

    @model_validator(mode="after")
    def check_segments(self) -> "Strip":
        """Every segment must fit inside the strip."""
        for index, segment in enumerate(self.segments):
            if segment.end > self.led_count:
                raise ValueError(
                    f"segment {index} covers LEDs {segment.offset}..{segment.end} "
                    f"but the strip only has {self.led_count}"
                )
        return self

    @property
    def address(self) -> str:
        """Human-readable address of the strip."""
        if self.type is StripType.SERIAL:
            return self.device_id
        return f"{self.ip}:{self.port}"

    @property
    def key(self) -> str:
        """Identity of the strip across configuration reloads."""
        return f"{self.type.value}:{self.address}"

    @property
    def reductions(self) -> tuple[float, float, float]:
        """Per-channel reduction factors as (r, g, b)."""
        return (self.reduction_r, self.reduction_g, self.reduction_b)


class Configuration(_ConfigModel):
    """Root configuration snapshot."""

    strips: tuple[Strip, ...] = Field(description="Configured strips, in order")
    ups: int = Field(gt=0, description="Capture updates per second")
    fps: int = Field(gt=0, description="Strip refreshes per second")
    lerp: float = Field(ge=0.0, le=1.0, description="Blend factor applied each frame")

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the on-disk JSON shape."""
        return self.model_dump_json(indent=indent, by_alias=True)

    @classmethod
    def from_json(cls, text: str | bytes) -> "Configuration":
        """Parse the on-disk JSON shape.

        Raises:
            pydantic.ValidationError: If the JSON is malformed or invalid
        """
        return cls.model_validate_json(text)

    @classmethod
    def example(cls) -> "Configuration":
        """A single serial strip with four screen-edge segments."""
        segments = (
            Segment(offset=0, length=30, display_index=0, x=0, y=0, width=40, height=1080,
                    steps=4, orientation=Orientation.VERTICAL, invert=True),
            Segment(offset=30, length=60, display_index=0, x=0, y=0, width=1920, height=40,
                    steps=4, orientation=Orientation.HORIZONTAL, invert=False),
            Segment(offset=90, length=30, display_index=0, x=1880, y=0, width=40, height=1080,
                    steps=4, orientation=Orientation.VERTICAL, invert=False),
            Segment(offset=120, length=60, display_index=0, x=0, y=1040, width=1920, height=40,
                    steps=4, orientation=Orientation.HORIZONTAL, invert=True),
        )
        strip = Strip(type=StripType.SERIAL, device_id="Arduino", led_count=180, segments=segments)
        return cls(strips=(strip,), ups=30, fps=60, lerp=0.5)
