"""
Color space models for PDF images.

A closed family of immutable detail records, one per supported color space
family. Stateless families (gray, RGB, CMYK, pattern, unsupported) are
exposed as module-level constants and should be reused rather than rebuilt.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional

from utils.validation import InvalidArgumentError, InvalidColorSpaceError


class ColorSpace(str, Enum):
    """Color space families that image conversion distinguishes."""
    DEVICE_GRAY = "DeviceGray"
    DEVICE_RGB = "DeviceRGB"
    DEVICE_CMYK = "DeviceCMYK"
    INDEXED = "Indexed"
    SEPARATION = "Separation"
    PATTERN = "Pattern"
    UNSUPPORTED = "Unsupported"


# Families that may not act as the base of Indexed or the alternate of Separation
_DISALLOWED_UNDERLYING = {ColorSpace.INDEXED, ColorSpace.PATTERN}

# Families whose samples map directly onto output color components
DEVICE_COLOR_SPACES = frozenset({
    ColorSpace.DEVICE_GRAY, ColorSpace.DEVICE_RGB, ColorSpace.DEVICE_CMYK,
})

_COMPONENT_COUNTS = {
    ColorSpace.DEVICE_GRAY: 1,
    ColorSpace.DEVICE_RGB: 3,
    ColorSpace.DEVICE_CMYK: 4,
    ColorSpace.INDEXED: 1,
    ColorSpace.SEPARATION: 1,
}


def component_count(color_space: ColorSpace) -> Optional[int]:
    """Number of color components per sample, or None for unknown families."""
    return _COMPONENT_COUNTS.get(color_space)


@dataclass(frozen=True)
class ColorSpaceDetails:
    """Base for all color space detail records."""
    type: ClassVar[ColorSpace] = ColorSpace.UNSUPPORTED

    @property
    def base_type(self) -> ColorSpace:
        """The family samples resolve to once any lookup table is applied."""
        return self.type


@dataclass(frozen=True)
class DeviceGrayColorSpaceDetails(ColorSpaceDetails):
    type: ClassVar[ColorSpace] = ColorSpace.DEVICE_GRAY


@dataclass(frozen=True)
class DeviceRgbColorSpaceDetails(ColorSpaceDetails):
    type: ClassVar[ColorSpace] = ColorSpace.DEVICE_RGB


@dataclass(frozen=True)
class DeviceCmykColorSpaceDetails(ColorSpaceDetails):
    type: ClassVar[ColorSpace] = ColorSpace.DEVICE_CMYK


@dataclass(frozen=True)
class PatternColorSpaceDetails(ColorSpaceDetails):
    type: ClassVar[ColorSpace] = ColorSpace.PATTERN


@dataclass(frozen=True)
class UnsupportedColorSpaceDetails(ColorSpaceDetails):
    type: ClassVar[ColorSpace] = ColorSpace.UNSUPPORTED


def _check_underlying(details: Optional[ColorSpaceDetails], role: str) -> None:
    if details is None:
        raise InvalidArgumentError(f"{role} color space must be provided")
    if details.type in _DISALLOWED_UNDERLYING:
        raise InvalidColorSpaceError(
            f"{details.type.value} cannot be used as the {role} color space"
        )


@dataclass(frozen=True)
class IndexedColorSpaceDetails(ColorSpaceDetails):
    """
    Palette color space: each sample is an index into ``color_table``.

    The table is expected to hold ``(hi_val + 1) * n`` bytes where ``n`` is the
    component count of the base space. That length is not enforced here;
    lookups are bounds-checked when samples are expanded.
    """
    type: ClassVar[ColorSpace] = ColorSpace.INDEXED

    base_color_space_details: ColorSpaceDetails
    hi_val: int
    color_table: bytes
    resolved_base_type: ColorSpace = field(init=False, repr=False)

    def __post_init__(self):
        _check_underlying(self.base_color_space_details, "base")
        try:
            hi_val = int(self.hi_val)
        except (TypeError, ValueError) as e:
            raise InvalidColorSpaceError(f"Indexed hival must be an integer, got {self.hi_val!r}") from e
        if not 0 <= hi_val <= 255:
            raise InvalidColorSpaceError(f"Indexed hival must be in 0..255, got {self.hi_val}")

        object.__setattr__(self, 'hi_val', hi_val)
        object.__setattr__(self, 'color_table', bytes(self.color_table))
        object.__setattr__(self, 'resolved_base_type', self.base_color_space_details.base_type)

    @property
    def base_type(self) -> ColorSpace:
        return self.resolved_base_type


@dataclass(frozen=True)
class SeparationColorSpaceDetails(ColorSpaceDetails):
    """
    Single named colorant with an alternate space for output devices that
    lack it. The tint transform is carried along but never evaluated.
    """
    type: ClassVar[ColorSpace] = ColorSpace.SEPARATION

    name: str
    alternate_color_space_details: ColorSpaceDetails
    tint_function: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        _check_underlying(self.alternate_color_space_details, "alternate")


DEVICE_GRAY = DeviceGrayColorSpaceDetails()
DEVICE_RGB = DeviceRgbColorSpaceDetails()
DEVICE_CMYK = DeviceCmykColorSpaceDetails()
PATTERN = PatternColorSpaceDetails()
UNSUPPORTED = UnsupportedColorSpaceDetails()

__all__ = [
    'ColorSpace',
    'ColorSpaceDetails',
    'DeviceGrayColorSpaceDetails',
    'DeviceRgbColorSpaceDetails',
    'DeviceCmykColorSpaceDetails',
    'PatternColorSpaceDetails',
    'UnsupportedColorSpaceDetails',
    'IndexedColorSpaceDetails',
    'SeparationColorSpaceDetails',
    'DEVICE_GRAY',
    'DEVICE_RGB',
    'DEVICE_CMYK',
    'PATTERN',
    'UNSUPPORTED',
    'DEVICE_COLOR_SPACES',
    'component_count',
]
