"""
Color model for Hue lights.

Pure conversions between the color encodings a routine may use and the
CIE xy chromaticity the bridge understands natively:
- ct (mirek) -> xy via the McCamy/Kim cubic approximation
- hex / RGB -> xy through the Hue wide-gamut matrix
- hue/sat -> xy via HSV
- interpolation between any two color specs
- xy + brightness -> hex for UI previews
"""

from dataclasses import dataclass
from typing import Any
import colorsys
import math

# D65 white point, returned when there is no light to normalise
D65_WHITE = (0.3127, 0.3291)

# Hue wide-gamut RGB -> XYZ
_WIDE_GAMUT_TO_XYZ = (
    (0.664511, 0.154324, 0.162028),
    (0.283881, 0.668433, 0.047685),
    (0.000088, 0.072310, 0.986039),
)

# XYZ -> Hue wide-gamut RGB (approximate inverse, used for previews only)
_XYZ_TO_WIDE_GAMUT = (
    (1.656492, -0.354851, -0.255038),
    (-0.707196, 1.655397, 0.036152),
    (0.051713, -0.121364, 1.011530),
)


@dataclass(frozen=True)
class ColorSpec:
    """
    A color as written in a routine definition.

    Exactly one representation is set:
    - xy: CIE 1931 chromaticity (x, y)
    - mirek: color temperature in mirek (10^6 / Kelvin)
    - hex: "#RRGGBB" sRGB string
    - hue/saturation: Hue-native hue (0-65535) and saturation (0-254)
    """
    xy: tuple[float, float] | None = None
    mirek: int | None = None
    hex: str | None = None
    hue: int | None = None
    saturation: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColorSpec":
        """
        Parse the wire form: {"xy": [x, y]}, {"ct": n}, {"hex": "..."}
        or {"hs": {"hue": h, "sat": s}}.

        Raises:
            ValueError: If zero or several representations are given, or
                the value is out of range
        """
        if not isinstance(data, dict):
            raise ValueError(f"Color must be a mapping, got {data!r}")
        keys =[k for k in ("xy", "ct", "hex", "hs") if data.get(k) is not None]
        if len(keys) != 1:
            raise ValueError(f"Color needs exactly one of xy/ct/hex/hs, got {sorted(data)}")

        key = keys[0]
        if key == "xy":
            x, y = data["xy"]
            return cls(xy=(float(x), float(y)))
        if key == "ct":
            mirek = int(data["ct"])
            if mirek <= 0:
                raise ValueError(f"ct must be a positive mirek value, got {mirek}")
            return cls(mirek=mirek)
        if key == "hex":
            hex_to_rgb(data["hex"])  # validate early
            return cls(hex=str(data["hex"]))

        hs = data["hs"]
        if not isinstance(hs, dict):
            raise ValueError(f"hs must be a mapping with hue and sat, got {hs!r}")
        return cls(hue=int(hs["hue"]), saturation=int(hs["sat"]))

    @property
    def is_hs(self) -> bool:
        return self.hue is not None and self.saturation is not None

    def to_dict(self) -> dict[str, Any]:
        """Inverse of from_dict."""
        if self.xy is not None:
            return {"xy": list(self.xy)}
        if self.mirek is not None:
            return {"ct": self.mirek}
        if self.is_hs:
            return {"hs": {"hue": self.hue, "sat": self.saturation}}
        if self.hex is not None:
            return {"hex": self.hex}
        return {}


@dataclass(frozen=True)
class ColorPreview:
    """Result of preview_color()."""
    xy: tuple[float, float] | None
    hex: str


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def color_temperature_to_xy(mirek: float) -> tuple[float, float]:
    """
    Convert a color temperature in mirek to CIE xy.

    Uses the piecewise cubic fit of the Planckian locus: x has separate
    coefficients below/above 4000K, y uses three Kelvin bands.

    Raises:
        ValueError: If mirek is not positive
    """
    if mirek <= 0:
        raise ValueError(f"Mirek must be positive, got {mirek}")

    kelvin = 1_000_000 / mirek
    k2 = kelvin * kelvin
    k3 = k2 * kelvin

    if kelvin <= 4000:
        x = -0.2661239e9 / k3 - 0.2343589e6 / k2 + 0.8776956e3 / kelvin + 0.17991
    else:
        x = -3.0258469e9 / k3 + 2.1070379e6 / k2 + 0.2226347e3 / kelvin + 0.24039

    if kelvin <= 2222:
        y = -1.1063814 * x ** 3 - 1.3481102 * x ** 2 + 2.1855583 * x - 0.2021968
    elif kelvin <= 4000:
        y = -0.9549476 * x ** 3 - 1.3741859 * x ** 2 + 2.0913702 * x - 0.1674887
    else:
        y = 3.081758 * x ** 3 - 5.8733867 * x ** 2 + 3.75113 * x - 0.3700148

    return (_clamp(x), _clamp(y))


def hex_to_rgb(hex_color: str) -> tuple[float, float, float]:
    """
    Convert a hex string to sRGB components in 0.0-1.0.

    Args:
        hex_color: "#RRGGBB" or "RRGGBB"

    Raises:
        ValueError: If hex format is invalid
    """
    hex_str = hex_color.lstrip("#")
    if len(hex_str) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")

    try:
        return (
            int(hex_str[0:2], 16) / 255.0,
            int(hex_str[2:4], 16) / 255.0,
            int(hex_str[4:6], 16) / 255.0,
        )
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color}")


def _gamma_decode(c: float) -> float:
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def _gamma_encode(c: float) -> float:
    return 12.92 * c if c <= 0.0031308 else 1.055 * c ** (1.0 / 2.4) - 0.055


def hex_to_linear_rgb(hex_color: str) -> tuple[float, float, float]:
    """Convert a hex string to gamma-decoded (linear) RGB."""
    r, g, b = hex_to_rgb(hex_color)
    return (_gamma_decode(r), _gamma_decode(g), _gamma_decode(b))


def linear_rgb_to_xy(r: float, g: float, b: float) -> tuple[float, float]:
    """
    Convert linear RGB to CIE xy in the Hue wide gamut.

    Black has no chromaticity; the D65 white point is returned instead.
    """
    X, Y, Z = (row[0] * r + row[1] * g + row[2] * b for row in _WIDE_GAMUT_TO_XYZ)
    total = X + Y + Z
    if total == 0:
        return D65_WHITE
    return (X / total, Y / total)


def rgb_to_xy(r: float, g: float, b: float) -> tuple[float, float]:
    """Convert gamma-encoded sRGB (0.0-1.0) to CIE xy."""
    return linear_rgb_to_xy(_gamma_decode(r), _gamma_decode(g), _gamma_decode(b))


def hs_to_xy(hue: int, saturation: int) -> tuple[float, float]:
    """
    Convert Hue-native hue (0-65535) and saturation (0-254) to xy.

    Value is fixed at full brightness; brightness travels separately.
    """
    r, g, b = colorsys.hsv_to_rgb(
        (hue / 65535) % 1.0,
        _clamp(saturation / 254),
        1.0,
    )
    return rgb_to_xy(r, g, b)


def color_to_xy(spec: ColorSpec | None) -> tuple[float, float] | None:
    """Convert any color spec to xy, or None when there is nothing to convert."""
    if spec is None:
        return None
    if spec.xy is not None:
        return spec.xy
    if spec.mirek is not None:
        if spec.mirek <= 0:
            return None
        return color_temperature_to_xy(spec.mirek)
    if spec.hex is not None:
        return linear_rgb_to_xy(*hex_to_linear_rgb(spec.hex))
    if spec.is_hs:
        return hs_to_xy(spec.hue, spec.saturation)
    return None


def resolve_device_color(spec: ColorSpec | None) -> dict[str, Any]:
    """
    Map a color spec to the state fields a Hue light accepts.

    xy, ct and hue/sat pass through; hex is converted to xy.
    An absent spec resolves to no color fields at all.
    """
    if spec is None:
        return {}
    if spec.xy is not None:
        return {"xy": [spec.xy[0], spec.xy[1]]}
    if spec.mirek is not None:
        return {"ct": spec.mirek}
    if spec.is_hs:
        return {"hue": spec.hue, "sat": spec.saturation}
    if spec.hex is not None:
        x, y = linear_rgb_to_xy(*hex_to_linear_rgb(spec.hex))
        return {"xy": [x, y]}
    return {}


def interpolate_color(
    a: ColorSpec | None,
    b: ColorSpec | None,
    t: float,
) -> ColorSpec | None:
    """
    Interpolate between two color specs.

    Args:
        a: Color at t=0
        b: Color at t=1
        t: Position between them (0.0-1.0)

    Returns:
        - two color temperatures: linear in mirek, rounded to an integer
        - two xy colors: linear per coordinate
        - anything else convertible: both converted to xy, then linear
        - otherwise: a for t < 0.5, else b (no blending)
    """
    if a is not None and b is not None:
        if a.mirek is not None and b.mirek is not None:
            return ColorSpec(mirek=round_half_up(_lerp(a.mirek, b.mirek, t)))
        if a.xy is not None and b.xy is not None:
            return ColorSpec(xy=(_lerp(a.xy[0], b.xy[0], t), _lerp(a.xy[1], b.xy[1], t)))

    xy_a = color_to_xy(a)
    xy_b = color_to_xy(b)
    if xy_a is not None and xy_b is not None:
        return ColorSpec(xy=(_lerp(xy_a[0], xy_b[0], t), _lerp(xy_a[1], xy_b[1], t)))

    return a if t < 0.5 else b


def xy_to_preview_hex(x: float, y: float, brightness: int) -> str:
    """
    Approximate the sRGB hex a light shows for xy at a Hue brightness (0-254).

    For display only. y == 0 has no defined luminance and renders as black.
    """
    if y <= 0:
        return "#000000"

    z = 1.0 - x - y
    Y = brightness / 254
    X = (Y / y) * x
    Z = (Y / y) * z

    channels = []
    for row in _XYZ_TO_WIDE_GAMUT:
        linear = row[0] * X + row[1] * Y + row[2] * Z
        # negative channels are out of gamut
        encoded = _gamma_encode(max(0.0, linear))
        channels.append(round_half_up(_clamp(encoded) * 255))

    return "#{:02x}{:02x}{:02x}".format(*channels)


def preview_color(spec: ColorSpec | None, brightness: int = 254) -> ColorPreview:
    """Build the xy + hex preview shown next to a waypoint in an editor."""
    xy = color_to_xy(spec)
    if xy is None:
        return ColorPreview(xy=None, hex="#000000")
    return ColorPreview(xy=xy, hex=xy_to_preview_hex(xy[0], xy[1], brightness))
