"""Tests for the color model."""

import re

import pytest

from hue_routines.lights.color import (
    D65_WHITE,
    ColorSpec,
    color_temperature_to_xy,
    color_to_xy,
    hex_to_linear_rgb,
    hex_to_rgb,
    hs_to_xy,
    interpolate_color,
    preview_color,
    resolve_device_color,
    rgb_to_xy,
    round_half_up,
    xy_to_preview_hex,
)


class TestColorSpec:
    def test_from_dict_variants(self):
        assert ColorSpec.from_dict({"xy": [0.4, 0.5]}) == ColorSpec(xy=(0.4, 0.5))
        assert ColorSpec.from_dict({"ct": 366}) == ColorSpec(mirek=366)
        assert ColorSpec.from_dict({"hex": "#FF8800"}) == ColorSpec(hex="#FF8800")
        assert ColorSpec.from_dict({"hs": {"hue": 1000, "sat": 200}}) == ColorSpec(hue=1000, saturation=200)

    def test_from_dict_rejects_ambiguous(self):
        with pytest.raises(ValueError):
            ColorSpec.from_dict({"ct": 300, "xy": [0.3, 0.3]})
        with pytest.raises(ValueError):
            ColorSpec.from_dict({})

    def test_from_dict_rejects_non_positive_mirek(self):
        with pytest.raises(ValueError):
            ColorSpec.from_dict({"ct": 0})
        with pytest.raises(ValueError):
            ColorSpec.from_dict({"ct": -153})

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValueError):
            ColorSpec.from_dict("red")
        with pytest.raises(ValueError):
            ColorSpec.from_dict({"hs": [100, 200]})

    def test_from_dict_rejects_bad_hex(self):
        with pytest.raises(ValueError):
            ColorSpec.from_dict({"hex": "#12"})

    def test_to_dict_inverse(self):
        for data in ({"xy": [0.1, 0.2]}, {"ct": 250}, {"hex": "#000000"}, {"hs": {"hue": 5, "sat": 6}}):
            assert ColorSpec.from_dict(data).to_dict() == data


class TestColorTemperature:
    @pytest.mark.parametrize("mirek", [1, 50, 153, 222, 250, 366, 450, 500, 1000, 100000])
    def test_xy_within_unit_square(self, mirek):
        x, y = color_temperature_to_xy(mirek)
        assert 0.0 <= x <= 1.0
        assert 0.0 <= y <= 1.0

    def test_warm_white_near_planckian_locus(self):
        # 2700K
        x, y = color_temperature_to_xy(1_000_000 / 2700)
        assert x == pytest.approx(0.460, abs=0.005)
        assert y == pytest.approx(0.411, abs=0.005)

    def test_non_positive_mirek_rejected(self):
        with pytest.raises(ValueError):
            color_temperature_to_xy(0)


class TestRgb:
    def test_black_returns_white_point(self):
        assert rgb_to_xy(0, 0, 0) == D65_WHITE

    def test_white(self):
        x, y = rgb_to_xy(1, 1, 1)
        assert x == pytest.approx(0.3227, abs=1e-3)
        assert y == pytest.approx(0.3290, abs=1e-3)

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
        assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)

    def test_hex_to_linear_rgb_decodes_gamma(self):
        r, g, b = hex_to_linear_rgb("#808080")
        assert r == pytest.approx(0.2159, abs=1e-3)
        assert r == g == b

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#zzzzzz")

    def test_hs_red_matches_rgb_red(self):
        assert hs_to_xy(0, 254) == pytest.approx(rgb_to_xy(1, 0, 0))
        assert hs_to_xy(65535, 254) == pytest.approx(rgb_to_xy(1, 0, 0))

    def test_hs_unsaturated_is_white(self):
        assert hs_to_xy(20000, 0) == pytest.approx(rgb_to_xy(1, 1, 1))


class TestConversions:
    def test_color_to_xy(self):
        assert color_to_xy(None) is None
        assert color_to_xy(ColorSpec(xy=(0.2, 0.3))) == (0.2, 0.3)
        assert color_to_xy(ColorSpec(mirek=300)) == color_temperature_to_xy(300)
        assert color_to_xy(ColorSpec(hex="#ff0000")) == pytest.approx(rgb_to_xy(1, 0, 0))

    def test_resolve_device_color(self):
        assert resolve_device_color(None) == {}
        assert resolve_device_color(ColorSpec(xy=(0.2, 0.3))) == {"xy": [0.2, 0.3]}
        assert resolve_device_color(ColorSpec(mirek=300)) == {"ct": 300}
        assert resolve_device_color(ColorSpec(hue=100, saturation=200)) == {"hue": 100, "sat": 200}

        xy = resolve_device_color(ColorSpec(hex="#0000ff"))["xy"]
        assert xy == pytest.approx(list(rgb_to_xy(0, 0, 1)))


class TestInterpolate:
    @pytest.mark.parametrize("t", [0.0, 0.1, 0.25, 0.5, 0.9, 1.0])
    def test_mirek_pairs_are_linear(self, t):
        result = interpolate_color(ColorSpec(mirek=500), ColorSpec(mirek=150), t)
        assert result == ColorSpec(mirek=round_half_up(500 - 350 * t))

    @pytest.mark.parametrize("t", [0.0, 0.3, 0.5, 1.0])
    def test_xy_pairs_are_linear(self, t):
        result = interpolate_color(ColorSpec(xy=(0.2, 0.6)), ColorSpec(xy=(0.6, 0.2)), t)
        assert result.xy == pytest.approx((0.2 + 0.4 * t, 0.6 - 0.4 * t))

    def test_mixed_types_blend_in_xy(self):
        a = ColorSpec(mirek=300)
        b = ColorSpec(hex="#ff0000")
        result = interpolate_color(a, b, 0.5)

        ax, ay = color_to_xy(a)
        bx, by = color_to_xy(b)
        assert result.xy == pytest.approx(((ax + bx) / 2, (ay + by) / 2))

    def test_missing_color_snaps(self):
        a = ColorSpec(mirek=300)
        assert interpolate_color(a, None, 0.49) == a
        assert interpolate_color(a, None, 0.5) is None
        assert interpolate_color(None, a, 0.7) == a

    def test_hs_snap_target_survives_resolution(self):
        hs = ColorSpec(hue=100, saturation=200)
        assert resolve_device_color(interpolate_color(None, hs, 1.0)) == {"hue": 100, "sat": 200}


class TestPreview:
    def test_white_round_trips_to_ffffff(self):
        x, y = rgb_to_xy(1, 1, 1)
        assert xy_to_preview_hex(x, y, 254) == "#ffffff"

    def test_zero_y_is_black(self):
        assert xy_to_preview_hex(0.3, 0.0, 254) == "#000000"

    def test_zero_brightness_is_black(self):
        assert xy_to_preview_hex(0.3, 0.3, 0) == "#000000"

    def test_format(self):
        hex_color = xy_to_preview_hex(0.675, 0.322, 254)
        assert re.fullmatch(r"#[0-9a-f]{6}", hex_color)
        # saturated red stays red
        assert int(hex_color[1:3], 16) > int(hex_color[3:5], 16)

    def test_preview_color(self):
        preview = preview_color(ColorSpec(mirek=366), brightness=200)
        assert preview.xy == color_temperature_to_xy(366)
        assert re.fullmatch(r"#[0-9a-f]{6}", preview.hex)

    def test_preview_without_color(self):
        preview = preview_color(None)
        assert preview.xy is None
        assert preview.hex == "#000000"


def test_round_half_up():
    assert round_half_up(127.5) == 128
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4999) == 2
