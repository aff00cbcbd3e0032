import numpy as np
import pytest

from hslcombine.colorspace import (
    FIXED_MAX,
    HSLColor,
    brightness,
    clamp01,
    hsl_to_rgb,
    hue_step,
    hue_to_rgb,
    scale_to_16bit,
    to_8bit,
)


def test_clamp01_limits():
    np.testing.assert_array_equal(clamp01([-0.5, 0.0, 0.25, 1.0, 3.0]), [0.0, 0.0, 0.25, 1.0, 1.0])


@pytest.mark.parametrize(
    "value, expected",
    [(0.0, 0), (1.0, FIXED_MAX), (2.5, FIXED_MAX), (-1.0, 0), (0.5, 32767)],
)
def test_scale_to_16bit_clamps_and_truncates(value, expected):
    assert int(scale_to_16bit(value)) == expected


def test_to_8bit_drops_low_byte():
    np.testing.assert_array_equal(to_8bit([0, 255, 256, 32896, FIXED_MAX]), [0, 0, 1, 128, 255])


def test_brightness_averages_rgb_and_ignores_alpha():
    colors = np.array(
        [
            [FIXED_MAX, FIXED_MAX, FIXED_MAX, 0],
            [0, 0, 0, FIXED_MAX],
            [FIXED_MAX, 0, 0, FIXED_MAX],
        ],
        dtype=np.uint16,
    )
    np.testing.assert_allclose(brightness(colors), [1.0, 0.0, 1.0 / 3.0])


def test_brightness_rejects_wrong_channel_count():
    with pytest.raises(ValueError):
        brightness(np.zeros((2, 2), dtype=np.uint16))


def test_hue_to_rgb_primaries():
    np.testing.assert_allclose(hue_to_rgb(0.0), [1.0, 0.0, 0.0])
    np.testing.assert_allclose(hue_to_rgb(1.0 / 3.0), [0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(hue_to_rgb(2.0 / 3.0), [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(hue_to_rgb(1.0), [1.0, 0.0, 0.0])


def test_zero_saturation_is_gray_regardless_of_hue():
    hsl = np.array([[h, 0, 40000] for h in (0, 12345, 40000, FIXED_MAX)], dtype=np.uint16)
    rgb = hsl_to_rgb(hsl).astype(int)
    assert np.all(np.abs(rgb - 40000) <= 1)


def test_saturated_red():
    red = HSLColor.from_fractions(0.0, 1.0, 0.5)
    r, g, b, a = red.rgba()
    assert to_8bit([r, g, b]).tolist() == [255, 0, 0]
    assert a == FIXED_MAX


def test_luminosity_extremes():
    assert HSLColor(20000, FIXED_MAX, 0).rgba() == (0, 0, 0, FIXED_MAX)
    assert HSLColor(20000, FIXED_MAX, FIXED_MAX).rgba() == (FIXED_MAX, FIXED_MAX, FIXED_MAX, FIXED_MAX)


def test_luminosity_survives_conversion_within_one_step():
    rng = np.random.default_rng(7)
    hsl = rng.integers(0, FIXED_MAX + 1, size=(500, 3)).astype(np.uint16)

    rgb = hsl_to_rgb(hsl).astype(np.int64)
    lightness = (rgb.max(axis=1) + rgb.min(axis=1)) / 2.0

    assert np.all(np.abs(lightness - hsl[:, 2]) <= 1.0)


def test_hsl_to_rgb_keeps_leading_shape():
    assert hsl_to_rgb(np.zeros((4, 5, 3), dtype=np.uint16)).shape == (4, 5, 3)


@pytest.mark.parametrize(
    "amount, expected",
    [(0.0, 0), (1.0, 0), (0.5, 32768), (0.25, 16384), (1.0 / 65536, 1)],
)
def test_hue_step(amount, expected):
    assert hue_step(amount) == expected


def test_hsl_color_string_and_components():
    color = HSLColor(0, FIXED_MAX, 0)
    assert color.components() == (0.0, 1.0, 0.0)
    assert str(color) == "(0.000000, 1.000000, 0.000000)"


def test_hsl_color_defaults_to_black():
    assert HSLColor().rgba() == (0, 0, 0, FIXED_MAX)
