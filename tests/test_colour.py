import numpy as np
import pytest

from skintone.colour import (
    compute_hue_saturation_texture,
    correct_zero_response,
    hue_saturation_texture,
    log_response,
    to_chroma,
)
from skintone.grid import Grid
from skintone.types import rgb_array, to_greyscale


def _colours(rows) -> Grid:
    return Grid(rgb_array(np.array(rows, dtype=np.uint8)))


def test_greyscale_weights():
    colours = _colours([[(100, 100, 100), (255, 0, 0)]])
    grey = to_greyscale(colours.values)
    assert np.isclose(grey[0, 0], 99.99)
    assert np.isclose(grey[0, 1], 0.2989 * 255)


def test_correct_zero_response_subtracts_smallest_channel():
    corrected = correct_zero_response(_colours([[(10, 20, 30), (50, 60, 70)]]))
    assert tuple(corrected[0, 0]) == (0, 10, 20)
    assert tuple(corrected[1, 0]) == (40, 50, 60)


def test_chroma_of_grey_has_no_colour():
    chroma = to_chroma(_colours([[(0, 0, 0), (120, 120, 120)]]))
    black = chroma[0, 0]
    grey = chroma[1, 0]
    assert black["i"] == 0.0 and black["rg"] == 0.0 and black["by"] == 0.0
    assert np.isclose(grey["rg"], 0.0)
    assert np.isclose(grey["by"], 0.0)
    assert np.isclose(grey["i"], 105.0 * np.log10(121.0))


def test_chroma_of_skin_tone():
    chroma = to_chroma(_colours([[(220, 170, 140)]]))[0, 0]
    lr, lg, lb = (float(log_response(c)) for c in (220, 170, 140))
    assert np.isclose(chroma["rg"], lr - lg)
    assert np.isclose(chroma["by"], lb - (lg + lr) / 2)
    assert np.isclose(chroma["i"], (lr + lg + lb) / 3)


def test_hue_and_saturation_from_opponent_channels():
    rg = Grid(np.array([[1.0, 0.0]]))
    by = Grid(np.array([[0.0, -1.0]]))
    texture = Grid(np.array([[0.5, 2.0]]))
    samples = hue_saturation_texture(rg, by, texture)
    assert np.isclose(samples[0, 0]["hue"], 90.0)
    assert np.isclose(samples[0, 0]["saturation"], 1.0)
    assert np.isclose(samples[1, 0]["hue"], 180.0)
    assert samples[1, 0]["texture_amplitude"] == 2.0


def test_flat_image_has_no_texture():
    colours = _colours(np.full((12, 10, 3), (200, 150, 120), dtype=np.uint8))
    samples = compute_hue_saturation_texture(
        correct_zero_response(colours),
        scale=1,
        first_pass_multiplier=2,
        second_pass_multiplier=3,
        rgby_smoothen_multiplier=2,
    )
    assert samples.size == (10, 12)
    assert np.all(samples.values["texture_amplitude"] == 0.0)
    hues = samples.values["hue"]
    assert np.allclose(hues, hues[0, 0])


def test_pipeline_rejects_zero_scale():
    with pytest.raises(ValueError):
        compute_hue_saturation_texture(_colours([[(1, 2, 3)]]), 0, 2, 3, 2)
