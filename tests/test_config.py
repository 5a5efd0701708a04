from pathlib import Path

import pytest

from skintone.config import DetectorConfig, calculate_scale, config_from_dict, load_detector_config
from skintone.region_filter import filter_face_regions


def test_defaults():
    config = DetectorConfig()
    assert config.maximum_image_dimension == 200
    assert config.texture_amplitude_first_pass_multiplier == 2
    assert config.texture_amplitude_second_pass_multiplier == 3
    assert config.rgby_smoothen_multiplier == 2
    assert config.number_of_relaxed_expansions == 2
    assert config.percent_to_expand_final_region_by == 0.13
    assert config.aspect_ratio_filter is filter_face_regions
    assert config.calculate_scale(200, 150) == 2
    assert not config.save_progress_images


def test_calculate_scale_validates_dimensions():
    with pytest.raises(ValueError):
        calculate_scale(0, 10)
    with pytest.raises(ValueError):
        calculate_scale(10, -1)


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        DetectorConfig(maximum_image_dimension=0)
    with pytest.raises(ValueError):
        DetectorConfig(number_of_relaxed_expansions=-1)
    with pytest.raises(ValueError):
        DetectorConfig(percent_to_expand_final_region_by=-0.5)


def test_config_from_dict_overrides_and_skips_none():
    base = DetectorConfig(number_of_relaxed_expansions=5)
    config = config_from_dict(
        {"maximum_image_dimension": "300", "number_of_relaxed_expansions": None, "progress_image_dir": "tmp/progress"},
        base=base,
    )
    assert config.maximum_image_dimension == 300
    assert config.number_of_relaxed_expansions == 5
    assert config.progress_image_dir == Path("tmp/progress")


def test_config_from_dict_rejects_unknown_and_callable_keys():
    with pytest.raises(ValueError):
        config_from_dict({"max_dim": 100})
    with pytest.raises(ValueError):
        config_from_dict({"strict_skin_filter": "anything"})


def test_load_detector_config_reads_section(tmp_path):
    path = tmp_path / "detector.yaml"
    path.write_text("detector:\n  maximum_image_dimension: 320\n  percent_to_expand_final_region_by: 0.2\n")
    config = load_detector_config(path)
    assert config.maximum_image_dimension == 320
    assert config.percent_to_expand_final_region_by == 0.2
    assert config.number_of_relaxed_expansions == 2


def test_load_detector_config_accepts_flat_file(tmp_path):
    path = tmp_path / "flat.yaml"
    path.write_text("number_of_relaxed_expansions: 4\n")
    assert load_detector_config(path).number_of_relaxed_expansions == 4
    assert load_detector_config(None) == DetectorConfig()


def test_shipped_config_matches_defaults():
    shipped = Path(__file__).resolve().parents[1] / "configs" / "detector.yaml"
    config = load_detector_config(shipped)
    assert config.maximum_image_dimension == DetectorConfig().maximum_image_dimension
    assert config.percent_to_expand_final_region_by == DetectorConfig().percent_to_expand_final_region_by
