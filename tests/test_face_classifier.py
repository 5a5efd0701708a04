import logging

import numpy as np
import pytest

pytest.importorskip("cv2")

from skintone.classifier.codec import save_model
from skintone.classifier.face_classifier import FaceClassifier
from skintone.classifier.svm import SupportVectorMachine
from skintone.imaging import downscaled_size, extract_section_and_resize, resize_rgb
from skintone.types import Rectangle


def _ones_svm(inputs: int, threshold: float) -> SupportVectorMachine:
    return SupportVectorMachine.from_lists(inputs, [[1.0] * inputs], [1.0], threshold)


def test_extract_section_and_resize_shape():
    pixels = np.full((60, 80, 3), 120, dtype=np.uint8)
    sample = extract_section_and_resize(pixels, Rectangle(10, 10, 30, 30), (32, 32))
    assert sample.shape == (32, 32, 3)
    assert np.all(sample == 120)


def test_extract_section_letterboxes_when_region_cannot_grow():
    pixels = np.full((100, 40, 3), 255, dtype=np.uint8)
    sample = extract_section_and_resize(pixels, Rectangle(0, 0, 40, 10), (32, 32))
    assert sample.shape == (32, 32, 3)
    assert np.all(sample[0] == 0)
    assert np.all(sample[16] == 255)


def test_extract_section_rejects_regions_outside_image():
    pixels = np.zeros((20, 20, 3), dtype=np.uint8)
    with pytest.raises(ValueError):
        extract_section_and_resize(pixels, Rectangle(10, 10, 20, 20), (8, 8))
    with pytest.raises(ValueError):
        extract_section_and_resize(pixels, Rectangle(0, 0, 0, 5), (8, 8))


def test_resize_helpers():
    pixels = np.zeros((40, 60, 3), dtype=np.uint8)
    assert resize_rgb(pixels, (30, 20)).shape == (20, 30, 3)
    assert downscaled_size((401, 300), 2) == (200, 150)
    with pytest.raises(ValueError):
        downscaled_size((10, 10), 0)


def test_model_input_count_must_match_sample_layout():
    with pytest.raises(ValueError):
        FaceClassifier(_ones_svm(10, 0.0), sample_size=(16, 16), cell_size=8)


def test_is_face_on_flat_sample():
    sample = np.full((16, 16, 3), 90, dtype=np.uint8)
    # flat samples normalise to 1/9 per bin: 36 inputs sum to 4
    assert FaceClassifier(_ones_svm(36, -3.5), sample_size=(16, 16)).is_face(sample)
    assert not FaceClassifier(_ones_svm(36, -4.5), sample_size=(16, 16)).is_face(sample)


def test_classify_regions_scores_each_region():
    pixels = np.full((64, 64, 3), 140, dtype=np.uint8)
    classifier = FaceClassifier(_ones_svm(36, -3.5), sample_size=(16, 16))
    regions = [Rectangle(0, 0, 32, 32), Rectangle(10, 10, 20, 20)]
    results = classifier.classify_regions(pixels, regions)
    assert [region for region, _, _ in results] == regions
    assert all(score == pytest.approx(0.5) for _, score, _ in results)
    assert all(is_face for _, _, is_face in results)


def test_from_file(tmp_path):
    svm = SupportVectorMachine.from_lists(36, [[0.1] * 36], [0.5], -0.01)
    path = tmp_path / "face.svm"
    save_model(path, svm)
    classifier = FaceClassifier.from_file(path, sample_size=(16, 16), cell_size=8)
    assert classifier.svm.number_of_inputs == 36
    assert classifier.sample_size == (16, 16)


def test_letterboxing_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="skintone.imaging")
    pixels = np.full((100, 40, 3), 255, dtype=np.uint8)
    extract_section_and_resize(pixels, Rectangle(0, 0, 40, 10), (32, 32))
    assert "Letterboxed" in caplog.text
    caplog.clear()
    extract_section_and_resize(pixels, Rectangle(0, 0, 40, 40), (32, 32))
    assert "Letterboxed" not in caplog.text
