import numpy as np
import pytest

pytest.importorskip("cv2")

from skintone.config import DetectorConfig
from skintone.detector import SkinToneFaceDetector, detect_face_regions
from skintone.types import Rectangle

SKIN = (220, 170, 140)


def _synthetic_face(size: int = 120, factor: int = 1) -> np.ndarray:
    """Skin coloured square with a dark 'eye' hole on a black background."""
    pixels = np.zeros((size, size, 3), dtype=np.uint8)
    start, side = 30 * factor, 60 * factor
    pixels[start : start + side, start : start + side] = SKIN
    hole_x, hole_y, hole = 56 * factor, 50 * factor, 8 * factor
    pixels[hole_y : hole_y + hole, hole_x : hole_x + hole] = 0
    return pixels


def test_black_image_has_no_regions():
    assert detect_face_regions(np.zeros((64, 64, 3), dtype=np.uint8)) == []


def test_skin_blob_with_hole_is_found_and_padded():
    regions = detect_face_regions(_synthetic_face())
    # 60px face grown by round(60 * 0.13) = 8 pixels in each dimension
    assert regions == [Rectangle(26, 26, 68, 68)]


def test_skin_blob_without_hole_is_ignored():
    pixels = np.zeros((120, 120, 3), dtype=np.uint8)
    pixels[30:90, 30:90] = SKIN
    assert detect_face_regions(pixels) == []


def test_large_images_are_downscaled_and_regions_mapped_back():
    regions = detect_face_regions(_synthetic_face(size=240, factor=2), DetectorConfig(maximum_image_dimension=120))
    assert regions == [Rectangle(52, 52, 136, 136)]


def test_progress_messages_are_reported():
    messages = []
    detector = SkinToneFaceDetector(DetectorConfig(), progress=messages.append)
    detector.get_possible_face_regions(_synthetic_face())
    assert messages[0] == "Loaded pixel colour data"
    assert messages[-1].startswith("Complete - 1 region(s) identified")
    assert any(m.startswith("Expanded initial skin mask") for m in messages)


def test_progress_images_are_written(tmp_path):
    config = DetectorConfig(save_progress_images=True, progress_image_dir=tmp_path)
    detect_face_regions(_synthetic_face(), config)
    written = {p.name for p in tmp_path.iterdir()}
    assert {
        "SkinMaskGeneration-Hue.png",
        "SkinMaskGeneration-Saturation.png",
        "SkinMaskGeneration-TextureAmplitude.png",
        "SkinMask1.png",
        "SkinMask2.png",
        "SkinMask3.png",
        "SkinObjects.png",
    } <= written


def test_custom_policies_are_used():
    config = DetectorConfig(aspect_ratio_filter=lambda regions: [], percent_to_expand_final_region_by=0.0)
    assert detect_face_regions(_synthetic_face(), config) == []

    unpadded = detect_face_regions(_synthetic_face(), DetectorConfig(percent_to_expand_final_region_by=0.0))
    assert unpadded == [Rectangle(30, 30, 60, 60)]


def test_detector_requires_config():
    with pytest.raises(ValueError):
        SkinToneFaceDetector(None)
