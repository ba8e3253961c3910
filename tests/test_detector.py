"""
Tests for Hand Detection Module
================================
"""

import urllib.error
import pytest
import numpy as np
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from handpose_demo.detection import hand_detector
from handpose_demo.detection.hand_detector import (
    DEFAULT_MODEL_PATH,
    HandDetector,
    HandDetectorConfig,
    download_model,
)
from handpose_demo.errors import ModelLoadError, SetupError


def _mp_result(num_hands: int):
    """Fake HandLandmarkerResult with ``num_hands`` hands."""
    hand = [SimpleNamespace(x=i / 21, y=0.5, z=0.0) for i in range(21)]
    category = SimpleNamespace(category_name="Left", score=0.87)
    return SimpleNamespace(
        hand_landmarks=[hand] * num_hands,
        handedness=[[category]] * num_hands,
    )


class TestHandDetectorConfig:
    
    def test_defaults(self):
        config = HandDetectorConfig()
        assert config.model_path == ""
        assert config.running_mode == "VIDEO"
        assert config.min_detection_confidence == 0.5
    
    def test_from_dict(self):
        config = HandDetectorConfig.from_dict({
            "model_path": "/tmp/model.task",
            "min_detection_confidence": 0.7,
            "running_mode": "IMAGE",
        })
        assert config.model_path == "/tmp/model.task"
        assert config.min_detection_confidence == 0.7
        assert config.running_mode == "IMAGE"
        assert config.min_tracking_confidence == 0.5


class TestModelLoading:
    
    def test_existing_model_not_downloaded(self, tmp_path):
        model = tmp_path / "hand_landmarker.task"
        model.write_bytes(b"model")
        with patch.object(hand_detector.urllib.request, "urlretrieve") as retrieve:
            download_model("http://example.invalid/model", model)
        retrieve.assert_not_called()
    
    def test_download_failure_is_model_load_error(self, tmp_path):
        with patch.object(hand_detector.urllib.request, "urlretrieve",
                          side_effect=OSError("network down")):
            with pytest.raises(ModelLoadError):
                download_model("http://example.invalid/model", tmp_path / "m.task")
    
    def test_start_raises_when_download_fails(self, tmp_path):
        config = HandDetectorConfig(model_path=str(tmp_path / "missing.task"))
        detector = HandDetector(config)
        with patch.object(hand_detector.urllib.request, "urlretrieve",
                          side_effect=OSError("network down")):
            with pytest.raises(SetupError):
                detector.start()
        assert not detector.is_loaded
    
    def test_start_raises_when_model_invalid(self, tmp_path):
        model = tmp_path / "broken.task"
        model.write_bytes(b"not a model")
        detector = HandDetector(HandDetectorConfig(model_path=str(model)))
        with patch.object(hand_detector.vision.HandLandmarker, "create_from_options",
                          side_effect=RuntimeError("bad model")):
            with pytest.raises(ModelLoadError):
                detector.start()
    
    def test_start_success(self, tmp_path):
        model = tmp_path / "hand_landmarker.task"
        model.write_bytes(b"model")
        detector = HandDetector(HandDetectorConfig(model_path=str(model)))
        landmarker = MagicMock()
        with patch.object(hand_detector.vision.HandLandmarker, "create_from_options",
                          return_value=landmarker):
            detector.start()
        assert detector.is_loaded
        
        detector.stop()
        landmarker.close.assert_called_once()
        assert not detector.is_loaded
    
    def test_interrupted_download_leaves_no_file(self, tmp_path):
        target = tmp_path / "models" / "hand_landmarker.task"
        
        def short_read(url, filename):
            Path(filename).write_bytes(b"trunc")
            raise urllib.error.ContentTooShortError("retrieval incomplete", None)
        
        with patch.object(hand_detector.urllib.request, "urlretrieve",
                          side_effect=short_read):
            with pytest.raises(ModelLoadError):
                download_model("http://example.invalid/model", target)
        
        assert not target.exists()
        assert list(target.parent.iterdir()) == []
    
    def test_interrupted_download_can_be_retried(self, tmp_path):
        target = tmp_path / "hand_landmarker.task"
        
        def short_read(url, filename):
            Path(filename).write_bytes(b"trunc")
            raise urllib.error.ContentTooShortError("retrieval incomplete", None)
        
        def full_read(url, filename):
            Path(filename).write_bytes(b"model")
        
        attempts = iter([short_read, full_read])
        with patch.object(hand_detector.urllib.request, "urlretrieve",
                          side_effect=lambda url, filename: next(attempts)(url, filename)) as retrieve:
            with pytest.raises(ModelLoadError):
                download_model("http://example.invalid/model", target)
            download_model("http://example.invalid/model", target)
        
        assert retrieve.call_count == 2
        assert target.read_bytes() == b"model"
        assert not target.with_suffix(".task.part").exists()
    
    def test_default_model_path_follows_working_directory(self, tmp_path, monkeypatch):
        assert not DEFAULT_MODEL_PATH.is_absolute()
        monkeypatch.chdir(tmp_path)
        model = tmp_path / DEFAULT_MODEL_PATH
        model.parent.mkdir(parents=True)
        model.write_bytes(b"model")
        
        detector = HandDetector(HandDetectorConfig())
        with patch.object(hand_detector.urllib.request, "urlretrieve") as retrieve, \
                patch.object(hand_detector.vision.HandLandmarker, "create_from_options",
                             return_value=MagicMock()):
            detector.start()
        
        retrieve.assert_not_called()
        assert detector.is_loaded


class TestDetect:
    
    @pytest.fixture
    def detector(self):
        detector = HandDetector(HandDetectorConfig())
        detector._landmarker = MagicMock()
        with patch.object(hand_detector, "mp"):
            yield detector
    
    def test_not_started_returns_empty(self):
        detector = HandDetector()
        assert detector.detect(np.zeros((480, 640, 3), dtype=np.uint8)) == []
    
    def test_no_hand(self, detector):
        detector._landmarker.detect_for_video.return_value = _mp_result(0)
        assert detector.detect(np.zeros((480, 640, 3), dtype=np.uint8)) == []
    
    def test_one_hand(self, detector):
        detector._landmarker.detect_for_video.return_value = _mp_result(1)
        
        hands = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))
        
        assert len(hands) == 1
        hand = hands[0]
        assert len(hand) == 21
        assert hand.handedness == "Left"
        assert hand.confidence == pytest.approx(0.87)
        assert (hand.image_width, hand.image_height) == (640, 480)
    
    def test_at_most_one_hand(self, detector):
        detector._landmarker.detect_for_video.return_value = _mp_result(2)
        assert len(detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))) == 1
    
    def test_video_timestamps_increase(self, detector):
        detector._landmarker.detect_for_video.return_value = _mp_result(0)
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        
        detector.detect(image)
        detector.detect(image)
        
        stamps = [c.args[1] for c in detector._landmarker.detect_for_video.call_args_list]
        assert stamps[0] < stamps[1]
    
    def test_image_mode(self, detector):
        detector.config.running_mode = "IMAGE"
        detector._landmarker.detect.return_value = _mp_result(1)
        
        assert len(detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))) == 1
        detector._landmarker.detect_for_video.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
