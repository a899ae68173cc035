from vision_demo.core.detector import Classifier, Detector, check_threshold
from vision_demo.core.mock_catalog import generate_classifications, generate_detections
from vision_demo.core.types import ClassificationResult, DetectionResult


class MockDetector(Detector):
    def __init__(self, model_id: str = 'yolo') -> None:
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    def detect(self, confidence_threshold: float) -> list[DetectionResult]:
        return generate_detections(check_threshold(confidence_threshold), self.model_id)


class MockClassifier(Classifier):
    def __init__(self, model_id: str = 'resnet') -> None:
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    def classify(self) -> list[ClassificationResult]:
        return generate_classifications(self.model_id)
