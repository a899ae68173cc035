from abc import ABC, abstractmethod

from vision_demo.core.errors import InvalidInputError
from vision_demo.core.types import ClassificationResult, DetectionResult

DETECTION_MODELS = ('yolo', 'ssd', 'faster-rcnn')
CLASSIFICATION_MODELS = ('resnet', 'efficientnet', 'vit')


class Detector(ABC):
    @abstractmethod
    def detect(self, confidence_threshold: float) -> list[DetectionResult]:
        raise NotImplementedError

    @property
    @abstractmethod
    def model_id(self) -> str:
        raise NotImplementedError


class Classifier(ABC):
    @abstractmethod
    def classify(self) -> list[ClassificationResult]:
        raise NotImplementedError

    @property
    @abstractmethod
    def model_id(self) -> str:
        raise NotImplementedError


def check_threshold(confidence_threshold: float) -> float:
    threshold = float(confidence_threshold)
    if not 0.0 <= threshold <= 1.0:
        raise InvalidInputError(
            'INVALID_THRESHOLD',
            f'Confidence threshold must be between 0 and 1, got {confidence_threshold}.',
        )
    return threshold


def _normalize_model(model_id: str, known: tuple[str, ...], kind: str) -> str:
    normalized = (model_id or '').strip().lower()
    if normalized not in known:
        raise InvalidInputError(
            'UNKNOWN_MODEL',
            f'Unsupported {kind} model {model_id!r}.',
            details={'supported': list(known)},
        )
    return normalized


def create_detector(model_id: str) -> Detector:
    from vision_demo.providers.mock_provider import MockDetector

    return MockDetector(model_id=_normalize_model(model_id, DETECTION_MODELS, 'detection'))


def create_classifier(model_id: str) -> Classifier:
    from vision_demo.providers.mock_provider import MockClassifier

    return MockClassifier(model_id=_normalize_model(model_id, CLASSIFICATION_MODELS, 'classification'))
