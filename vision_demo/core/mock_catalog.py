from datetime import datetime, timezone

from vision_demo.core.types import BBox, ClassificationResult, DetectionResult

DETECTION_CATALOG: tuple[tuple[str, float, BBox], ...] = (
    ('person', 0.95, (100, 50, 200, 300)),
    ('car', 0.87, (300, 200, 500, 350)),
    ('dog', 0.78, (150, 250, 250, 350)),
    ('bicycle', 0.65, (50, 100, 150, 250)),
    ('tree', 0.72, (400, 50, 600, 300)),
)

CLASSIFICATION_CATALOG: tuple[tuple[str, float], ...] = (
    ('Golden Retriever', 0.89),
    ('Labrador', 0.76),
    ('German Shepherd', 0.65),
    ('Beagle', 0.43),
    ('Bulldog', 0.32),
)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def generate_detections(confidence_threshold: float, model_id: str) -> list[DetectionResult]:
    timestamp = utc_timestamp()
    return [
        DetectionResult(
            class_label=label,
            confidence=confidence,
            bbox=bbox,
            model_id=model_id,
            timestamp=timestamp,
        )
        for label, confidence, bbox in DETECTION_CATALOG
        if confidence >= confidence_threshold
    ]


def generate_classifications(model_id: str) -> list[ClassificationResult]:
    timestamp = utc_timestamp()
    return [
        ClassificationResult(class_label=label, confidence=confidence, model_id=model_id, timestamp=timestamp)
        for label, confidence in CLASSIFICATION_CATALOG
    ]
