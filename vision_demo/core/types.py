import base64
from dataclasses import dataclass, field
from typing import Any

BBox = tuple[float, float, float, float]


@dataclass(frozen=True)
class ImageRef:
    content: bytes
    file_name: str
    byte_size: int
    mime_type: str

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.content).decode('ascii')
        return f'data:{self.mime_type};base64,{encoded}'


@dataclass
class DetectionResult:
    class_label: str
    confidence: float
    bbox: BBox
    model_id: str
    timestamp: str


@dataclass
class ClassificationResult:
    class_label: str
    confidence: float
    model_id: str
    timestamp: str


@dataclass(frozen=True)
class PipelineStep:
    label: str
    delay_ms: int


@dataclass(frozen=True)
class ProgressEvent:
    label: str
    progress: float
    index: int
    total: int


@dataclass
class ModelSelection:
    detection: str = 'yolo'
    classification: str = 'resnet'


@dataclass
class ProcessingSession:
    active_image: ImageRef | None = None
    detection_results: list[DetectionResult] = field(default_factory=list)
    classification_results: list[ClassificationResult] = field(default_factory=list)
    is_processing: bool = False
    models: ModelSelection = field(default_factory=ModelSelection)
    last_progress: ProgressEvent | None = None
    analysis: dict[str, Any] = field(default_factory=dict)
