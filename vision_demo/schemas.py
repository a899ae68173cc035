from typing import Literal

from pydantic import BaseModel, Field

Severity = Literal['info', 'success', 'error']


class NotificationOut(BaseModel):
    message: str
    severity: Severity = 'info'
    dismiss_after_ms: int = 3000


class DetectionOut(BaseModel):
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    bbox: list[float]
    model: str
    timestamp: str


class ClassificationOut(BaseModel):
    rank: int = Field(ge=1)
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    model: str
    timestamp: str


class ProgressOut(BaseModel):
    label: str
    progress: float = Field(ge=0.0, le=100.0)
    step: int
    total: int


class ImageInfoResponse(BaseModel):
    ok: bool = True
    file_name: str
    size_bytes: int
    size_text: str
    mime_type: str
    data_uri: str
    status: str = 'Ready for processing'
    notification: NotificationOut | None = None


class DetectResponse(BaseModel):
    ok: bool = True
    ran: bool
    model: str
    confidence_threshold: float
    detections: list[DetectionOut] = []
    message: str | None = None
    notification: NotificationOut | None = None


class ClassifyResponse(BaseModel):
    ok: bool = True
    ran: bool
    model: str
    results: list[ClassificationOut] = []
    notification: NotificationOut | None = None


class StatusResponse(BaseModel):
    ok: bool = True
    is_processing: bool
    has_image: bool
    progress: ProgressOut | None = None


class ResultsResponse(BaseModel):
    ok: bool = True
    summary: dict
    performance: dict[str, str]
    detections: list[DetectionOut] = []
    classifications: list[ClassificationOut] = []


class AnalysisResponse(BaseModel):
    ok: bool = True
    colors: dict
    features: dict
    metrics: list[dict[str, str]]


class HealthResponse(BaseModel):
    ok: bool
    version: str
    detection_model: str
    classification_model: str
    uptime_s: float


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
    request_id: str | None = None
    notification: NotificationOut | None = None
