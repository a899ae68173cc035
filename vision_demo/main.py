import logging
import random
import time
import uuid

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from vision_demo.config import get_settings
from vision_demo.core.analysis import PERFORMANCE_STATS, analyze_image, format_file_size, processing_summary
from vision_demo.core.detector import create_classifier, create_detector
from vision_demo.core.errors import InvalidInputError, PlatformError, ProcessingError
from vision_demo.core.export import EXPORT_FORMATS, to_csv, to_json, to_report_html
from vision_demo.core.ingest import load_image_ref
from vision_demo.core.pipeline import (
    CLASSIFICATION_STEP_LABELS,
    DETECTION_STEP_LABELS,
    build_steps,
    run_classification,
    run_detection,
)
from vision_demo.core.render import render_detections, render_feature_points, render_predictions_chart
from vision_demo.core.surface import rasterize
from vision_demo.core.types import ClassificationResult, DetectionResult, ProcessingSession, ProgressEvent
from vision_demo.logging_setup import setup_logging
from vision_demo.schemas import (
    AnalysisResponse,
    ClassificationOut,
    ClassifyResponse,
    DetectionOut,
    DetectResponse,
    ErrorResponse,
    HealthResponse,
    ImageInfoResponse,
    NotificationOut,
    ProgressOut,
    ResultsResponse,
    StatusResponse,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger('vision_demo')

app = FastAPI(title='Vision Demo Platform', version=settings.version)
started_at = time.time()

NO_DETECTIONS_MESSAGE = 'No objects detected with current confidence threshold.'


@app.on_event('startup')
def startup_event() -> None:
    session = ProcessingSession()
    session.models.detection = settings.detection_model
    session.models.classification = settings.classification_model
    app.state.session = session
    logger.info(
        'Vision demo initialized detection_model=%s classification_model=%s detection_delay_ms=%s classification_delay_ms=%s',
        settings.detection_model,
        settings.classification_model,
        settings.detection_step_delay_ms,
        settings.classification_step_delay_ms,
    )


def _session() -> ProcessingSession:
    return app.state.session


def _request_id(request: Request) -> str:
    return request.headers.get('x-request-id') or str(uuid.uuid4())


def _log_progress(event: ProgressEvent) -> None:
    logger.debug('progress label=%s progress=%.1f', event.label, event.progress)


def _detection_out(row: DetectionResult) -> DetectionOut:
    return DetectionOut(
        label=row.class_label,
        confidence=row.confidence,
        bbox=list(row.bbox),
        model=row.model_id,
        timestamp=row.timestamp,
    )


def _classification_out(rows: list[ClassificationResult]) -> list[ClassificationOut]:
    return [
        ClassificationOut(
            rank=index + 1,
            label=row.class_label,
            confidence=row.confidence,
            model=row.model_id,
            timestamp=row.timestamp,
        )
        for index, row in enumerate(rows)
    ]


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    payload = ErrorResponse(
        error=exc.code,
        message=exc.message,
        request_id=_request_id(request),
        notification=NotificationOut(message=exc.message, severity='error'),
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.exception('Unhandled exception request_id=%s', request_id)
    payload = ErrorResponse(
        error='UNEXPECTED_SERVER_ERROR',
        message='Unexpected server error.',
        request_id=request_id,
        notification=NotificationOut(message='Unexpected server error.', severity='error'),
    )
    return JSONResponse(status_code=500, content=payload.model_dump())


@app.get('/health', response_model=HealthResponse)
def health():
    return HealthResponse(
        ok=True,
        version=settings.version,
        detection_model=settings.detection_model,
        classification_model=settings.classification_model,
        uptime_s=round(time.time() - started_at, 3),
    )


@app.post('/image', response_model=ImageInfoResponse)
async def upload_image(image: UploadFile = File(...)):
    content = await image.read()
    image_ref = load_image_ref(image.filename, content, image.content_type, settings.max_image_bytes)
    _session().active_image = image_ref
    logger.info('image uploaded name=%s bytes=%s type=%s', image_ref.file_name, image_ref.byte_size, image_ref.mime_type)
    return ImageInfoResponse(
        file_name=image_ref.file_name,
        size_bytes=image_ref.byte_size,
        size_text=format_file_size(image_ref.byte_size),
        mime_type=image_ref.mime_type,
        data_uri=image_ref.data_uri,
        notification=NotificationOut(message=f'Loaded {image_ref.file_name}', severity='success'),
    )


@app.post('/detect', response_model=DetectResponse)
async def detect(
    request: Request,
    confidence_threshold: float | None = Form(default=None),
    model: str | None = Form(default=None),
):
    request_id = _request_id(request)
    session = _session()
    threshold = settings.confidence_threshold if confidence_threshold is None else confidence_threshold
    detector = create_detector(model or session.models.detection)
    steps = build_steps(DETECTION_STEP_LABELS, settings.detection_step_delay_ms)

    try:
        results = await run_detection(session, detector, threshold, steps=steps, on_progress=_log_progress)
    except ProcessingError as exc:
        raise ProcessingError(f'Detection failed: {exc.message}', details=exc.details) from exc

    if results is None:
        logger.info('detect skipped request_id=%s has_image=%s', request_id, session.active_image is not None)
        return DetectResponse(ran=False, model=detector.model_id, confidence_threshold=threshold)

    logger.info(
        'detect request_id=%s model=%s threshold=%s detections=%s',
        request_id,
        detector.model_id,
        threshold,
        len(results),
    )
    return DetectResponse(
        ran=True,
        model=detector.model_id,
        confidence_threshold=threshold,
        detections=[_detection_out(row) for row in results],
        message=None if results else NO_DETECTIONS_MESSAGE,
        notification=NotificationOut(message=f'Detected {len(results)} objects', severity='success'),
    )


@app.post('/classify', response_model=ClassifyResponse)
async def classify(request: Request, model: str | None = Form(default=None)):
    request_id = _request_id(request)
    session = _session()
    classifier = create_classifier(model or session.models.classification)
    steps = build_steps(CLASSIFICATION_STEP_LABELS, settings.classification_step_delay_ms)

    try:
        results = await run_classification(session, classifier, steps=steps, on_progress=_log_progress)
    except ProcessingError as exc:
        raise ProcessingError(f'Classification failed: {exc.message}', details=exc.details) from exc

    if results is None:
        logger.info('classify skipped request_id=%s has_image=%s', request_id, session.active_image is not None)
        return ClassifyResponse(ran=False, model=classifier.model_id)

    logger.info('classify request_id=%s model=%s results=%s', request_id, classifier.model_id, len(results))
    return ClassifyResponse(
        ran=True,
        model=classifier.model_id,
        results=_classification_out(results),
        notification=NotificationOut(message='Classification complete', severity='success'),
    )


@app.get('/status', response_model=StatusResponse)
def status():
    session = _session()
    event = session.last_progress
    return StatusResponse(
        is_processing=session.is_processing,
        has_image=session.active_image is not None,
        progress=(
            ProgressOut(label=event.label, progress=event.progress, step=event.index + 1, total=event.total)
            if event
            else None
        ),
    )


@app.get('/results', response_model=ResultsResponse)
def results():
    session = _session()
    return ResultsResponse(
        summary=processing_summary(session),
        performance=dict(PERFORMANCE_STATS),
        detections=[_detection_out(row) for row in session.detection_results],
        classifications=_classification_out(session.classification_results),
    )


@app.get('/analysis', response_model=AnalysisResponse)
def analysis():
    payload = analyze_image(_session())
    return AnalysisResponse(**payload)


@app.get('/canvas/{name}.png')
def canvas(name: str):
    session = _session()
    if name == 'detection':
        commands = render_detections(session.detection_results)
    elif name == 'predictions':
        commands = render_predictions_chart(session.classification_results)
    elif name == 'features':
        commands = render_feature_points(random.Random(), count=settings.feature_point_count)
    else:
        raise InvalidInputError('UNKNOWN_CANVAS', f'Unknown canvas {name!r}.')
    return Response(content=rasterize(commands).to_png(), media_type='image/png')


@app.get('/export/{fmt}')
def export(fmt: str):
    export_format = EXPORT_FORMATS.get(fmt)
    if export_format is None:
        raise InvalidInputError(
            'UNKNOWN_EXPORT_FORMAT',
            f'Unsupported export format {fmt!r}.',
            details={'supported': sorted(EXPORT_FORMATS)},
        )

    session = _session()
    if fmt == 'json':
        content: str | bytes = to_json(session)
        message = 'Results exported as JSON'
    elif fmt == 'csv':
        content = to_csv(session)
        message = 'Results exported as CSV'
    elif fmt == 'image':
        content = rasterize(render_detections(session.detection_results)).to_png()
        message = 'Annotated image exported'
    else:
        content = to_report_html(session, title=settings.report_title, author=settings.report_author)
        message = 'Comprehensive report exported'

    logger.info('export format=%s filename=%s', fmt, export_format.filename)
    return Response(
        content=content,
        media_type=export_format.media_type,
        headers={
            'Content-Disposition': f'attachment; filename="{export_format.filename}"',
            'X-Notification': message,
        },
    )


def serve() -> None:
    """Run with a single worker; the session lives in process memory."""
    uvicorn.run(app, host=settings.host, port=settings.port, workers=1)
