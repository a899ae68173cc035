"""Staged processing pipeline with progress reporting.

A run walks an ordered list of labelled steps, publishing a progress event
and awaiting the step delay before moving on. After the last step the
caller's ``produce`` callable builds the results. The session's
``is_processing`` flag is the advisory lock: it is checked and set without
an intervening ``await``, and always released when the run ends.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from vision_demo.core.detector import Classifier, Detector, check_threshold
from vision_demo.core.errors import ProcessingError
from vision_demo.core.types import (
    ClassificationResult,
    DetectionResult,
    PipelineStep,
    ProcessingSession,
    ProgressEvent,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

ProgressObserver = Callable[[ProgressEvent], None]
Sleep = Callable[[float], Awaitable[object]]

DETECTION_STEP_LABELS = (
    'Loading detection model...',
    'Preprocessing image...',
    'Running inference...',
    'Post-processing results...',
    'Filtering by confidence...',
)

CLASSIFICATION_STEP_LABELS = (
    'Loading classification model...',
    'Preprocessing image...',
    'Feature extraction...',
    'Running classification...',
    'Calculating probabilities...',
)


def build_steps(labels: Sequence[str], delay_ms: int) -> list[PipelineStep]:
    return [PipelineStep(label=label, delay_ms=delay_ms) for label in labels]


DETECTION_STEPS = build_steps(DETECTION_STEP_LABELS, 800)
CLASSIFICATION_STEPS = build_steps(CLASSIFICATION_STEP_LABELS, 700)


def can_start(session: ProcessingSession) -> bool:
    return session.active_image is not None and not session.is_processing


class StagedPipeline:
    def __init__(self, name: str, sleep: Sleep = asyncio.sleep) -> None:
        self.name = name
        self._sleep = sleep

    async def run(
        self,
        session: ProcessingSession,
        steps: Sequence[PipelineStep],
        produce: Callable[[], T],
        on_progress: ProgressObserver | None = None,
    ) -> T | None:
        """Run ``steps`` in order, then return ``produce()``.

        Returns ``None`` without touching the session when there is no active
        image or another run is in flight. Any failure is re-raised as
        :class:`ProcessingError` after the processing flag is released.
        """
        if not can_start(session):
            logger.debug(
                'pipeline skipped name=%s has_image=%s is_processing=%s',
                self.name,
                session.active_image is not None,
                session.is_processing,
            )
            return None

        session.is_processing = True
        total = len(steps)
        try:
            for index, step in enumerate(steps):
                event = ProgressEvent(
                    label=step.label,
                    progress=(index + 1) / total * 100,
                    index=index,
                    total=total,
                )
                session.last_progress = event
                if on_progress is not None:
                    on_progress(event)
                logger.debug('pipeline step name=%s step=%s/%s label=%s', self.name, index + 1, total, step.label)
                await self._sleep(step.delay_ms / 1000)
            result = produce()
        except Exception as exc:
            logger.exception('pipeline failed name=%s', self.name)
            raise ProcessingError(str(exc) or exc.__class__.__name__, details={'pipeline': self.name}) from exc
        finally:
            session.is_processing = False
            session.last_progress = None

        logger.info('pipeline completed name=%s steps=%s', self.name, total)
        return result


async def run_detection(
    session: ProcessingSession,
    detector: Detector,
    confidence_threshold: float,
    steps: Sequence[PipelineStep] = DETECTION_STEPS,
    on_progress: ProgressObserver | None = None,
    sleep: Sleep = asyncio.sleep,
) -> list[DetectionResult] | None:
    threshold = check_threshold(confidence_threshold)
    pipeline = StagedPipeline('detection', sleep=sleep)
    results = await pipeline.run(session, steps, lambda: detector.detect(threshold), on_progress)
    if results is None:
        return None
    session.detection_results = results
    session.models.detection = detector.model_id
    return results


async def run_classification(
    session: ProcessingSession,
    classifier: Classifier,
    steps: Sequence[PipelineStep] = CLASSIFICATION_STEPS,
    on_progress: ProgressObserver | None = None,
    sleep: Sleep = asyncio.sleep,
) -> list[ClassificationResult] | None:
    pipeline = StagedPipeline('classification', sleep=sleep)
    results = await pipeline.run(session, steps, classifier.classify, on_progress)
    if results is None:
        return None
    session.classification_results = results
    session.models.classification = classifier.model_id
    return results
