import asyncio

import pytest

from vision_demo.core.detector import create_classifier, create_detector
from vision_demo.core.errors import InvalidInputError, ProcessingError
from vision_demo.core.pipeline import (
    CLASSIFICATION_STEPS,
    DETECTION_STEPS,
    StagedPipeline,
    build_steps,
    run_classification,
    run_detection,
)
from vision_demo.core.types import ImageRef, ProcessingSession


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_session(with_image: bool = True) -> ProcessingSession:
    session = ProcessingSession()
    if with_image:
        session.active_image = ImageRef(content=b'\x89PNG', file_name='street.png', byte_size=4, mime_type='image/png')
    return session


def test_default_step_tables():
    assert len(DETECTION_STEPS) == 5
    assert {step.delay_ms for step in DETECTION_STEPS} == {800}
    assert DETECTION_STEPS[0].label == 'Loading detection model...'
    assert len(CLASSIFICATION_STEPS) == 5
    assert {step.delay_ms for step in CLASSIFICATION_STEPS} == {700}


def test_run_publishes_one_event_per_step_and_ends_at_100():
    session = make_session()
    sleep = RecordingSleep()
    events = []
    steps = build_steps(['a', 'b', 'c'], 250)

    result = asyncio.run(StagedPipeline('test', sleep=sleep).run(session, steps, lambda: 'done', events.append))

    assert result == 'done'
    assert [event.label for event in events] == ['a', 'b', 'c']
    progress = [event.progress for event in events]
    assert progress == sorted(set(progress))
    assert progress[-1] == 100.0
    assert progress[0] == pytest.approx(100 / 3)
    assert sleep.calls == [0.25, 0.25, 0.25]


def test_processing_flag_is_held_during_run_and_released_after():
    session = make_session()
    seen = []

    def observe(_event):
        seen.append(session.is_processing)

    assert session.is_processing is False
    asyncio.run(StagedPipeline('test', sleep=RecordingSleep()).run(session, DETECTION_STEPS, lambda: [], observe))

    assert seen == [True] * 5
    assert session.is_processing is False
    assert session.last_progress is None


def test_failure_releases_flag_and_raises_processing_error():
    session = make_session()

    def explode():
        raise RuntimeError('model crashed')

    with pytest.raises(ProcessingError) as exc_info:
        asyncio.run(StagedPipeline('test', sleep=RecordingSleep()).run(session, DETECTION_STEPS, explode))

    assert exc_info.value.message == 'model crashed'
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert session.is_processing is False

    result = asyncio.run(StagedPipeline('test', sleep=RecordingSleep()).run(session, DETECTION_STEPS, lambda: 'ok'))
    assert result == 'ok'


def test_run_without_image_is_a_silent_noop():
    session = make_session(with_image=False)
    calls = []

    result = asyncio.run(
        StagedPipeline('test', sleep=RecordingSleep()).run(session, DETECTION_STEPS, lambda: calls.append('x'))
    )

    assert result is None
    assert calls == []
    assert session.is_processing is False


def test_run_while_processing_is_a_silent_noop():
    session = make_session()
    session.is_processing = True
    events = []

    result = asyncio.run(StagedPipeline('test', sleep=RecordingSleep()).run(session, DETECTION_STEPS, lambda: 1, events.append))

    assert result is None
    assert events == []
    assert session.is_processing is True


def test_overlapping_runs_only_start_once():
    session = make_session()

    async def yield_control(_seconds):
        await asyncio.sleep(0)

    async def race():
        pipeline = StagedPipeline('test', sleep=yield_control)
        return await asyncio.gather(
            pipeline.run(session, DETECTION_STEPS, lambda: 'first'),
            pipeline.run(session, DETECTION_STEPS, lambda: 'second'),
        )

    assert asyncio.run(race()) == ['first', None]
    assert session.is_processing is False


def test_empty_step_list_still_produces():
    session = make_session()
    events = []

    result = asyncio.run(StagedPipeline('test', sleep=RecordingSleep()).run(session, [], lambda: 'done', events.append))

    assert result == 'done'
    assert events == []


def test_run_detection_replaces_previous_results():
    session = make_session()
    sleep = RecordingSleep()

    asyncio.run(run_detection(session, create_detector('yolo'), 0.0, sleep=sleep))
    assert len(session.detection_results) == 5

    asyncio.run(run_detection(session, create_detector('ssd'), 0.9, sleep=sleep))
    assert [row.class_label for row in session.detection_results] == ['person']
    assert session.models.detection == 'ssd'


def test_run_detection_validates_threshold_before_starting():
    session = make_session()

    with pytest.raises(InvalidInputError):
        asyncio.run(run_detection(session, create_detector('yolo'), 2.0, sleep=RecordingSleep()))

    assert session.is_processing is False
    assert session.detection_results == []


def test_run_classification_stores_results():
    session = make_session()

    results = asyncio.run(run_classification(session, create_classifier('efficientnet'), sleep=RecordingSleep()))

    assert results is session.classification_results
    assert len(results) == 5
    assert session.models.classification == 'efficientnet'


def test_run_classification_without_image_keeps_results():
    session = make_session(with_image=False)

    assert asyncio.run(run_classification(session, create_classifier('resnet'), sleep=RecordingSleep())) is None
    assert session.classification_results == []
