import pytest

from vision_demo.core.detector import create_classifier, create_detector
from vision_demo.core.errors import InvalidInputError
from vision_demo.core.mock_catalog import DETECTION_CATALOG, generate_classifications, generate_detections


@pytest.mark.parametrize('threshold', [0.0, 0.5, 0.7, 0.72, 0.8, 0.9, 0.95, 1.0])
def test_detections_keep_catalog_entries_at_or_above_threshold(threshold):
    results = generate_detections(threshold, 'yolo')

    expected = [label for label, confidence, _ in DETECTION_CATALOG if confidence >= threshold]
    assert [row.class_label for row in results] == expected
    assert all(row.confidence >= threshold for row in results)


def test_zero_threshold_returns_all_entries_in_catalog_order():
    results = generate_detections(0.0, 'ssd')

    assert [row.class_label for row in results] == ['person', 'car', 'dog', 'bicycle', 'tree']
    assert results[1].bbox == (300, 200, 500, 350)
    assert {row.model_id for row in results} == {'ssd'}
    assert all(row.timestamp.endswith('Z') for row in results)


def test_full_threshold_returns_empty_list():
    assert generate_detections(1.0, 'yolo') == []


def test_classifications_are_fixed_and_descending():
    first = generate_classifications('resnet')
    second = generate_classifications('vit')

    assert [row.class_label for row in first] == ['Golden Retriever', 'Labrador', 'German Shepherd', 'Beagle', 'Bulldog']
    assert [row.class_label for row in second] == [row.class_label for row in first]
    assert [row.confidence for row in second] == [row.confidence for row in first]
    confidences = [row.confidence for row in first]
    assert confidences == sorted(confidences, reverse=True)
    assert {row.model_id for row in second} == {'vit'}


def test_create_detector_normalizes_model_id():
    detector = create_detector(' YOLO ')

    assert detector.model_id == 'yolo'
    assert [row.class_label for row in detector.detect(0.9)] == ['person']


def test_unknown_model_is_rejected():
    with pytest.raises(InvalidInputError) as exc_info:
        create_classifier('alexnet')

    assert exc_info.value.code == 'UNKNOWN_MODEL'
    assert 'resnet' in exc_info.value.details['supported']


@pytest.mark.parametrize('threshold', [-0.1, 1.5])
def test_detector_rejects_out_of_range_threshold(threshold):
    with pytest.raises(InvalidInputError):
        create_detector('yolo').detect(threshold)
