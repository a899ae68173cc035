"""Image analysis payloads.

These are fixed display values, not measurements: the demo shows the same
palette, feature counts and performance figures for every upload. Only the
file size and the result counts come from the session.
"""

from typing import Any

from vision_demo.core.errors import InvalidInputError
from vision_demo.core.types import ProcessingSession

COLOR_PALETTE = ('#ff6b6b', '#4ecdc4', '#45b7d1', '#96ceb4', '#feca57', '#6c5ce7')

COLOR_STATS = {
    'dominant_colors': len(COLOR_PALETTE),
    'color_harmony': 'Complementary',
    'brightness': 'Medium (65%)',
    'saturation': 'High (78%)',
}

FEATURE_STATS = {
    'edges_detected': 1247,
    'corners': 89,
    'texture_complexity': 'High',
    'symmetry_score': 0.73,
}

PERFORMANCE_STATS = {
    'detection_accuracy': '94.2%',
    'classification_confidence': '89.1%',
    'processing_speed': '15.7 FPS',
    'memory_usage': '2.1 GB',
    'gpu_utilization': '78%',
}

PROCESSING_TIME = '2.3 seconds'

_SIZE_UNITS = ('Bytes', 'KB', 'MB', 'GB')


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return '0 Bytes'
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(num_bytes / 1024**exponent, 2)
    text = f'{value:.2f}'.rstrip('0').rstrip('.')
    return f'{text} {_SIZE_UNITS[exponent]}'


def image_metrics(byte_size: int) -> list[dict[str, str]]:
    return [
        {'label': 'Resolution', 'value': '1920x1080'},
        {'label': 'Aspect Ratio', 'value': '16:9'},
        {'label': 'File Size', 'value': format_file_size(byte_size)},
        {'label': 'Compression', 'value': '85%'},
        {'label': 'Quality Score', 'value': '8.7/10'},
        {'label': 'Noise Level', 'value': 'Low'},
    ]


def analyze_image(session: ProcessingSession) -> dict[str, Any]:
    if session.active_image is None:
        raise InvalidInputError('MISSING_IMAGE', 'Upload an image before running analysis.')
    analysis = {
        'colors': {'palette': list(COLOR_PALETTE), **COLOR_STATS},
        'features': dict(FEATURE_STATS),
        'metrics': image_metrics(session.active_image.byte_size),
    }
    session.analysis = analysis
    return analysis


def processing_summary(session: ProcessingSession) -> dict[str, Any]:
    image = session.active_image
    return {
        'image': image.file_name if image else 'No image loaded',
        'objects_detected': len(session.detection_results),
        'classifications': len(session.classification_results),
        'processing_time': PROCESSING_TIME,
        'models_used': [session.models.detection.upper(), session.models.classification.upper()],
    }
