"""Serializers for session results.

All functions are pure; delivering the output (download, attachment) is the
caller's job. ``EXPORT_FORMATS`` pins the file name and MIME type per format.
"""

import csv
import io
import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from vision_demo.core.mock_catalog import utc_timestamp
from vision_demo.core.types import ClassificationResult, DetectionResult, ProcessingSession


@dataclass(frozen=True)
class ExportFormat:
    filename: str
    media_type: str


EXPORT_FORMATS = {
    'json': ExportFormat('cv_results.json', 'application/json'),
    'csv': ExportFormat('cv_results.csv', 'text/csv'),
    'image': ExportFormat('annotated_image.png', 'image/png'),
    'report': ExportFormat('cv_analysis_report.html', 'text/html'),
}

CSV_HEADER = ('Type', 'Class', 'Confidence', 'Details')

_TEMPLATES = Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent / 'templates'),
    autoescape=select_autoescape(['html']),
)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def detection_to_dict(result: DetectionResult) -> dict[str, Any]:
    return {
        'class': result.class_label,
        'confidence': result.confidence,
        'bbox': list(result.bbox),
        'model': result.model_id,
        'timestamp': result.timestamp,
    }


def classification_to_dict(result: ClassificationResult) -> dict[str, Any]:
    return {
        'class': result.class_label,
        'confidence': result.confidence,
        'model': result.model_id,
        'timestamp': result.timestamp,
    }


def to_json(session: ProcessingSession, timestamp: str | None = None) -> str:
    payload = {
        'image': session.active_image.file_name if session.active_image else None,
        'detections': [detection_to_dict(row) for row in session.detection_results],
        'classifications': [classification_to_dict(row) for row in session.classification_results],
        'analysis': session.analysis,
        'timestamp': timestamp or utc_timestamp(),
    }
    return json.dumps(payload, indent=2)


def to_csv(session: ProcessingSession) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for row in session.detection_results:
        details = ','.join(_format_number(value) for value in row.bbox)
        writer.writerow(('Detection', row.class_label, _format_number(row.confidence), details))
    for row in session.classification_results:
        writer.writerow(('Classification', row.class_label, _format_number(row.confidence), ''))
    return buffer.getvalue()


def to_report_html(
    session: ProcessingSession,
    title: str = 'Computer Vision Analysis Report',
    author: str = 'Vision Demo Platform',
    report_date: date | None = None,
) -> str:
    template = _TEMPLATES.get_template('report.html')
    return template.render(
        title=title,
        author=author,
        report_date=report_date or date.today(),
        image_name=session.active_image.file_name if session.active_image else 'No image loaded',
        detections=session.detection_results,
        classifications=session.classification_results,
    )
