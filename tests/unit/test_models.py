from datetime import datetime, timezone

import pytest

from audit_ingest.models.advice import AdviceItem, CategoryScores
from audit_ingest.models.metrics import MetricRecord, MediaAsset
from audit_ingest.models.records import FlatRecord, Point, is_known_field
from audit_ingest.models.run import Run


def test_run_requires_id():
    with pytest.raises(ValueError):
        Run(run_id='   ', browser='chrome')


def test_metric_name_must_be_recognized():
    with pytest.raises(ValueError):
        MetricRecord('domContentLoaded', 10, 'run-1', 'u', 'chrome')


def test_advice_item_defaults_title_and_checks_category():
    item = AdviceItem('run-1', 'u', 'home', 'privacy', 'https', 100)

    assert item.title == 'https'
    assert item.description == ''
    assert item.identity == ('run-1', 'home', 'privacy', 'https')
    with pytest.raises(ValueError):
        AdviceItem('run-1', 'u', 'home', 'accessibility', 'altText', 50)


def test_category_scores_accessors():
    scores = CategoryScores('run-1')
    assert scores.is_empty()

    scores.set('privacy', 0)
    assert scores.get('privacy') == 0
    assert not scores.is_empty()
    with pytest.raises(KeyError):
        scores.get('seo')


def test_media_asset_fields_skip_empty_paths():
    assert MediaAsset('run-1', 'u', 'home', video_path='v.mp4').fields() == {'video_path': 'v.mp4'}


def test_flat_record_wire_shape():
    time = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    record = FlatRecord('visualMetrics', 'value', 287.0, tags={
        'test_id': 'run-1', 'url': 'u', 'browser': 'chrome', 'metricName': 'firstPaint'
    }, time=time)

    wire = record.to_dict()

    assert wire == {
        'test_id': 'run-1', 'url': 'u', 'browser': 'chrome', 'metricName': 'firstPaint',
        '_measurement': 'visualMetrics', '_field': 'value', '_value': 287.0,
        '_time': '2024-05-01T12:00:00+00:00',
    }


def test_point_expands_one_record_per_field():
    point = Point('pagexray', {'test_id': 'run-1', 'contentType': 'image'},
                  {'requests': 12, 'contentSize': 4096, 'transferSize': 2048})

    records = point.to_records()

    assert [(r.field, r.value) for r in records] == [('requests', 12), ('contentSize', 4096), ('transferSize', 2048)]
    assert all(r.tag('contentType') == 'image' for r in records)


@pytest.mark.parametrize("measurement,field_name,known", [
    ('visualMetrics', 'value', True),
    ('media_assets', 'video_path', True),
    ('coach_advice', 'description', True),
    ('pagexray', 'contentSize', True),
    ('pagexray', 'size', False),
    ('unknown', 'value', False),
])
def test_known_fields(measurement, field_name, known):
    assert is_known_field(measurement, field_name) is known
