import logging

from audit_ingest.extraction.artifact_extractor import ArtifactExtractor
from audit_ingest.extraction.classifier import CategoryClassifier
from audit_ingest.models.metrics import METRIC_NAMES
from audit_ingest.models.run import UNKNOWN_URL


def _values(extraction):
    return {metric.metric_name: metric.value for metric in extraction.metrics}


def test_timing_resolves_every_metric(timing_document):
    extraction = ArtifactExtractor().extract_timing(timing_document, 'run-1', 'chrome')
    values = _values(extraction)

    assert extraction.url == "https://example.com/"
    assert set(values) == set(METRIC_NAMES)
    assert values['FirstVisualChange'] == 500
    assert values['SpeedIndex'] == 1200
    assert values['LastVisualChange'] == 2000
    assert values['firstPaint'] == 300
    assert values['ttfb'] == 80
    assert values['largestContentfulPaint'] == 1400
    assert values['fullyLoaded'] == 2500


def test_timing_secondary_source_and_nan_skip():
    document = {
        'visualMetrics': {'SpeedIndex': {'median': float('nan')}},
        'timings': {'firstPaint': 287},
    }

    extraction = ArtifactExtractor().extract_timing(document, 'run-1', 'chrome')
    values = _values(extraction)

    assert values == {'firstPaint': 287}
    assert extraction.url == UNKNOWN_URL


def test_timing_prefers_visual_metrics_over_secondary():
    document = {
        'visualMetrics': {'firstPaint': {'median': 100}},
        'timings': {'firstPaint': 999},
    }

    values = _values(ArtifactExtractor().extract_timing(document, 'run-1', 'chrome'))

    assert values['firstPaint'] == 100


def test_timing_url_lookup_order():
    document = {'pageinfo': {'url': 'https://a.example/'}, 'info': {'url': 'https://b.example/'}}

    assert ArtifactExtractor().extract_timing(document, 'r', 'chrome').url == 'https://a.example/'


def test_timing_records_carry_tags(timing_document):
    metric = ArtifactExtractor().extract_timing(timing_document, 'run-1', 'firefox').metrics[0]

    assert metric.tags() == {
        'test_id': 'run-1',
        'url': 'https://example.com/',
        'browser': 'firefox',
        'metricName': metric.metric_name,
    }


def test_advisory_items_and_scores(advisory_document):
    extraction = ArtifactExtractor().extract_advisory(advisory_document, 'run-1', 'home')

    ids = sorted(item.advice_id for item in extraction.items)
    assert ids == ['avoidRenderBlocking', 'https', 'imageSize', 'pageTitle']
    assert extraction.category_scores.to_dict() == {
        'run_id': 'run-1', 'performance': 85, 'privacy': 60, 'bestpractice': 90
    }
    assert extraction.dropped_ids == []

    pseudo = extraction.category_score_items()
    assert [(item.advice_id, item.score) for item in pseudo] == [
        ('performance', 85), ('privacy', 60), ('bestpractice', 90)
    ]
    assert all(item.is_category_score for item in pseudo)


def test_advisory_unknown_id_dropped_with_warning(caplog):
    caplog.set_level(logging.WARNING, logger="audit_ingest.extraction.artifact_extractor")
    document = {
        'url': 'https://example.com/',
        'advice': {'performance': {'adviceList': {'madeUpAdvice': {'score': 40, 'title': 'x'}}}},
    }

    extraction = ArtifactExtractor().extract_advisory(document, 'run-1', 'home')

    assert extraction.items == []
    assert extraction.dropped_ids == ['madeUpAdvice']
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert 'madeUpAdvice' in warnings[0].getMessage()


def test_advisory_classifier_category_wins():
    document = {
        'url': 'https://example.com/',
        'advice': {'bestpractice': {'adviceList': {'https': {'score': 100}}}},
    }

    item = ArtifactExtractor().extract_advisory(document, 'run-1', 'home').items[0]

    assert item.category == 'privacy'
    assert item.title == 'https'


def test_advisory_missing_score_skipped():
    document = {
        'advice': {'performance': {'adviceList': {'imageSize': {'title': 'Image size'}}}},
    }

    extraction = ArtifactExtractor().extract_advisory(document, 'run-1', 'home')

    assert extraction.items == []
    assert extraction.url == UNKNOWN_URL


def test_advisory_zero_category_score_is_kept():
    document = {'advice': {'privacy': {'score': 0, 'adviceList': {}}}}

    scores = ArtifactExtractor().extract_advisory(document, 'run-1', 'home').category_scores

    assert scores.privacy == 0
    assert scores.performance is None
    assert not scores.is_empty()


def test_advisory_without_tree():
    extraction = ArtifactExtractor().extract_advisory({'url': 'https://example.com/'}, 'run-1', 'home')

    assert extraction.items == []
    assert extraction.category_scores.is_empty()
    assert extraction.category_score_items() == []


def test_advisory_custom_classifier():
    classifier = CategoryClassifier({'performance': ['brandNew'], 'privacy': [], 'bestpractice': []})
    document = {'advice': {'performance': {'adviceList': {'brandNew': {'score': 50}, 'imageSize': {'score': 90}}}}}

    extraction = ArtifactExtractor(classifier).extract_advisory(document, 'run-1', 'home')

    assert [item.advice_id for item in extraction.items] == ['brandNew']
    assert extraction.dropped_ids == ['imageSize']


def test_content_breakdown_rows(content_document):
    rows = ArtifactExtractor().extract_content_breakdown(content_document, 'run-1', 'home', 'chrome')
    by_type = {row.content_type: row for row in rows}

    assert by_type['image'].requests == 12
    assert by_type['image'].content_size == 4096
    assert by_type['image'].transfer_size == 2048
    assert by_type['javascript'].requests == 5
    assert by_type['javascript'].content_size == 30000
    assert by_type['font'].requests == 0


def test_content_breakdown_missing_counters_stay_none():
    document = {'contentTypes': {'css': {'requests': 3}, 'json': {'other': 1}}}

    rows = ArtifactExtractor().extract_content_breakdown(document, 'run-1', 'home', 'chrome')

    assert len(rows) == 1
    assert rows[0].content_type == 'css'
    assert rows[0].content_size is None
    assert rows[0].transfer_size is None


def test_content_breakdown_without_types():
    assert ArtifactExtractor().extract_content_breakdown({}, 'run-1', 'home', 'chrome') == []


def test_media_asset_paths():
    asset = ArtifactExtractor().media_asset_for('run-1', 'https://example.com/', 'home', 'chrome')

    assert asset.video_path == 'pages/home/data/video/1.mp4'
    assert asset.lcp_screenshot_path == 'pages/home/data/screenshots/1/largestContentfulPaint.png'
    assert asset.tags() == {
        'test_id': 'run-1', 'url': 'https://example.com/', 'group': 'home', 'browser': 'chrome'
    }
