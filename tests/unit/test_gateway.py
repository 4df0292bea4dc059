import logging

from audit_ingest.database.gateway import PersistenceGateway, WriteOutcome
from audit_ingest.extraction.artifact_extractor import ArtifactExtractor
from audit_ingest.models.advice import AdviceItem, CategoryScores
from audit_ingest.models.metrics import MetricRecord, MediaAsset
from audit_ingest.models.run import Run


def _gateway(upsert_sink, append_sink):
    return PersistenceGateway(upsert_sink, append_sink)


def test_metrics_become_visual_metrics_points(upsert_sink, append_sink):
    metrics = [
        MetricRecord('SpeedIndex', 1200, 'run-1', 'https://example.com/', 'chrome'),
        MetricRecord('firstPaint', 300, 'run-1', 'https://example.com/', 'chrome'),
    ]

    outcome = _gateway(upsert_sink, append_sink).write_metrics(metrics)

    assert outcome == WriteOutcome(written=2, failed=0)
    points = append_sink.of_measurement('visualMetrics')
    assert [p.fields for p in points] == [{'value': 1200.0}, {'value': 300.0}]
    assert points[0].tags['metricName'] == 'SpeedIndex'


def test_failed_point_store_is_counted_not_raised(upsert_sink, append_sink, caplog):
    append_sink.fail = True
    metrics = [MetricRecord('SpeedIndex', 1200, 'run-1', 'u', 'chrome')]

    outcome = _gateway(upsert_sink, append_sink).write_metrics(metrics)

    assert outcome == WriteOutcome(written=0, failed=1)
    assert "Error writing visualMetrics points" in caplog.text


def test_empty_media_asset_writes_nothing(upsert_sink, append_sink):
    outcome = _gateway(upsert_sink, append_sink).write_media_asset(MediaAsset('run-1', 'u', 'home'))

    assert outcome.total == 0
    assert append_sink.points == []


def test_one_failed_advice_does_not_stop_the_rest(upsert_sink, append_sink, caplog):
    caplog.set_level(logging.ERROR)
    upsert_sink.fail_advice_ids = {'https'}
    items = [
        AdviceItem('run-1', 'u', 'home', 'performance', 'imageSize', 90),
        AdviceItem('run-1', 'u', 'home', 'privacy', 'https', 100),
        AdviceItem('run-1', 'u', 'home', 'bestpractice', 'pageTitle', 80),
    ]

    outcome = _gateway(upsert_sink, append_sink).save_advice_items(items)

    assert outcome == WriteOutcome(written=2, failed=1)
    assert {key[3] for key in upsert_sink.advice} == {'imageSize', 'pageTitle'}
    assert "Error writing advice https" in caplog.text


def test_empty_category_scores_do_not_overwrite(upsert_sink, append_sink):
    gateway = _gateway(upsert_sink, append_sink)
    gateway.save_category_scores(CategoryScores('run-1', performance=85, privacy=60, bestpractice=90))

    outcome = gateway.save_category_scores(CategoryScores('run-1'))

    assert outcome.total == 0
    assert upsert_sink.get_category_scores('run-1').performance == 85


def test_save_advisory_writes_items_and_pseudo_rows(upsert_sink, append_sink, advisory_document):
    extraction = ArtifactExtractor().extract_advisory(advisory_document, 'run-1', 'home')

    advice_outcome, scores_outcome = _gateway(upsert_sink, append_sink).save_advisory(extraction)

    assert advice_outcome == WriteOutcome(written=7, failed=0)
    assert scores_outcome == WriteOutcome(written=1, failed=0)
    assert ('run-1', 'home', 'privacy', 'privacy') in upsert_sink.advice


def test_failed_run_upsert_is_reported(upsert_sink, append_sink):
    upsert_sink.fail_runs = True

    outcome = _gateway(upsert_sink, append_sink).save_run(Run(run_id='run-1', browser='chrome'))

    assert outcome.failed == 1


def test_write_outcome_merge():
    outcome = WriteOutcome(written=1).merge(WriteOutcome(written=2, failed=1))

    assert outcome.to_dict() == {'written': 3, 'failed': 1}
    assert outcome.total == 4
