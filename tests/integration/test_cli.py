import json

import pytest

from audit_ingest.cli_router import CLIRouter
from audit_ingest.config import Config, DatabaseConfig, TimeSeriesConfig, ApplicationConfig
from audit_ingest.container import get_container, reset_container

from conftest import write_page


@pytest.fixture
def wired_container(upsert_sink, append_sink, results_dir):
    reset_container()
    container = get_container()
    container.register_instance('config', Config(
        database=DatabaseConfig(host='localhost', dbname='audits', user='u', password='p'),
        timeseries=TimeSeriesConfig(),
        app=ApplicationConfig(results_dir=str(results_dir), default_browser='firefox'),
    ))
    container.register_instance('relational_store', upsert_sink)
    container.register_instance('point_store', append_sink)
    yield container
    reset_container()


def test_ingest_then_report_through_cli(wired_container, page_writer, capsys,
                                        timing_document, advisory_document, content_document):
    page_writer('run-1', 'home', timing=timing_document, advisory=advisory_document, content=content_document)
    router = CLIRouter()

    assert router.route_command(['ingest', 'run', 'run-1', '--json']) == 0
    output = capsys.readouterr().out
    report = json.loads(output[output.index('{'):])
    assert report['success']
    assert report['outcomes']['metrics'] == {'written': 11, 'failed': 0}

    assert router.route_command(['report', 'scores', 'run-1', '--json']) == 0
    assert json.loads(capsys.readouterr().out) == {'performance': 85, 'privacy': 60, 'bestpractice': 90}

    assert router.route_command(['report', 'breakdown', 'run-1']) == 0
    assert "Total: 17 requests" in capsys.readouterr().out


def test_ingest_uses_default_browser(wired_container, upsert_sink, page_writer, advisory_document):
    page_writer('run-1', 'home', advisory=advisory_document)

    assert CLIRouter().route_command(['ingest', 'run', 'run-1']) == 0
    assert upsert_sink.get_run('run-1')['browser'] == 'firefox'


def test_ingest_results_dir_override(wired_container, upsert_sink, tmp_path, advisory_document):
    other = tmp_path / "elsewhere"
    write_page(other, 'run-2', 'home', advisory=advisory_document)

    assert CLIRouter().route_command(['ingest', 'run', 'run-2', '--results-dir', str(other)]) == 0
    assert len(upsert_sink.get_advice_rows('run-2')) == 7


def test_compare_outputs_table(wired_container, page_writer, capsys, timing_document):
    page_writer('run-1', 'home', timing=timing_document)
    router = CLIRouter()
    router.route_command(['ingest', 'run', 'run-1'])
    capsys.readouterr()

    assert router.route_command(['report', 'compare', 'run-1', 'run-2']) == 0
    output = capsys.readouterr().out
    assert "1200 ms" in output
    assert "N/A" in output


def test_missing_subcommand_returns_error(wired_container):
    assert CLIRouter().route_command(['report']) != 0


def test_invalid_source_rejected(wired_container):
    assert CLIRouter().route_command(['report', 'advice', 'run-1', '--source', 'influx']) == 2
