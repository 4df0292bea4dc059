import json

import pytest

from audit_ingest.config import Config, DatabaseConfig, TimeSeriesConfig, ApplicationConfig
from audit_ingest.container import Container, get_container, reset_container, create_report_service
from audit_ingest.exceptions import ConfigurationError
from audit_ingest.reconstruction import RelationalRecordSource, TimeSeriesRecordSource

from conftest import RecordingConnectionManager


def _config(**app):
    return Config(
        database=DatabaseConfig(host='localhost', dbname='audits', user='u', password='p'),
        timeseries=TimeSeriesConfig(),
        app=ApplicationConfig(**app),
    )


@pytest.fixture
def container():
    reset_container()
    yield get_container()
    reset_container()


def test_singleton_created_once():
    container = Container()
    calls = []

    def factory():
        calls.append(1)
        return object()

    container.register_singleton('thing', factory)

    assert container.get('thing') is container.get('thing')
    assert len(calls) == 1


def test_factory_returns_new_instances():
    container = Container()
    container.register_factory('thing', object)

    assert container.get('thing') is not container.get('thing')


def test_unknown_service_raises():
    with pytest.raises(KeyError):
        Container().get('missing')


def test_clear_closes_instances():
    container = Container()
    manager = RecordingConnectionManager()
    container.register_instance('connection', manager)

    container.clear()

    assert manager.closed
    assert not container.has('connection')


def test_classifier_defaults_without_file(container):
    container.register_instance('config', _config())

    assert 'avoidRenderBlocking' in container.get('classifier')


def test_classifier_loads_custom_file(container, tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(json.dumps({
        'performance': ['fastRender'],
        'privacy': ['noTracking'],
        'bestpractice': ['validHtml'],
    }), encoding='utf-8')
    container.register_instance('config', _config(advice_categories_file=str(path)))

    classifier = container.get('classifier')

    assert classifier.classify('noTracking') == 'privacy'
    assert classifier.classify('avoidRenderBlocking') is None


@pytest.mark.parametrize("content", [
    "not json",
    json.dumps(["performance"]),
    json.dumps({'performance': ['a'], 'privacy': ['a'], 'bestpractice': ['b']}),
])
def test_broken_category_file_is_configuration_error(container, tmp_path, content):
    path = tmp_path / "categories.json"
    path.write_text(content, encoding='utf-8')
    container.register_instance('config', _config(advice_categories_file=str(path)))

    with pytest.raises(ConfigurationError) as excinfo:
        container.get('classifier')

    assert excinfo.value.context['config_key'] == 'ADVICE_CATEGORIES_FILE'


def test_missing_category_file_is_configuration_error(container, tmp_path):
    container.register_instance('config', _config(advice_categories_file=str(tmp_path / "absent.json")))

    with pytest.raises(ConfigurationError):
        container.get('classifier')


def test_report_service_sources(container, upsert_sink, append_sink):
    container.register_instance('config', _config())
    container.register_instance('relational_store', upsert_sink)
    container.register_instance('point_store', append_sink)

    assert isinstance(create_report_service('timeseries').source, TimeSeriesRecordSource)
    assert isinstance(create_report_service('relational').source, RelationalRecordSource)
    with pytest.raises(ValueError):
        create_report_service('influx')
