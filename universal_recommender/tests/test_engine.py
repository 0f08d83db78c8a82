import io
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from universal_recommender.config.engine_config import EngineConfig
from universal_recommender.dependencies.predictionio_client import EngineClient, EventClient
from universal_recommender.services.engine import Engine
from universal_recommender.services.query import Query
from universal_recommender.utils.datetime_utils import to_iso8601


class DummyEngineClient:
    def __init__(self, response):
        self.response = response
        self.queries = []

    def send_query(self, data):
        self.queries.append(data)
        return self.response


def item_ids(query_results, **options):
    return [item_score['item'] for item_score in query_results]


@pytest.fixture
def config():
    return EngineConfig(
        host='example.com',
        engine_port=8000,
        event_port=7070,
        access_key='abc123',
        threads=1,
    )


@pytest.fixture
def engine(config):
    return Engine(config)


@pytest.fixture
def event_time():
    return datetime.now(timezone.utc) - timedelta(minutes=5)


def with_engine_client(engine, response):
    client = DummyEngineClient(response)
    engine._engine_client = client
    return client

# ----------------------------
# Clients
# ----------------------------

def test_engine_client_is_built_from_config(engine):
    client = engine.engine_client
    assert isinstance(client, EngineClient)
    assert client.url == 'http://example.com:8000'
    assert engine.engine_client is client

def test_event_client_is_built_from_config(engine):
    client = engine.event_client
    assert isinstance(client, EventClient)
    assert client.url == 'http://example.com:7070'
    assert client.access_key == 'abc123'
    assert client.threads == 1
    assert engine.event_client is client

def test_clients_are_not_rebuilt_after_reconfiguration(engine):
    client = engine.engine_client
    engine.config = engine.config.model_copy(update={'engine_port': 9000})
    assert engine.engine_client is client

def test_overrides_replace_config_fields(config):
    engine = Engine(config, host='other.example.com')
    assert engine.config.engine_url == 'http://other.example.com:8000'
    assert config.host == 'example.com'

def test_overrides_are_validated(config):
    engine = Engine(config, threads='4', timeout='5')
    assert engine.config.threads == 4
    assert engine.config.timeout == 5.0

def test_unknown_override_is_rejected(config):
    with pytest.raises(ValidationError):
        Engine(config, hots='other.example.com')

def test_query_is_bound_to_engine(engine):
    query = engine.query()
    assert isinstance(query, Query)
    assert query.engine is engine

# ----------------------------
# execute_query / reify
# ----------------------------

def test_execute_query_sends_query_hash(engine):
    client = with_engine_client(engine, {'itemScores': []})
    query = engine.query().for_user('u-1').where(foo='bar')
    engine.execute_query(query)
    assert client.queries == [query.query_hash()]

def test_execute_query_returns_empty_list_without_results(engine):
    with_engine_client(engine, {'itemScores': []})
    assert engine.execute_query(Query()) == []

def test_execute_query_without_item_scores_key(engine):
    with_engine_client(engine, {})
    assert engine.execute_query(Query()) == []

def test_execute_query_without_reifier_returns_raw_results(engine):
    with_engine_client(engine, {'itemScores': [{'item': 'i-1', 'score': 0.0}]})
    assert engine.execute_query(Query(), reify=True) == [{'item': 'i-1', 'score': 0.0}]

def test_execute_query_reify_false_skips_reifier(config):
    engine = Engine(config, reifier=item_ids)
    with_engine_client(engine, {'itemScores': [{'item': 'i-1', 'score': 0.0}]})
    assert engine.execute_query(Query(), reify=False) == [{'item': 'i-1', 'score': 0.0}]

def test_execute_query_reifies_by_default(config):
    engine = Engine(config, reifier=item_ids)
    with_engine_client(engine, {'itemScores': [{'item': 'i-1', 'score': 0.0}]})
    assert engine.execute_query(Query()) == ['i-1']
    assert engine.execute_query(Query(), reify=True) == ['i-1']

def test_reifier_receives_options(config):
    reifier = MagicMock(return_value=['reified'])
    engine = Engine(config, reifier=reifier)
    with_engine_client(engine, {'itemScores': [{'item': 'i-1', 'score': 0.0}]})
    assert engine.execute_query(Query(), include_archived=True) == ['reified']
    reifier.assert_called_once_with([{'item': 'i-1', 'score': 0.0}], include_archived=True)

def test_reify_without_reifier_returns_results(engine):
    results = [{'item': 'i-1', 'score': 0.0}]
    assert engine.reify(results) is results

def test_transport_errors_propagate(engine):
    client = MagicMock()
    client.send_query.side_effect = ConnectionError('down')
    engine._engine_client = client
    with pytest.raises(ConnectionError):
        engine.execute_query(Query())

def test_iterating_query_executes_it(engine):
    with_engine_client(engine, {'itemScores': [{'item': 'i-1', 'score': 1.0}]})
    assert list(engine.query()) == [{'item': 'i-1', 'score': 1.0}]

# ----------------------------
# Events
# ----------------------------

def test_upsert_entity_sends_set_event(engine):
    engine._event_client = MagicMock()
    engine.upsert_entity(type='item', id='i-1', properties={'foo': ['bar']})
    engine.event_client.create_event.assert_called_once_with(
        '$set', 'item', 'i-1', {'properties': {'foo': ['bar']}}
    )

def test_record_event_sends_named_event(engine, event_time):
    engine._event_client = MagicMock()
    engine.record_event(type='viewed-item', user='u-1', item='i-1', at=event_time,
                        properties={'foo': ['bar']})
    engine.event_client.create_event.assert_called_once_with(
        'viewed-item', 'user', 'u-1', {
            'targetEntityType': 'item',
            'targetEntityId': 'i-1',
            'properties': {'foo': ['bar']},
            'eventTime': to_iso8601(event_time),
        }
    )

def test_record_event_defaults_time_to_now(engine):
    engine._event_client = MagicMock()
    engine.record_event(type='purchase', user='u-1', item='i-1')
    body = engine.event_client.create_event.call_args.args[3]
    assert body['properties'] == {}
    sent = datetime.fromisoformat(body['eventTime'])
    assert abs(datetime.now(timezone.utc) - sent) < timedelta(minutes=1)

# ----------------------------
# JSON Lines export
# ----------------------------

def test_export_entity_writes_json_line(engine):
    sink = io.StringIO()
    engine.export_entity(sink, type='user', id='u-1', properties={'foo': ['bar']})
    expected = json.dumps({
        'event': '$set',
        'entityType': 'user',
        'entityId': 'u-1',
        'properties': {'foo': ['bar']},
    })
    assert sink.getvalue() == expected + "\n"

def test_export_event_writes_json_line(engine, event_time):
    sink = io.StringIO()
    engine.export_event(sink, type='viewed-item', user='u-1', item='i-1', at=event_time,
                        properties={'foo': ['bar']})
    expected = json.dumps({
        'event': 'viewed-item',
        'entityType': 'user',
        'entityId': 'u-1',
        'targetEntityType': 'item',
        'targetEntityId': 'i-1',
        'properties': {'foo': ['bar']},
        'eventTime': to_iso8601(event_time),
    })
    assert sink.getvalue() == expected + "\n"

def test_exports_append_one_line_each(engine, event_time):
    sink = io.StringIO()
    engine.export_entity(sink, type='item', id='i-1')
    engine.export_event(sink, type='purchase', user='u-1', item='i-1', at=event_time)
    assert len(sink.getvalue().splitlines()) == 2

def test_exported_entity_matches_live_call(engine):
    engine._event_client = MagicMock()
    sink = io.StringIO()
    engine.upsert_entity(type='item', id='i-1', properties={'foo': ['bar']})
    engine.export_entity(sink, type='item', id='i-1', properties={'foo': ['bar']})

    event, entity_type, entity_id, body = engine.event_client.create_event.call_args.args
    assert json.loads(sink.getvalue()) == {
        'event': event, 'entityType': entity_type, 'entityId': entity_id, **body
    }

def test_exported_event_matches_live_call(engine, event_time):
    engine._event_client = MagicMock()
    sink = io.StringIO()
    engine.record_event(type='purchase', user='u-1', item='i-1', at=event_time)
    engine.export_event(sink, type='purchase', user='u-1', item='i-1', at=event_time)

    event, entity_type, entity_id, body = engine.event_client.create_event.call_args.args
    assert json.loads(sink.getvalue()) == {
        'event': event, 'entityType': entity_type, 'entityId': entity_id, **body
    }
