"""Shared test fixtures."""
import logging
import uuid
from types import SimpleNamespace

import pytest
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from webhook_service import import_models
from webhook_service.config import Settings
from webhook_service.database import Base
from webhook_service.models.endpoint import WebhookEndpoint
from webhook_service.models.field_mapping import WebhookFieldMapping
from webhook_service.models.pipeline import Pipeline, PipelineColumn
from webhook_service.models.user import User
from webhook_service.services.store import SqlStore


class FakeRedis:
    """Minimal in-memory Redis fake (strings, hashes, pipelines)."""

    def __init__(self):
        self.store = {}
        self.hashes = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value):
        self.store[key] = str(value)

    def incr(self, key):
        val = int(self.store.get(key, 0)) + 1
        self.store[key] = str(val)
        return val

    def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    def delete(self, *keys):
        for k in keys:
            self.store.pop(k, None)
            self.hashes.pop(k, None)

    def hset(self, key, field=None, value=None, mapping=None):
        h = self.hashes.setdefault(key, {})
        if field is not None:
            h[field] = str(value)
        for k, v in (mapping or {}).items():
            h[k] = str(v)

    def hincrby(self, key, field, amount=1):
        h = self.hashes.setdefault(key, {})
        h[field] = str(int(h.get(field, 0) or 0) + amount)
        return int(h[field])

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Queues commands and applies them on execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def __getattr__(self, name):
        def _queue(*args, **kwargs):
            self._ops.append((name, args, kwargs))
            return self
        return _queue

    def execute(self):
        return [getattr(self._redis, name)(*args, **kwargs) for name, args, kwargs in self._ops]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """create_app() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    original_level = root.level
    original_handlers = root.handlers[:]
    yield
    root.setLevel(original_level)
    root.handlers = original_handlers


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created, shared across sessions."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture(autouse=True)
def patch_get_session(session_factory):
    """
    Route every get_session() call to the in-memory engine.

    The store resolves database.get_session at call time, so patching the
    module attribute is enough. Each call gets a fresh session so close()
    in production code never invalidates another test session.
    """
    with patch('webhook_service.database.get_session', side_effect=lambda: session_factory()):
        yield


@pytest.fixture
def db_session(session_factory):
    """Session for assertions. Call expire_all() after store writes."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store():
    return SqlStore()


@pytest.fixture
def settings():
    return Settings(
        environment='test',
        database_url='sqlite://',
        redis_url='redis://localhost:6379/15',
        rate_limit_max=0,
    )


@pytest.fixture
def make_endpoint(session_factory):
    """
    Factory fixture: inserts an endpoint (plus admin user, optional pipeline
    and mappings) and returns a namespace with id, token, tenant_id,
    pipeline_id and column_ids.

    mappings: list of dicts with WebhookFieldMapping kwargs.
    columns:  list of positions; creates a pipeline when given.
    """
    def _make(mode='active', is_active=True, tenant_id='tenant-1', mappings=(),
              columns=None, admin=True, token=None, **overrides):
        session = session_factory()
        try:
            if admin:
                session.add(User(tenant_id=tenant_id, email=f'admin@{tenant_id}.example', is_admin=True))

            pipeline_id = None
            column_ids = []
            if columns is not None:
                pipeline = Pipeline(tenant_id=tenant_id, name='Sales')
                session.add(pipeline)
                session.flush()
                pipeline_id = pipeline.id
                for i, position in enumerate(columns):
                    col = PipelineColumn(pipeline_id=pipeline.id, name=f'col-{i}', position=position)
                    session.add(col)
                    session.flush()
                    column_ids.append(col.id)

            endpoint = WebhookEndpoint(
                token=token or f'tok-{uuid.uuid4().hex[:12]}',
                tenant_id=tenant_id,
                name='Test hook',
                mode=mode,
                is_active=is_active,
                pipeline_id=pipeline_id,
                **overrides,
            )
            session.add(endpoint)
            session.flush()

            for i, mapping in enumerate(mappings):
                session.add(WebhookFieldMapping(endpoint_id=endpoint.id, position=i, **mapping))

            session.commit()
            return SimpleNamespace(
                id=endpoint.id,
                token=endpoint.token,
                tenant_id=tenant_id,
                pipeline_id=pipeline_id,
                column_ids=column_ids,
            )
        finally:
            session.close()
    return _make


@pytest.fixture
def app(settings, fake_redis):
    """Flask test app wired to the in-memory DB and fake Redis."""
    from webhook_service import create_app
    with patch('webhook_service.extensions.redis.from_url', return_value=fake_redis):
        app = create_app(settings)
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def lead_mappings():
    """The name-required / email-optional mapping pair used across scenarios."""
    return [
        {'source_field': 'lead.name', 'target_field': 'name', 'is_required': True},
        {'source_field': 'lead.email', 'target_field': 'email', 'is_required': False},
    ]
