#!/usr/bin/env python3
"""
Seed a demo tenant for trying the webhook locally.

Creates:
  1. An admin user for the tenant (leads need an owner)
  2. A pipeline with three columns
  3. One endpoint in mapping mode and one in active mode with field mappings

Usage:
    python scripts/seed_endpoint.py                  # seed tenant "demo"
    python scripts/seed_endpoint.py --tenant acme    # seed another tenant
    python scripts/seed_endpoint.py --create-schema  # create tables first (SQLite dev)

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import secrets
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from webhook_service import import_models
from webhook_service.config import Settings
from webhook_service.database import Base, configure_database, get_session
from webhook_service.models.endpoint import WebhookEndpoint
from webhook_service.models.field_mapping import WebhookFieldMapping
from webhook_service.models.pipeline import Pipeline, PipelineColumn
from webhook_service.models.user import User


DEMO_MAPPINGS = [
    # (source_field, target_field, is_required, default_value)
    ('customer.name',    'name',     True,  None),
    ('customer.email',   'email',    False, None),
    ('customer.phone',   'phone',    False, None),
    ('customer.company', 'company',  False, None),
    ('deal.title',       'title',    False, None),
    ('deal.value',       'value',    False, None),
    ('deal.priority',    'priority', False, 'media'),
]

COLUMNS = ['Novo', 'Qualificado', 'Proposta']


def seed(tenant_id):
    session = get_session()
    try:
        admin = User(tenant_id=tenant_id, email=f'admin@{tenant_id}.example', name='Admin', is_admin=True)
        pipeline = Pipeline(tenant_id=tenant_id, name='Vendas')
        session.add_all([admin, pipeline])
        session.flush()

        for position, name in enumerate(COLUMNS):
            session.add(PipelineColumn(pipeline_id=pipeline.id, name=name, position=position))

        mapping_ep = WebhookEndpoint(
            token=secrets.token_urlsafe(24), tenant_id=tenant_id,
            name='Form capture (mapping)', mode='mapping', is_active=True,
        )
        active_ep = WebhookEndpoint(
            token=secrets.token_urlsafe(24), tenant_id=tenant_id,
            name='Website leads', mode='active', is_active=True,
            default_lead_source='website', pipeline_id=pipeline.id,
        )
        session.add_all([mapping_ep, active_ep])
        session.flush()

        for position, (source, target, required, default) in enumerate(DEMO_MAPPINGS):
            session.add(WebhookFieldMapping(
                endpoint_id=active_ep.id, source_field=source, target_field=target,
                is_required=required, default_value=default, position=position,
            ))

        session.commit()
        print(f"Tenant {tenant_id}:")
        print(f"  mapping endpoint → POST /webhook/{mapping_ep.token}")
        print(f"  active endpoint  → POST /webhook/{active_ep.token}")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Seed a demo webhook tenant')
    parser.add_argument('--tenant', default='demo')
    parser.add_argument('--create-schema', action='store_true')
    args = parser.parse_args()

    engine = configure_database(Settings.from_env().database_url)
    import_models()
    if args.create_schema:
        Base.metadata.create_all(engine)

    seed(args.tenant)
