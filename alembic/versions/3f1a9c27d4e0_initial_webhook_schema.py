"""Initial webhook schema: endpoints, mappings, audit, samples, contacts, leads, pipelines

Revision ID: 3f1a9c27d4e0
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c27d4e0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Tenants' users + pipelines --
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])

    op.create_table('pipelines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pipelines_tenant_id', 'pipelines', ['tenant_id'])

    op.create_table('pipeline_columns',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pipeline_id', sa.Integer(), sa.ForeignKey('pipelines.id'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pipeline_columns_pipeline_id', 'pipeline_columns', ['pipeline_id'])

    # -- Contacts + leads --
    op.create_table('contacts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('source', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contacts_tenant_phone', 'contacts', ['tenant_id', 'phone'])
    op.create_index('ix_contacts_tenant_email', 'contacts', ['tenant_id', 'email'])

    op.create_table('leads',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('company', sa.Text(), nullable=True),
        sa.Column('value', sa.Float(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('priority', sa.Text(), nullable=False),
        sa.Column('source', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('pipeline_id', sa.Integer(), sa.ForeignKey('pipelines.id'), nullable=True),
        sa.Column('column_id', sa.Integer(), sa.ForeignKey('pipeline_columns.id'), nullable=True),
        sa.Column('extra_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_leads_tenant_id', 'leads', ['tenant_id'])
    op.create_index('ix_leads_contact_id', 'leads', ['contact_id'])

    # -- Webhook endpoints + mappings --
    op.create_table('webhook_endpoints',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('tenant_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('mode', sa.Text(), nullable=False),
        sa.Column('default_lead_status', sa.Text(), nullable=True),
        sa.Column('default_lead_priority', sa.Text(), nullable=True),
        sa.Column('default_lead_source', sa.Text(), nullable=True),
        sa.Column('pipeline_id', sa.Integer(), sa.ForeignKey('pipelines.id'), nullable=True),
        sa.Column('default_column_id', sa.Integer(), sa.ForeignKey('pipeline_columns.id'), nullable=True),
        sa.Column('total_requests', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('successful_requests', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('failed_requests', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_request_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token', name='uq_webhook_endpoints_token'),
    )
    op.create_index('ix_webhook_endpoints_tenant_id', 'webhook_endpoints', ['tenant_id'])

    op.create_table('webhook_field_mappings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('endpoint_id', sa.Integer(), sa.ForeignKey('webhook_endpoints.id'), nullable=False),
        sa.Column('source_field', sa.Text(), nullable=False),
        sa.Column('target_field', sa.Text(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False),
        sa.Column('default_value', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_webhook_field_mappings_endpoint_id', 'webhook_field_mappings', ['endpoint_id'])

    # -- Samples + audit trail --
    op.create_table('webhook_sample_data',
        sa.Column('endpoint_id', sa.Integer(), sa.ForeignKey('webhook_endpoints.id'), nullable=False),
        sa.Column('sample_payload', sa.JSON(), nullable=False),
        sa.Column('detected_fields', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('endpoint_id'),
    )

    op.create_table('webhook_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('endpoint_id', sa.Integer(), sa.ForeignKey('webhook_endpoints.id'), nullable=False),
        sa.Column('method', sa.Text(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('headers', sa.JSON(), nullable=True),
        sa.Column('source_ip', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('processing_result', sa.JSON(), nullable=True),
        sa.Column('created_lead_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_webhook_requests_endpoint_id', 'webhook_requests', ['endpoint_id'])


def downgrade() -> None:
    op.drop_index('ix_webhook_requests_endpoint_id', 'webhook_requests')
    op.drop_table('webhook_requests')
    op.drop_table('webhook_sample_data')
    op.drop_index('ix_webhook_field_mappings_endpoint_id', 'webhook_field_mappings')
    op.drop_table('webhook_field_mappings')
    op.drop_index('ix_webhook_endpoints_tenant_id', 'webhook_endpoints')
    op.drop_table('webhook_endpoints')
    op.drop_index('ix_leads_contact_id', 'leads')
    op.drop_index('ix_leads_tenant_id', 'leads')
    op.drop_table('leads')
    op.drop_index('ix_contacts_tenant_email', 'contacts')
    op.drop_index('ix_contacts_tenant_phone', 'contacts')
    op.drop_table('contacts')
    op.drop_index('ix_pipeline_columns_pipeline_id', 'pipeline_columns')
    op.drop_table('pipeline_columns')
    op.drop_index('ix_pipelines_tenant_id', 'pipelines')
    op.drop_table('pipelines')
    op.drop_index('ix_users_tenant_id', 'users')
    op.drop_table('users')
