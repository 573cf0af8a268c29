"""Create quality_document, support_ticket and audit_log tables

Revision ID: 001
Revises:
Create Date: 2025-03-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

QUALITY_STATUS = ('PENDING', 'APPROVED', 'REJECTED', 'TO_DELETE')
TICKET_PRIORITY = ('NORMAL', 'CRITICAL')
TICKET_STATUS = ('OPEN', 'IN_PROGRESS', 'RESOLVED')
TICKET_FLOW = ('CLIENT_TO_QUALITY', 'QUALITY_TO_ADMIN')


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade():
    # Certificates and folders; status is NULL for folders
    op.create_table(
        'quality_document',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('owner_org_id', sa.String(64), nullable=False),
        sa.Column('owner_org_name', sa.Text(), nullable=True),
        sa.Column('parent_folder_id', sa.String(36), nullable=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('is_folder', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('status', sa.Enum(*QUALITY_STATUS, name='quality_status'), nullable=True),
        sa.Column('project_name', sa.Text(), nullable=True),
        sa.Column('batch_number', sa.Text(), nullable=True),
        sa.Column('grade', sa.Text(), nullable=True),
        sa.Column('invoice_number', sa.Text(), nullable=True),
        sa.Column('file_type', sa.Text(), nullable=True),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('uploaded_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('uploaded_by', sa.String(64), nullable=True),
        sa.Column('chemical_composition', _json(), nullable=True),
        sa.Column('mechanical_properties', _json(), nullable=True),
        sa.Column('inspection_json', _json(), nullable=True),
        sa.Column('client_feedback_json', _json(), nullable=True),
        sa.Column('viewed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('viewed_by', sa.String(64), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quality_document_owner_org_id', 'quality_document', ['owner_org_id'])
    op.create_index('ix_quality_document_owner_org_status', 'quality_document', ['owner_org_id', 'status'])
    op.create_index('ix_quality_document_parent_folder_id', 'quality_document', ['parent_folder_id'])

    op.create_table(
        'support_ticket',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('subject', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('priority', sa.Enum(*TICKET_PRIORITY, name='ticket_priority'), nullable=False),
        sa.Column('status', sa.Enum(*TICKET_STATUS, name='ticket_status'), nullable=False),
        sa.Column('flow', sa.Enum(*TICKET_FLOW, name='ticket_flow'), nullable=False),
        sa.Column('raised_by_id', sa.String(64), nullable=False),
        sa.Column('raised_by_name', sa.Text(), nullable=True),
        sa.Column('org_id', sa.String(64), nullable=True),
        sa.Column('client_name', sa.Text(), nullable=True),
        sa.Column('document_id', sa.String(36), nullable=True),
        sa.Column('document_name', sa.Text(), nullable=True),
        sa.Column('resolution_note', sa.Text(), nullable=True),
        sa.Column('escalation_json', _json(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_support_ticket_org_id', 'support_ticket', ['org_id'])
    op.create_index('ix_support_ticket_flow_status', 'support_ticket', ['flow', 'status'])
    op.create_index('ix_support_ticket_raised_by_id', 'support_ticket', ['raised_by_id'])

    # Append-only: the application never updates or deletes rows
    op.create_table(
        'audit_log',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('actor_id', sa.String(64), nullable=False),
        sa.Column('actor_role', sa.Text(), nullable=False),
        sa.Column('actor_name', sa.Text(), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('severity', sa.Text(), nullable=False),
        sa.Column('outcome', sa.Text(), nullable=False),
        sa.Column('target', sa.Text(), nullable=True),
        sa.Column('context_json', _json(), nullable=True),
        sa.Column('request_id', sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("category IN ('DATA', 'AUTH', 'SYSTEM')", name='ck_audit_log_category'),
        sa.CheckConstraint("severity IN ('INFO', 'WARNING', 'CRITICAL')", name='ck_audit_log_severity'),
        sa.CheckConstraint("outcome IN ('SUCCESS', 'FAILURE')", name='ck_audit_log_outcome'),
    )
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])
    op.create_index('ix_audit_log_category_created_at', 'audit_log', ['category', 'created_at'])
    op.create_index('ix_audit_log_target', 'audit_log', ['target'])
    op.create_index('ix_audit_log_actor_id', 'audit_log', ['actor_id'])


def downgrade():
    op.drop_index('ix_audit_log_actor_id', table_name='audit_log')
    op.drop_index('ix_audit_log_target', table_name='audit_log')
    op.drop_index('ix_audit_log_category_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_created_at', table_name='audit_log')
    op.drop_table('audit_log')

    op.drop_index('ix_support_ticket_raised_by_id', table_name='support_ticket')
    op.drop_index('ix_support_ticket_flow_status', table_name='support_ticket')
    op.drop_index('ix_support_ticket_org_id', table_name='support_ticket')
    op.drop_table('support_ticket')

    op.drop_index('ix_quality_document_parent_folder_id', table_name='quality_document')
    op.drop_index('ix_quality_document_owner_org_status', table_name='quality_document')
    op.drop_index('ix_quality_document_owner_org_id', table_name='quality_document')
    op.drop_table('quality_document')

    # Enum types outlive their tables on PostgreSQL
    bind = op.get_bind()
    for name in ('ticket_flow', 'ticket_status', 'ticket_priority', 'quality_status'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
