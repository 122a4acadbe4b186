"""Create member, invitation and audit tables

Revision ID: a3f1c2d4e5b6
Revises: 
Create Date: 2026-10-18 09:12:41.503127

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a3f1c2d4e5b6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('member',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('membership_status', sa.String(30), nullable=False),
        sa.Column('is_temp_runner', sa.Boolean(), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('invited_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('pending_member',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('invitation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('token', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('invited_by', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('invited_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('registered_at', sa.DateTime(), nullable=True),
        sa.Column('sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('linked_guest_member_id', sa.Integer(), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'registered', 'expired')",
                           name='ck_invitation_status'),
        sa.ForeignKeyConstraint(['linked_guest_member_id'], ['member.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token')
    )
    op.create_index('ix_invitation_email', 'invitation', ['email'])
    # Only one pending invitation per address; concurrent inviters lose here
    op.create_index(
        'uq_invitation_pending_email', 'invitation', ['email'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'")
    )

    op.create_table('security_event',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(64), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('severity', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_security_event_event_type', 'security_event', ['event_type'])


def downgrade():
    op.drop_index('ix_security_event_event_type', table_name='security_event')
    op.drop_table('security_event')
    op.drop_index('uq_invitation_pending_email', table_name='invitation')
    op.drop_index('ix_invitation_email', table_name='invitation')
    op.drop_table('invitation')
    op.drop_table('pending_member')
    op.drop_table('member')
