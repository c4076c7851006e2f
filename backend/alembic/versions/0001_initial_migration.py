"""Initial migration

Revision ID: 0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _encrypted_pair(name: str):
    """Ciphertext and IV columns for one encrypted field."""
    return [
        sa.Column(f'encrypted_{name}', sa.Text(), nullable=True),
        sa.Column(f'{name}_iv', sa.String(32), nullable=True),
    ]


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def _owner():
    return sa.Column(
        'user_id', postgresql.UUID(as_uuid=True),
        sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
    )


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True),
        sa.Column('email', sa.String(100), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(128), nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('is_verified', sa.Boolean(), default=False),
        sa.Column('otp', sa.String(16), nullable=True),
        sa.Column('otp_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('app_lock_pin_hash', sa.String(128), nullable=True),
        sa.Column('encrypted_backup', sa.Text(), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('can_screenshot', sa.Boolean(), default=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('login_count', sa.Integer(), default=0),
        *_timestamps(),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_email', 'users', ['email'])

    # Create cards table
    op.create_table(
        'cards',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        _owner(),
        *_encrypted_pair('number'),
        sa.Column('last4', sa.String(4), nullable=True),
        *_encrypted_pair('cvv'),
        *_encrypted_pair('holder'),
        *_encrypted_pair('expiry'),
        *_encrypted_pair('pin'),
        *_encrypted_pair('bank'),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('theme', sa.String(50), nullable=False),
        sa.Column('category', sa.String(20), nullable=False, server_default='credit'),
        sa.Column('image', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_cards_user_id', 'cards', ['user_id'])

    # Create bank_accounts table
    op.create_table(
        'bank_accounts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('bank_name', sa.String(200), nullable=False),
        *_encrypted_pair('account_holder'),
        *_encrypted_pair('account_number'),
        *_encrypted_pair('ifsc'),
        sa.Column('branch', sa.String(200), nullable=True),
        sa.Column('account_type', sa.String(20), nullable=False, server_default='savings'),
        sa.Column('theme', sa.String(50), nullable=True),
        sa.Column('mmid', sa.String(20), nullable=True),
        sa.Column('vpa', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_bank_accounts_user_id', 'bank_accounts', ['user_id'])

    # Create addresses table
    op.create_table(
        'addresses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('label', sa.String(50), nullable=False),
        *_encrypted_pair('line1'),
        *_encrypted_pair('line2'),
        *_encrypted_pair('city'),
        *_encrypted_pair('zip_code'),
        sa.Column('line3', sa.String(255), nullable=True),
        sa.Column('landmark', sa.String(255), nullable=True),
        sa.Column('state', sa.String(100), nullable=False),
        sa.Column('country', sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_addresses_user_id', 'addresses', ['user_id'])

    # Create temp_access_grants table
    op.create_table(
        'temp_access_grants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('issued_by_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('token', sa.String(64), nullable=False, unique=True),
        sa.Column('type', sa.String(32), nullable=False, server_default='edit_profile'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_add', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_edit', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_delete', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_temp_access_grants_user_id', 'temp_access_grants', ['user_id'])
    op.create_index('ix_temp_access_grants_token', 'temp_access_grants', ['token'])
    op.create_index('ix_temp_access_grants_created_at', 'temp_access_grants', ['created_at'])

    # Create support tables
    op.create_table(
        'support_tickets',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('assigned_to_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='support'),
        sa.Column('status', sa.String(20), nullable=False, server_default='open'),
        sa.Column('escalated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('last_message_sender', sa.String(10), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_support_tickets_user_id', 'support_tickets', ['user_id'])
    op.create_index('ix_support_tickets_assigned_to_id', 'support_tickets', ['assigned_to_id'])
    op.create_index('ix_support_tickets_status', 'support_tickets', ['status'])

    op.create_table(
        'support_ticket_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('ticket_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('support_tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender', sa.String(10), nullable=False),
        sa.Column('sender_name', sa.String(50), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_support_ticket_messages_ticket_id', 'support_ticket_messages', ['ticket_id'])


def downgrade() -> None:
    op.drop_table('support_ticket_messages')
    op.drop_table('support_tickets')
    op.drop_table('temp_access_grants')
    op.drop_table('addresses')
    op.drop_table('bank_accounts')
    op.drop_table('cards')
    op.drop_table('users')
