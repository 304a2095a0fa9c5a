"""initial pvz schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete PVZ schema:
- pvz: pickup points
- receptions: intake batches, at most one in_progress per pickup point
- products: items logged into a reception, ordered by (date_time, seq)
- users: employee and moderator accounts
- session_tokens: bearer sessions (keyed token hash only)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # pvz: pickup points
    # ============================================================================
    op.create_table('pvz',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('city', sa.String(length=64), nullable=False),
        sa.Column('registration_date', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('pvz', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_pvz_registration_date'), ['registration_date'], unique=False)

    # ============================================================================
    # receptions: in_progress -> closed
    # ============================================================================
    op.create_table('receptions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('pvz_id', sa.String(length=36), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(['pvz_id'], ['pvz.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('receptions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_receptions_pvz_id'), ['pvz_id'], unique=False)
        batch_op.create_index('ix_receptions_pvz_status', ['pvz_id', 'status'], unique=False)

    # Partial unique index: one in_progress reception per pickup point
    op.create_index(
        'ux_receptions_one_active_per_pvz',
        'receptions',
        ['pvz_id'],
        unique=True,
        sqlite_where=sa.text("status = 'in_progress'"),
        postgresql_where=sa.text("status = 'in_progress'"),
    )

    # ============================================================================
    # products: LIFO ledger per reception
    # ============================================================================
    op.create_table('products',
        sa.Column('seq', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('reception_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['reception_id'], ['receptions.id'], ),
        sa.PrimaryKeyConstraint('seq'),
        sa.UniqueConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_reception_order', ['reception_id', 'date_time', 'seq'], unique=False)

    # ============================================================================
    # users / session_tokens
    # ============================================================================
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('session_tokens')
    op.drop_table('users')
    op.drop_table('products')
    op.drop_index('ux_receptions_one_active_per_pvz', table_name='receptions')
    op.drop_table('receptions')
    op.drop_table('pvz')
