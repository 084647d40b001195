"""Initial schema

Revision ID: 001
Revises:
Create Date: 2025-09-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create mcp_tool_usage table (append-only usage ledger)
    op.create_table(
        'mcp_tool_usage',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('tool_name', sa.String(255), nullable=False),
        sa.Column('agent_id', sa.Integer(), nullable=True),
        sa.Column('cost', sa.Numeric(10, 4), nullable=False),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('execution_time_ms', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum('success', 'error', 'pending', name='usagestatus'), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('request', sa.JSON(), nullable=False),
        sa.Column('response', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_mcp_tool_usage_user_id', 'mcp_tool_usage', ['user_id'])
    op.create_index('idx_usage_user_created', 'mcp_tool_usage', ['user_id', 'created_at'])

    # Create agents table
    op.create_table(
        'agents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=False),
        sa.Column(
            'type',
            sa.Enum('file-based', 'team', 'hybrid', 'chat-based', name='agenttype'),
            nullable=False
        ),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('owner_id', sa.String(255), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_agents_owner_id', 'agents', ['owner_id'])

    # Create agent_access table
    op.create_table(
        'agent_access',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('agent_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('granted_at', sa.TIMESTAMP(), nullable=False),
        sa.ForeignKeyConstraint(['agent_id'], ['agents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('agent_id', 'user_id', name='uq_agent_access_agent_user')
    )
    op.create_index('idx_agent_access_user', 'agent_access', ['user_id'])


def downgrade() -> None:
    op.drop_index('idx_agent_access_user', table_name='agent_access')
    op.drop_table('agent_access')

    op.drop_index('ix_agents_owner_id', table_name='agents')
    op.drop_table('agents')

    op.drop_index('idx_usage_user_created', table_name='mcp_tool_usage')
    op.drop_index('ix_mcp_tool_usage_user_id', table_name='mcp_tool_usage')
    op.drop_table('mcp_tool_usage')
