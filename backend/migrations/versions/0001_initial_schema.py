"""initial schema: users, catalog, games, players and the economy tables

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-09-14 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(256), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'countries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('code', sa.String(8), nullable=False, unique=True),
        sa.Column('position_x', sa.Float(), nullable=False),
        sa.Column('position_y', sa.Float(), nullable=False),
        sa.Column('color_hex', sa.String(7), nullable=False),
        sa.Column('capital_name', sa.String(100), nullable=True),
        sa.Column('government_type', sa.String(64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
    )

    op.create_table(
        'building_types',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('cost_money', sa.Integer(), nullable=False),
        sa.Column('cost_materials', sa.Integer(), nullable=False),
        sa.Column('effects', sa.JSON(), nullable=False),
    )

    op.create_table(
        'technologies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('tier', sa.Integer(), nullable=False),
        sa.Column('research_cost', sa.Integer(), nullable=False),
        sa.Column('research_time_hours', sa.Integer(), nullable=False),
        sa.Column('prerequisites', sa.JSON(), nullable=False),
        sa.Column('effects', sa.JSON(), nullable=False),
    )

    op.create_table(
        'games',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('creator_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('max_players', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('current_players', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('turn_duration_hours', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('current_turn', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('game_phase', sa.String(32), nullable=True),
        sa.Column('world_seed', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('games.id'), nullable=False),
        sa.Column('country_id', sa.Integer(), sa.ForeignKey('countries.id'), nullable=True),
        sa.Column('nation_name', sa.String(128), nullable=True),
        sa.Column('leader_name', sa.String(128), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_ready', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reputation_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_players_user_id', 'players', ['user_id'])
    op.create_index('ix_players_game_id', 'players', ['game_id'])

    op.create_table(
        'player_resources',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False, unique=True),
        sa.Column('money', sa.Integer(), nullable=False),
        sa.Column('materials', sa.Integer(), nullable=False),
        sa.Column('population', sa.Integer(), nullable=False),
        sa.Column('happiness', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'player_buildings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('building_type_id', sa.Integer(), sa.ForeignKey('building_types.id'), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_player_buildings_player_id', 'player_buildings', ['player_id'])

    op.create_table(
        'player_research',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('technology_id', sa.Integer(), sa.ForeignKey('technologies.id'), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='researching'),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('player_id', 'technology_id', name='uq_player_research_player_technology'),
    )
    op.create_index('ix_player_research_player_id', 'player_research', ['player_id'])


def downgrade():
    op.drop_index('ix_player_research_player_id', table_name='player_research')
    op.drop_table('player_research')
    op.drop_index('ix_player_buildings_player_id', table_name='player_buildings')
    op.drop_table('player_buildings')
    op.drop_table('player_resources')
    op.drop_index('ix_players_game_id', table_name='players')
    op.drop_index('ix_players_user_id', table_name='players')
    op.drop_table('players')
    op.drop_table('games')
    op.drop_table('technologies')
    op.drop_table('building_types')
    op.drop_table('countries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
