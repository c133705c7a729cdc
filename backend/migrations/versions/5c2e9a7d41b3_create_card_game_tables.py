"""create user, card, game and game_card tables

Revision ID: 5c2e9a7d41b3
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e9a7d41b3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('image_url', sa.String(length=255), nullable=False),
        sa.Column('bad_luck_index', sa.Integer(), nullable=False),
        sa.Column('theme', sa.String(length=32), nullable=False),
        sa.CheckConstraint('bad_luck_index BETWEEN 1 AND 100', name='ck_card_bad_luck_index'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_card_theme', 'card', ['theme'])

    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('theme', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('cards_collected', sa.Integer(), nullable=False),
        sa.Column('wrong_guesses', sa.Integer(), nullable=False),
        sa.Column('current_round', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_owner_status', 'game', ['owner_id', 'status'])
    # One playing game per owner
    op.create_index(
        'uq_game_owner_playing', 'game', ['owner_id'], unique=True,
        sqlite_where=sa.text("status = 'playing'"),
        postgresql_where=sa.text("status = 'playing'"),
    )

    op.create_table(
        'game_card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('card_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('is_initial', sa.Boolean(), nullable=False),
        sa.Column('guessed_correctly', sa.Boolean(), nullable=True),
        sa.Column('position_guessed', sa.Integer(), nullable=True),
        sa.Column('card_dealt_at', sa.DateTime(), nullable=False),
        sa.Column('played_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['game_id'], ['game.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['card_id'], ['card.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'card_id', name='uq_game_card_card'),
    )
    op.create_index('ix_game_card_round', 'game_card', ['game_id', 'round_number'])


def downgrade():
    op.drop_index('ix_game_card_round', table_name='game_card')
    op.drop_table('game_card')
    op.drop_index('uq_game_owner_playing', table_name='game')
    op.drop_index('ix_game_owner_status', table_name='game')
    op.drop_table('game')
    op.drop_index('ix_card_theme', table_name='card')
    op.drop_table('card')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
