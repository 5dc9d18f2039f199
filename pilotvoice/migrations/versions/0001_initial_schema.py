"""Initial schema: competitions, surveys, survey responses and profiles

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-10-01 09:00:00.000000

"""
from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

from pilotvoice.migrations.util import get_timestamp_default, get_uuid_type

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    uuid_type = get_uuid_type()
    now = get_timestamp_default()

    op.create_table(
        'competitions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('country_code', sa.String(length=2), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('participant_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tasks_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'surveys',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('competition_id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('opens_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('closes_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['competition_id'], ['competitions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )
    op.create_index('ix_surveys_competition_id', 'surveys', ['competition_id'])

    op.create_table(
        'survey_responses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('user_id', uuid_type, nullable=False),
        sa.Column('overall_rating', sa.SmallInteger(), nullable=True),
        sa.Column('open_feedback', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_survey_responses_survey_id', 'survey_responses', ['survey_id'])
    op.create_index('ix_survey_responses_user_id', 'survey_responses', ['user_id'])
    op.create_index(
        'ix_survey_responses_survey_user', 'survey_responses', ['survey_id', 'user_id'], unique=True
    )

    op.create_table(
        'profiles',
        sa.Column('user_id', uuid_type, nullable=False),
        sa.Column('civl_id', sa.Integer(), nullable=True),
        sa.Column('registration_reason', sa.Text(), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.PrimaryKeyConstraint('user_id'),
    )


def downgrade() -> None:
    op.drop_table('profiles')
    op.drop_index('ix_survey_responses_survey_user', table_name='survey_responses')
    op.drop_index('ix_survey_responses_user_id', table_name='survey_responses')
    op.drop_index('ix_survey_responses_survey_id', table_name='survey_responses')
    op.drop_table('survey_responses')
    op.drop_index('ix_surveys_competition_id', table_name='surveys')
    op.drop_table('surveys')
    op.drop_table('competitions')
