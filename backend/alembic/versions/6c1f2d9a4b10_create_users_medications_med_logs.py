"""create users, medications and med_logs

Revision ID: 6c1f2d9a4b10
Revises:
Create Date: 2026-10-18 21:40:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '6c1f2d9a4b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('patient_code', sa.String(), nullable=True),
        sa.Column('linked_patient_id', sa.Uuid(), nullable=True),
        sa.Column('avatar', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),

        sa.ForeignKeyConstraint(['linked_patient_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('patient_code'),
    )
    op.create_table(
        'medications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('dosage', sa.String(), nullable=False),
        sa.Column('times', sa.JSON(), nullable=False),                    # ["HH:MM", ...]
        sa.Column('frequency', sa.String(), nullable=False),              # daily | weekly | as_needed
        sa.Column('is_high_priority', sa.Boolean(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),

        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medications_patient_id', 'medications', ['patient_id'])
    op.create_table(
        'med_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('med_id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('scheduled_time', sa.String(length=5), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('taken_at', sa.DateTime(), nullable=True),
        sa.Column('taken_by', sa.Uuid(), nullable=True),
        sa.Column('taken_by_name', sa.String(), nullable=True),

        sa.ForeignKeyConstraint(['med_id'], ['medications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('med_id', 'scheduled_time', 'date', name='uq_med_logs_dose'),
    )
    op.create_index('ix_med_logs_patient_id', 'med_logs', ['patient_id'])


def downgrade():
    op.drop_index('ix_med_logs_patient_id', table_name='med_logs')
    op.drop_table('med_logs')
    op.drop_index('ix_medications_patient_id', table_name='medications')
    op.drop_table('medications')
    op.drop_table('users')
