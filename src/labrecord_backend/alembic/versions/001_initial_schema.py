"""Initial lab record schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEPARTMENT_CHECK = "department IN ('CSE', 'IT', 'AIDS')"


def upgrade() -> None:
    # Principals
    op.create_table('profile',
        sa.Column('id', sa.String(255), primary_key=True),
        sa.Column('full_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('role', sa.Enum('admin', 'faculty', 'student', name='app_role'), nullable=False, server_default='student'),
        sa.Column('department', sa.String(16)),
        sa.Column('created_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('admin', 'faculty', 'student')", name='ck_profile_role'),
        sa.CheckConstraint(DEPARTMENT_CHECK, name='ck_profile_department'),
    )

    # Resource hierarchy
    op.create_table('subject',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(64)),
        sa.Column('department', sa.String(16)),
        sa.Column('description', sa.Text),
        sa.Column('created_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(DEPARTMENT_CHECK, name='ck_subject_department'),
    )

    op.create_table('experiment',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('subject_id', sa.String(36), sa.ForeignKey('subject.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('experiment_number', sa.Integer),
        sa.Column('due_date', sa.Date),
        sa.Column('created_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_experiment_subject_id', 'experiment', ['subject_id'])

    # Relations
    op.create_table('student_subject',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('student_id', sa.String(255), sa.ForeignKey('profile.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', sa.String(36), sa.ForeignKey('subject.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('student_id', 'subject_id', name='uq_student_subject'),
    )
    op.create_index('ix_student_subject_student_id', 'student_subject', ['student_id'])
    op.create_index('ix_student_subject_subject_id', 'student_subject', ['subject_id'])

    op.create_table('faculty_subject',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('faculty_id', sa.String(255), sa.ForeignKey('profile.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', sa.String(36), sa.ForeignKey('subject.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('faculty_id', 'subject_id', name='uq_faculty_subject'),
    )
    op.create_index('ix_faculty_subject_faculty_id', 'faculty_subject', ['faculty_id'])
    op.create_index('ix_faculty_subject_subject_id', 'faculty_subject', ['subject_id'])

    # Submissions and their evaluation
    op.create_table('experiment_submission',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('experiment_id', sa.String(36), sa.ForeignKey('experiment.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(255), sa.ForeignKey('profile.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.Text),
        sa.Column('language', sa.String(32)),
        sa.Column('file_url', sa.String(2048)),
        sa.Column('state', sa.String(16), nullable=False, server_default='submitted'),
        sa.Column('submitted_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('experiment_id', 'student_id', name='uq_submission_experiment_student'),
        sa.CheckConstraint("state IN ('draft', 'submitted')", name='ck_submission_state'),
    )
    op.create_index('ix_experiment_submission_experiment_id', 'experiment_submission', ['experiment_id'])
    op.create_index('ix_experiment_submission_student_id', 'experiment_submission', ['student_id'])

    op.create_table('evaluation',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('submission_id', sa.String(36), sa.ForeignKey('experiment_submission.id', ondelete='CASCADE'), nullable=False),
        sa.Column('faculty_id', sa.String(255), sa.ForeignKey('profile.id', ondelete='CASCADE'), nullable=False),
        sa.Column('marks', sa.Integer),
        sa.Column('feedback', sa.Text),
        sa.Column('evaluated_at', sa.DateTime(True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('submission_id', name='uq_evaluation_submission'),
        sa.CheckConstraint('marks >= 0 AND marks <= 100', name='ck_evaluation_marks'),
    )
    op.create_index('ix_evaluation_faculty_id', 'evaluation', ['faculty_id'])


def downgrade() -> None:
    op.drop_table('evaluation')
    op.drop_table('experiment_submission')
    op.drop_table('faculty_subject')
    op.drop_table('student_subject')
    op.drop_table('experiment')
    op.drop_table('subject')
    op.drop_table('profile')

    sa.Enum(name='app_role').drop(op.get_bind(), checkfirst=True)
