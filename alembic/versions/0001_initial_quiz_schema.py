"""initial quiz schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('admission_no', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'classes',
        *_base_columns(),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
    )

    op.create_table(
        'class_memberships',
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_index('ix_class_memberships_class_id', 'class_memberships', ['class_id'])

    op.create_table(
        'questions',
        *_base_columns(),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(100), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.CheckConstraint('correct_answer >= 0 AND correct_answer <= 4', name='ck_questions_correct_answer_range'),
    )

    op.create_table(
        'question_classes',
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'assignments',
        *_base_columns(),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('quiz_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('class_id', 'quiz_number', name='uq_assignments_class_quiz_number'),
    )
    op.create_index('ix_assignments_class_id', 'assignments', ['class_id'])
    op.create_index('ix_assignments_is_active', 'assignments', ['is_active'])
    op.create_index('ix_assignments_assigned_at', 'assignments', ['assigned_at'])

    op.create_table(
        'assignment_questions',
        sa.Column('assignment_id', sa.Uuid(), sa.ForeignKey('assignments.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )
    op.create_index('ix_assignment_questions_question_id', 'assignment_questions', ['question_id'])

    op.create_table(
        'responses',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assignment_id', sa.Uuid(), sa.ForeignKey('assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('selected_answer', sa.Integer(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('response_time_ms', sa.Integer(), nullable=False),
        sa.Column('answered_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('rtt_ms', sa.Float(), nullable=True),
        sa.Column('jitter_ms', sa.Float(), nullable=True),
        sa.Column('stability_percent', sa.Float(), nullable=True),
        sa.Column('network_quality', sa.String(20), nullable=True),
        sa.UniqueConstraint(
            'student_id', 'question_id', 'assignment_id',
            name='uq_responses_student_question_assignment',
        ),
        sa.CheckConstraint('selected_answer >= 0 AND selected_answer <= 4', name='ck_responses_selected_answer_range'),
        sa.CheckConstraint('response_time_ms >= 0', name='ck_responses_response_time_non_negative'),
    )
    op.create_index('ix_responses_student_id', 'responses', ['student_id'])
    op.create_index('ix_responses_question_id', 'responses', ['question_id'])
    op.create_index('ix_responses_assignment_id', 'responses', ['assignment_id'])
    op.create_index('ix_responses_class_id', 'responses', ['class_id'])
    op.create_index('ix_responses_answered_at', 'responses', ['answered_at'])
    op.create_index('ix_responses_question_correct', 'responses', ['question_id', 'is_correct'])

    op.create_table(
        'quiz_sessions',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assignment_id', sa.Uuid(), sa.ForeignKey('assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('current_question_index', sa.Integer(), nullable=False),
        sa.Column('questions_answered', sa.Integer(), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_activity_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('student_id', 'assignment_id', name='uq_quiz_sessions_student_assignment'),
    )
    op.create_index('ix_quiz_sessions_student_id', 'quiz_sessions', ['student_id'])
    op.create_index('ix_quiz_sessions_assignment_status', 'quiz_sessions', ['assignment_id', 'status'])


def downgrade() -> None:
    op.drop_table('quiz_sessions')
    op.drop_table('responses')
    op.drop_table('assignment_questions')
    op.drop_table('assignments')
    op.drop_table('question_classes')
    op.drop_table('questions')
    op.drop_table('class_memberships')
    op.drop_table('classes')
    op.drop_table('users')
