"""Initial schema: users, access requests and quiz tables

Revision ID: 3f9a1c2d7e40
Revises:
Create Date: 2026-10-19 09:12:03.114201

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '3f9a1c2d7e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('username', sa.String(length=50), nullable=True),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='student'),
            sa.Column('first_name', sa.String(length=100), nullable=False, server_default=''),
            sa.Column('last_name', sa.String(length=100), nullable=False, server_default=''),
            sa.Column('is_active_account', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('last_login', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('username')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_role', 'users', ['role'], unique=False)

    # One active (pending or accepted) request per pair through active_pair
    if 'access_requests' not in tables:
        op.create_table('access_requests',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('instructor_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('requested_at', sa.DateTime(), nullable=False),
            sa.Column('decided_at', sa.DateTime(), nullable=True),
            sa.Column('rejection_reason', sa.Text(), nullable=True),
            sa.Column('active_pair', sa.String(length=64), nullable=True),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('active_pair', name='uq_access_requests_active_pair')
        )
        op.create_index('ix_access_requests_student_id', 'access_requests', ['student_id'], unique=False)
        op.create_index('ix_access_requests_instructor_id', 'access_requests', ['instructor_id'], unique=False)
        op.create_index('ix_access_requests_status', 'access_requests', ['status'], unique=False)
        op.create_index('ix_access_requests_requested_at', 'access_requests', ['requested_at'], unique=False)
        op.create_index('ix_access_requests_pair_status', 'access_requests',
                        ['student_id', 'instructor_id', 'status'], unique=False)
        op.create_index('ix_access_requests_instructor_status', 'access_requests',
                        ['instructor_id', 'status'], unique=False)

    if 'quizzes' not in tables:
        op.create_table('quizzes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('instructor_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('difficulty', sa.String(length=20), nullable=False, server_default='medium'),
            sa.Column('tags', sa.String(length=500), nullable=False, server_default=''),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('time_limit', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('attempts_allowed', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('shuffle_questions', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('show_correct_answers', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('passing_score', sa.Integer(), nullable=False, server_default='70'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quizzes_instructor_id', 'quizzes', ['instructor_id'], unique=False)
        op.create_index('ix_quizzes_is_active', 'quizzes', ['is_active'], unique=False)
        op.create_index('ix_quizzes_created_at', 'quizzes', ['created_at'], unique=False)
        op.create_index('ix_quizzes_instructor_created', 'quizzes', ['instructor_id', 'created_at'], unique=False)

    if 'quiz_questions' not in tables:
        op.create_table('quiz_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('question_type', sa.String(length=20), nullable=False),
            sa.Column('correct_answer', sa.Text(), nullable=True),
            sa.Column('points', sa.Numeric(precision=6, scale=2), nullable=False, server_default='1.0'),
            sa.Column('explanation', sa.Text(), nullable=True),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_questions_quiz_id', 'quiz_questions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_questions_quiz_order', 'quiz_questions', ['quiz_id', 'order_index'], unique=False)

    if 'quiz_question_options' not in tables:
        op.create_table('quiz_question_options',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('is_correct', sa.Boolean(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['question_id'], ['quiz_questions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_question_options_question_id', 'quiz_question_options',
                        ['question_id'], unique=False)

    if 'quiz_assignments' not in tables:
        op.create_table('quiz_assignments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('assigned_at', sa.DateTime(), nullable=False),
            sa.Column('due_date', sa.DateTime(), nullable=True),
            sa.Column('completed', sa.Boolean(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('quiz_id', 'student_id', name='uq_quiz_assignment_student')
        )
        op.create_index('ix_quiz_assignments_quiz_id', 'quiz_assignments', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_assignments_student_id', 'quiz_assignments', ['student_id'], unique=False)

    # attempt_number is unique per (quiz, student); the attempt limit relies on it
    if 'quiz_submissions' not in tables:
        op.create_table('quiz_submissions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('attempt_number', sa.Integer(), nullable=False),
            sa.Column('score', sa.Numeric(precision=8, scale=2), nullable=False, server_default='0'),
            sa.Column('max_score', sa.Numeric(precision=8, scale=2), nullable=False, server_default='0'),
            sa.Column('started_at', sa.DateTime(), nullable=False),
            sa.Column('completed_at', sa.DateTime(), nullable=False),
            sa.Column('time_spent', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('quiz_id', 'student_id', 'attempt_number', name='uq_submission_attempt')
        )
        op.create_index('ix_quiz_submissions_quiz_id', 'quiz_submissions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_submissions_student_id', 'quiz_submissions', ['student_id'], unique=False)
        op.create_index('ix_quiz_submissions_completed_at', 'quiz_submissions', ['completed_at'], unique=False)
        op.create_index('ix_quiz_submissions_quiz_student', 'quiz_submissions',
                        ['quiz_id', 'student_id'], unique=False)

    if 'quiz_submission_answers' not in tables:
        op.create_table('quiz_submission_answers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('submission_id', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=True),
            sa.Column('submitted_value', sa.Text(), nullable=True),
            sa.Column('is_correct', sa.Boolean(), nullable=True),
            sa.Column('points_earned', sa.Numeric(precision=6, scale=2), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['submission_id'], ['quiz_submissions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('submission_id', 'position', name='uq_submission_answer_position')
        )
        op.create_index('ix_quiz_submission_answers_submission_id', 'quiz_submission_answers',
                        ['submission_id'], unique=False)

    if 'quiz_sessions' not in tables:
        op.create_table('quiz_sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('started_at', sa.DateTime(), nullable=False),
            sa.Column('submission_id', sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['submission_id'], ['quiz_submissions.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_sessions_quiz_id', 'quiz_sessions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_sessions_student_id', 'quiz_sessions', ['student_id'], unique=False)
        op.create_index('ix_quiz_sessions_quiz_student', 'quiz_sessions', ['quiz_id', 'student_id'], unique=False)


def downgrade():
    op.drop_index('ix_quiz_sessions_quiz_student', table_name='quiz_sessions')
    op.drop_index('ix_quiz_sessions_student_id', table_name='quiz_sessions')
    op.drop_index('ix_quiz_sessions_quiz_id', table_name='quiz_sessions')
    op.drop_table('quiz_sessions')

    op.drop_index('ix_quiz_submission_answers_submission_id', table_name='quiz_submission_answers')
    op.drop_table('quiz_submission_answers')

    op.drop_index('ix_quiz_submissions_quiz_student', table_name='quiz_submissions')
    op.drop_index('ix_quiz_submissions_completed_at', table_name='quiz_submissions')
    op.drop_index('ix_quiz_submissions_student_id', table_name='quiz_submissions')
    op.drop_index('ix_quiz_submissions_quiz_id', table_name='quiz_submissions')
    op.drop_table('quiz_submissions')

    op.drop_index('ix_quiz_assignments_student_id', table_name='quiz_assignments')
    op.drop_index('ix_quiz_assignments_quiz_id', table_name='quiz_assignments')
    op.drop_table('quiz_assignments')

    op.drop_index('ix_quiz_question_options_question_id', table_name='quiz_question_options')
    op.drop_table('quiz_question_options')

    op.drop_index('ix_quiz_questions_quiz_order', table_name='quiz_questions')
    op.drop_index('ix_quiz_questions_quiz_id', table_name='quiz_questions')
    op.drop_table('quiz_questions')

    op.drop_index('ix_quizzes_instructor_created', table_name='quizzes')
    op.drop_index('ix_quizzes_created_at', table_name='quizzes')
    op.drop_index('ix_quizzes_is_active', table_name='quizzes')
    op.drop_index('ix_quizzes_instructor_id', table_name='quizzes')
    op.drop_table('quizzes')

    op.drop_index('ix_access_requests_instructor_status', table_name='access_requests')
    op.drop_index('ix_access_requests_pair_status', table_name='access_requests')
    op.drop_index('ix_access_requests_requested_at', table_name='access_requests')
    op.drop_index('ix_access_requests_status', table_name='access_requests')
    op.drop_index('ix_access_requests_instructor_id', table_name='access_requests')
    op.drop_index('ix_access_requests_student_id', table_name='access_requests')
    op.drop_table('access_requests')

    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
