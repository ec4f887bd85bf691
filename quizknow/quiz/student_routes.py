"""
Student routes for quiz functionality.

Students can:
- Start a quiz of an instructor who accepted their request
- Submit answers and get their score
- List their own attempts and overall progress
"""
from flask import current_app, jsonify, request
from flask_login import current_user

from quizknow.common.decorators import student_required
from quizknow.common.validation import parse_payload
from quizknow.quiz import quiz_bp
from quizknow.quiz.progress import ProgressAggregator
from quizknow.quiz.repository import QuizRepository
from quizknow.quiz.schemas import SubmissionCreate
from quizknow.quiz.serializers import session_to_dict, submission_to_dict
from quizknow.quiz.submission import SubmissionPipeline


@quiz_bp.route('/student-progress', methods=['GET'])
@student_required
def student_progress():
    """Progress records and stats across every quiz the student can see."""
    progress = ProgressAggregator.student_progress(current_user.id)
    return jsonify({'success': True, **progress.to_dict()}), 200


@quiz_bp.route('/<int:quiz_id>/start', methods=['POST'])
@student_required
def start_quiz(quiz_id):
    """Open an attempt. Calling it again before submitting returns the same session."""
    session = SubmissionPipeline.start_attempt(quiz_id, current_user.id)
    return jsonify({
        'success': True,
        'session': session_to_dict(session),
        'attempts_used': SubmissionPipeline.count_attempts(quiz_id, current_user.id),
        'attempts_allowed': session.quiz.attempts_allowed,
    }), 200


@quiz_bp.route('/<int:quiz_id>/submit', methods=['POST'])
@student_required
def submit_quiz(quiz_id):
    """
    Submit answers for a quiz.

    Request body:
    {
        "answers": ["4", true, null],  // Aligned with question positions
        "timeSpent": 95,  // Optional, seconds
        "startedAt": "2026-03-01T10:00:00Z"  // Optional, used when no session was started
    }
    """
    payload = parse_payload(SubmissionCreate, request.get_json(silent=True))
    submission = SubmissionPipeline.submit(
        quiz_id,
        current_user.id,
        payload.answers,
        time_spent=payload.time_spent,
        started_at=payload.started_at,
    )
    quiz = submission.quiz
    current_app.logger.info(
        f"Student {current_user.id} submitted quiz {quiz_id}: {submission.score}/{submission.max_score}"
    )
    return jsonify({
        'success': True,
        'message': 'Quiz submitted successfully',
        'submission': submission_to_dict(submission, include_answers=quiz.show_correct_answers),
        'passed': submission.is_passing(quiz.passing_score),
    }), 201


@quiz_bp.route('/<int:quiz_id>/attempts', methods=['GET'])
@student_required
def list_attempts(quiz_id):
    """The current student's attempts on a quiz, newest first."""
    quiz = QuizRepository.get_quiz(quiz_id, current_user.id, current_user.role)
    attempts = SubmissionPipeline.list_attempts(quiz_id, current_user.id)
    return jsonify({
        'success': True,
        'quiz_id': quiz_id,
        'attempts': [submission_to_dict(a, include_answers=quiz.show_correct_answers) for a in attempts],
        'attempts_allowed': quiz.attempts_allowed,
    }), 200
