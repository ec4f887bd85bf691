"""
Instructor routes for quiz management.

Instructors can:
- Create, update and delete their own quizzes
- Assign a quiz to one of their students with an optional due date
- View submissions and a results summary for their quizzes
"""
from flask import jsonify, request
from flask_login import current_user

from quizknow.common.decorators import instructor_required
from quizknow.common.time_utils import isoformat
from quizknow.common.validation import parse_payload
from quizknow.quiz import quiz_bp
from quizknow.quiz.progress import ProgressAggregator
from quizknow.quiz.repository import QuizRepository
from quizknow.quiz.schemas import AssignmentCreate, QuizCreate, QuizUpdate
from quizknow.quiz.serializers import quiz_to_dict, submission_to_dict
from quizknow.quiz.submission import SubmissionPipeline


@quiz_bp.route('/', methods=['POST'])
@instructor_required
def create_quiz():
    """
    Create a new quiz.

    Request body:
    {
        "title": "Quiz Title",
        "description": "Optional description",
        "questions": [
            {"question": "2 + 2?", "type": "multiple-choice",
             "options": [{"text": "3"}, {"text": "4", "isCorrect": true}], "points": 1},
            {"question": "The sky is blue", "type": "true-false", "correctAnswer": "true"}
        ],
        "settings": {"attemptsAllowed": 2, "passingScore": 60},  // Optional
        "difficulty": "easy",  // Optional, default medium
        "tags": ["math"]  // Optional
    }
    """
    payload = parse_payload(QuizCreate, request.get_json(silent=True))
    quiz = QuizRepository.create_quiz(current_user.id, payload)
    return jsonify({
        'success': True,
        'message': 'Quiz created successfully',
        'quiz': quiz_to_dict(quiz),
    }), 201


@quiz_bp.route('/<int:quiz_id>', methods=['PUT'])
@instructor_required
def update_quiz(quiz_id):
    """Update a quiz. Only the fields present in the body change."""
    payload = parse_payload(QuizUpdate, request.get_json(silent=True))
    quiz = QuizRepository.update_quiz(quiz_id, current_user.id, payload)
    return jsonify({
        'success': True,
        'message': 'Quiz updated successfully',
        'quiz': quiz_to_dict(quiz),
    }), 200


@quiz_bp.route('/<int:quiz_id>', methods=['DELETE'])
@instructor_required
def delete_quiz(quiz_id):
    QuizRepository.delete_quiz(quiz_id, current_user.id)
    return jsonify({'success': True, 'message': 'Quiz deleted successfully'}), 200


@quiz_bp.route('/<int:quiz_id>/assign', methods=['POST'])
@instructor_required
def assign_quiz(quiz_id):
    """Assign a quiz to a student: {"student_id": 12, "due_date": "2026-05-01T12:00:00Z"}."""
    payload = parse_payload(AssignmentCreate, request.get_json(silent=True))
    assignment = QuizRepository.assign_quiz(quiz_id, current_user.id, payload.student_id, payload.due_date)
    return jsonify({
        'success': True,
        'message': 'Quiz assigned successfully',
        'assignment': {
            'quiz_id': assignment.quiz_id,
            'student_id': assignment.student_id,
            'due_date': isoformat(assignment.due_date),
            'completed': assignment.completed,
        },
    }), 200


@quiz_bp.route('/<int:quiz_id>/submissions', methods=['GET'])
@instructor_required
def list_submissions(quiz_id):
    """All attempts on one of the instructor's quizzes, oldest first."""
    submissions = SubmissionPipeline.get_submissions(quiz_id, current_user.id)
    data = []
    for submission in submissions:
        item = submission_to_dict(submission)
        item['student_name'] = submission.student.full_name if submission.student else None
        data.append(item)
    return jsonify({'success': True, 'quiz_id': quiz_id, 'submissions': data}), 200


@quiz_bp.route('/<int:quiz_id>/summary', methods=['GET'])
@instructor_required
def quiz_summary(quiz_id):
    return jsonify({
        'success': True,
        'summary': ProgressAggregator.quiz_summary(quiz_id, current_user.id),
    }), 200
