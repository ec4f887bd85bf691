"""Quiz read routes shared by every role."""
from flask import jsonify
from flask_login import current_user

from quizknow.common.decorators import role_required
from quizknow.quiz import quiz_bp
from quizknow.quiz.repository import QuizRepository
from quizknow.quiz.serializers import quiz_to_dict


@quiz_bp.route('/', methods=['GET'])
@role_required('student', 'instructor', 'admin')
def list_quizzes():
    """
    List quizzes visible to the current user.
    Students get active quizzes of their instructors without answer keys.
    """
    quizzes = QuizRepository.list_quizzes_for(current_user.id, current_user.role)
    include_answers = not current_user.is_student()
    return jsonify({
        'success': True,
        'quizzes': [quiz_to_dict(q, include_answers, viewer_id=current_user.id) for q in quizzes],
    }), 200


@quiz_bp.route('/<int:quiz_id>', methods=['GET'])
@role_required('student', 'instructor', 'admin')
def get_quiz(quiz_id):
    quiz = QuizRepository.get_quiz(quiz_id, current_user.id, current_user.role)
    include_answers = not current_user.is_student()
    return jsonify({
        'success': True,
        'quiz': quiz_to_dict(quiz, include_answers, viewer_id=current_user.id),
    }), 200
