"""
JSON views of quiz rows.

Students never receive answer keys (``is_correct`` flags, ``correct_answer``,
explanations) through ``quiz_to_dict``.
"""
import random

from quizknow.common.time_utils import isoformat
from quizknow.quiz import scoring


def question_to_dict(question, position: int, include_answers: bool) -> dict:
    data = {
        'id': question.id,
        'position': position,
        'text': question.text,
        'type': question.question_type,
        'points': scoring.question_points(question),
    }
    if question.question_type == 'multiple-choice':
        data['options'] = [
            {'text': o.text, 'is_correct': o.is_correct} if include_answers else {'text': o.text}
            for o in question.options
        ]
    if include_answers:
        data['correct_answer'] = scoring.canonical_answer(question)
        data['explanation'] = question.explanation
    return data


def quiz_to_dict(quiz, include_answers: bool = True, viewer_id: int = None) -> dict:
    """
    Serialize a quiz.

    With ``shuffle_questions`` set, the student view is shuffled with a seed
    derived from the quiz and the viewer, so a student sees a stable order.
    Every question keeps its ``position`` so answers can be aligned.
    """
    questions = [question_to_dict(q, i, include_answers) for i, q in enumerate(quiz.questions)]
    if quiz.shuffle_questions and not include_answers:
        random.Random(f"{quiz.id}:{viewer_id}").shuffle(questions)

    return {
        'id': quiz.id,
        'instructor_id': quiz.instructor_id,
        'title': quiz.title,
        'description': quiz.description,
        'difficulty': quiz.difficulty,
        'tags': quiz.tag_list,
        'is_active': quiz.is_active,
        'settings': quiz.settings,
        'question_count': len(questions),
        'max_score': scoring.max_score(quiz.questions),
        'questions': questions,
        'created_at': isoformat(quiz.created_at),
        'updated_at': isoformat(quiz.updated_at),
    }


def submission_to_dict(submission, include_answers: bool = True) -> dict:
    data = {
        'id': submission.id,
        'quiz_id': submission.quiz_id,
        'student_id': submission.student_id,
        'attempt_number': submission.attempt_number,
        'score': float(submission.score),
        'max_score': float(submission.max_score),
        'percentage': round(submission.percentage, 2),
        'started_at': isoformat(submission.started_at),
        'completed_at': isoformat(submission.completed_at),
        'time_spent': submission.time_spent,
    }
    if include_answers:
        data['answers'] = [
            {
                'position': a.position,
                'question_id': a.question_id,
                'submitted_value': a.submitted_value,
                'is_correct': a.is_correct,
                'points_earned': float(a.points_earned),
            }
            for a in submission.answers
        ]
    return data


def session_to_dict(session) -> dict:
    return {
        'id': session.id,
        'quiz_id': session.quiz_id,
        'student_id': session.student_id,
        'started_at': isoformat(session.started_at),
        'is_open': session.is_open,
    }
