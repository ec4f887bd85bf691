"""
Quiz module.

Instructors create quizzes and assign them to their students; students with
an accepted access request take them and are graded automatically.
"""
from flask import Blueprint
from quizknow.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.QUIZ_API_PREFIX)

from quizknow.quiz import routes, instructor_routes, student_routes  # noqa: E402,F401
