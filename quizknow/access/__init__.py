"""
Access request module.

Students ask an instructor for access; the instructor accepts or rejects.
An accepted request is what lets a student see and take the instructor's quizzes.
"""
from flask import Blueprint
from quizknow.config import config

access_bp = Blueprint('access', __name__, url_prefix=config.ACCESS_API_PREFIX)

from quizknow.access import routes  # noqa: E402,F401
