"""
Pytest configuration and fixtures for testing.

Every test runs against a fresh in-memory SQLite database; route tests log
users in through Flask-Login's test client.
"""
import os

import pytest

# Set test environment variables BEFORE importing the app package, the
# blueprint prefixes are read from config at import time
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'test-secret-key-for-quizknow'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['MIN_PASSWORD_LENGTH'] = '8'
os.environ['DEFAULT_ATTEMPTS_ALLOWED'] = '1'
os.environ['DEFAULT_PASSING_SCORE'] = '70'

from flask import g  # noqa: E402
from flask_login import FlaskLoginClient  # noqa: E402

from quizknow import create_app, db  # noqa: E402
from quizknow.access.service import AccessService  # noqa: E402
from quizknow.auth.models import User  # noqa: E402
from quizknow.quiz.repository import QuizRepository  # noqa: E402
from quizknow.quiz.schemas import QuizCreate  # noqa: E402


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({'TESTING': True})
    app.test_client_class = FlaskLoginClient

    # Requests reuse the test's app context, so g outlives a single request;
    # drop the user Flask-Login cached there for the previous client
    @app.before_request
    def _reset_login_cache():
        g.pop('_login_user', None)

    yield app


@pytest.fixture(autouse=True)
def database(app):
    """Fresh schema per test, inside an application context."""
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield db
        db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Anonymous test client."""
    return app.test_client()


@pytest.fixture
def make_user(database):
    """Factory for users; the password hash is irrelevant outside auth tests."""
    counter = {'n': 0}

    def _make_user(role='student', first_name=None, last_name='Tester', email=None):
        counter['n'] += 1
        user = User(
            email=email or f"{role}{counter['n']}@example.com",
            password_hash='not-a-real-hash',
            role=role,
            first_name=first_name or role.capitalize(),
            last_name=last_name,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def student(make_user):
    return make_user('student', first_name='Sam')


@pytest.fixture
def instructor(make_user):
    return make_user('instructor', first_name='Ines')


@pytest.fixture
def other_instructor(make_user):
    return make_user('instructor', first_name='Oscar')


@pytest.fixture
def authorize():
    """Create and accept an access request for a (student, instructor) pair."""
    def _authorize(student, instructor):
        access_request = AccessService.create_request(student.id, instructor.id)
        return AccessService.decide(access_request.id, instructor.id, 'accept')
    return _authorize


def quiz_payload(**overrides):
    """Two questions worth one point each: multiple-choice "B" and true-false "true"."""
    data = {
        'title': 'Sample quiz',
        'description': 'Checks the basics',
        'questions': [
            {
                'question': 'Pick B',
                'type': 'multiple-choice',
                'options': [
                    {'text': 'A'},
                    {'text': 'B', 'isCorrect': True},
                    {'text': 'C'},
                ],
                'points': 1,
            },
            {
                'question': 'The answer is true',
                'type': 'true-false',
                'correctAnswer': 'true',
                'points': 1,
            },
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_quiz():
    """Factory for quizzes owned by a given instructor."""
    def _make_quiz(instructor, **overrides):
        return QuizRepository.create_quiz(instructor.id, QuizCreate.model_validate(quiz_payload(**overrides)))
    return _make_quiz


@pytest.fixture
def login(app):
    """Return a test client logged in as the given user."""
    def _login(user):
        return app.test_client(user=user)
    return _login


@pytest.fixture
def quiz_data():
    """Builder for quiz request bodies, see ``quiz_payload``."""
    return quiz_payload
