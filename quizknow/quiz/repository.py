"""
Quiz repository.

Owns quiz definitions, their questions and assignment rows. Submissions are
read here but only ever written by ``SubmissionPipeline``.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizknow import db
from quizknow.access.service import AccessService
from quizknow.auth.models import User
from quizknow.common.errors import Forbidden, InvalidState, NotFound, StorageError, ValidationError
from quizknow.common.time_utils import to_naive_utc
from quizknow.quiz.models import Quiz, Question, QuestionOption, QuizAssignment, Submission
from quizknow.quiz.schemas import QuizCreate, QuizUpdate, SettingsPayload
from quizknow.security.security_logger import SecurityLogger


SETTING_FIELDS = ('time_limit', 'attempts_allowed', 'shuffle_questions', 'show_correct_answers', 'passing_score')


def _commit(action: str):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"Error while trying to {action}")
        raise StorageError(f"Failed to {action}") from e


class QuizRepository:
    """Service class for quiz definitions."""

    @staticmethod
    def _build_questions(payloads) -> list[Question]:
        limit = current_app.config["MAX_QUESTIONS_PER_QUIZ"]
        if len(payloads) > limit:
            raise ValidationError(f"A quiz can have at most {limit} questions")

        questions = []
        for index, payload in enumerate(payloads):
            question = Question(
                order_index=index,
                text=payload.text,
                question_type=payload.type,
                correct_answer=payload.correct_answer,
                points=payload.points,
                explanation=payload.explanation,
            )
            question.options = [
                QuestionOption(order_index=i, text=o.text, is_correct=o.is_correct)
                for i, o in enumerate(payload.options)
            ]
            questions.append(question)
        return questions

    @staticmethod
    def _apply_settings(quiz: Quiz, settings: SettingsPayload) -> None:
        for name in SETTING_FIELDS:
            value = getattr(settings, name)
            if value is not None:
                setattr(quiz, name, value)

    @staticmethod
    def get_quiz_or_404(quiz_id: int) -> Quiz:
        quiz = db.session.get(Quiz, quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        return quiz

    @staticmethod
    def get_owned_quiz(quiz_id: int, instructor_id: int, action: str = "modify") -> Quiz:
        """Load a quiz and check the caller created it."""
        quiz = QuizRepository.get_quiz_or_404(quiz_id)
        if quiz.instructor_id != instructor_id:
            SecurityLogger.log_unauthorized_access(f"quiz:{quiz_id}", instructor_id)
            raise Forbidden(f"Only the instructor who created the quiz can {action} it")
        return quiz

    @staticmethod
    def create_quiz(instructor_id: int, payload: QuizCreate) -> Quiz:
        instructor = db.session.get(User, instructor_id)
        if not instructor or not instructor.is_instructor():
            raise Forbidden("Only instructors can create quizzes")

        quiz = Quiz(
            instructor_id=instructor_id,
            title=payload.title.strip(),
            description=payload.description.strip(),
            difficulty=payload.difficulty,
            tags=",".join(t.strip() for t in payload.tags if t.strip()),
            time_limit=0,
            attempts_allowed=current_app.config["DEFAULT_ATTEMPTS_ALLOWED"],
            shuffle_questions=False,
            show_correct_answers=True,
            passing_score=current_app.config["DEFAULT_PASSING_SCORE"],
        )
        QuizRepository._apply_settings(quiz, payload.settings)
        quiz.questions = QuizRepository._build_questions(payload.questions)

        db.session.add(quiz)
        _commit("create quiz")
        current_app.logger.info(f"Quiz {quiz.id} created by instructor {instructor_id}")
        return quiz

    @staticmethod
    def update_quiz(quiz_id: int, instructor_id: int, payload: QuizUpdate) -> Quiz:
        """
        Update the provided fields of a quiz.

        Questions cannot be replaced once a submission exists; stored scores
        are aligned with the question list they were graded against.
        """
        quiz = QuizRepository.get_owned_quiz(quiz_id, instructor_id, "update")

        if payload.questions is not None:
            if QuizRepository.has_submissions(quiz.id):
                raise InvalidState("Questions cannot be changed after students have submitted")
            quiz.questions = QuizRepository._build_questions(payload.questions)

        if payload.title is not None:
            quiz.title = payload.title.strip()
        if payload.description is not None:
            quiz.description = payload.description.strip()
        if payload.difficulty is not None:
            quiz.difficulty = payload.difficulty
        if payload.tags is not None:
            quiz.tags = ",".join(t.strip() for t in payload.tags if t.strip())
        if payload.is_active is not None:
            quiz.is_active = payload.is_active
        if payload.settings is not None:
            QuizRepository._apply_settings(quiz, payload.settings)

        _commit("update quiz")
        current_app.logger.info(f"Quiz {quiz.id} updated by instructor {instructor_id}")
        return quiz

    @staticmethod
    def delete_quiz(quiz_id: int, instructor_id: int) -> None:
        quiz = QuizRepository.get_owned_quiz(quiz_id, instructor_id, "delete")
        db.session.delete(quiz)
        _commit("delete quiz")
        current_app.logger.info(f"Quiz {quiz_id} deleted by instructor {instructor_id}")

    @staticmethod
    def get_quiz(quiz_id: int, user_id: int, role: str) -> Quiz:
        """
        Load a quiz the caller may read: its owner, an admin, or a student
        with an accepted request to the owner (active quizzes only).
        """
        quiz = QuizRepository.get_quiz_or_404(quiz_id)
        if role == 'admin' or quiz.instructor_id == user_id:
            return quiz
        if role == 'student' and AccessService.is_authorized(user_id, quiz.instructor_id):
            if not quiz.is_active:
                raise NotFound("Quiz not found")
            return quiz
        SecurityLogger.log_unauthorized_access(f"quiz:{quiz_id}", user_id)
        raise Forbidden("You are not authorized to view this quiz")

    @staticmethod
    def list_quizzes_for(user_id: int, role: str) -> list[Quiz]:
        """Students see active quizzes of their instructors; instructors see their own."""
        query = Quiz.query
        if role == 'student':
            instructor_ids = AccessService.authorized_instructor_ids(user_id)
            if not instructor_ids:
                return []
            query = query.filter(Quiz.instructor_id.in_(instructor_ids), Quiz.is_active.is_(True))
        elif role == 'instructor':
            query = query.filter(Quiz.instructor_id == user_id)
        elif role != 'admin':
            raise Forbidden("Unknown role")
        return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()

    @staticmethod
    def assign_quiz(quiz_id: int, instructor_id: int, student_id: int, due_date=None) -> QuizAssignment:
        """Earmark a quiz for one of the instructor's students, updating the due date if already assigned."""
        quiz = QuizRepository.get_owned_quiz(quiz_id, instructor_id, "assign")
        if not AccessService.is_authorized(student_id, quiz.instructor_id):
            raise ValidationError("Student does not have access to this instructor")

        assignment = QuizAssignment.query.filter_by(quiz_id=quiz_id, student_id=student_id).first()
        if assignment:
            assignment.due_date = to_naive_utc(due_date)
        else:
            assignment = QuizAssignment(quiz_id=quiz_id, student_id=student_id, due_date=to_naive_utc(due_date))
            db.session.add(assignment)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise InvalidState("Quiz is already being assigned to this student")
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"Error assigning quiz {quiz_id} to student {student_id}")
            raise StorageError("Failed to assign quiz") from e
        return assignment

    @staticmethod
    def get_assignment(quiz_id: int, student_id: int) -> QuizAssignment | None:
        return QuizAssignment.query.filter_by(quiz_id=quiz_id, student_id=student_id).first()

    @staticmethod
    def has_submissions(quiz_id: int) -> bool:
        return db.session.query(Submission.query.filter_by(quiz_id=quiz_id).exists()).scalar()
