"""
Submission pipeline.

Order of checks for ``submit``: quiz exists, student has an accepted access
request to the quiz owner, attempt limit, scoring, then one transactional
insert. The insert uses ``attempt_number = count + 1`` under the unique
(quiz, student, attempt_number) constraint, so two concurrent submissions
that read the same count cannot both be stored. The loser rolls back and
re-runs the check once.
"""
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizknow import db
from quizknow.access.service import AccessService
from quizknow.common.errors import AttemptsExceeded, Forbidden, InvalidState, NotFound, StorageError, ValidationError
from quizknow.common.time_utils import to_naive_utc, utcnow
from quizknow.quiz import scoring
from quizknow.quiz.models import Quiz, QuizAssignment, QuizSession, Submission, SubmissionAnswer
from quizknow.quiz.repository import QuizRepository
from quizknow.security.security_logger import SecurityLogger


CONFLICT_RETRIES = 1


class SubmissionPipeline:
    """Service class for starting and submitting quiz attempts."""

    @staticmethod
    def _load_authorized_quiz(quiz_id: int, student_id: int) -> Quiz:
        quiz = db.session.get(Quiz, quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        if not AccessService.is_authorized(student_id, quiz.instructor_id):
            SecurityLogger.log_unauthorized_access(f"quiz:{quiz_id}", student_id)
            raise Forbidden("You are not authorized to take this quiz")
        return quiz

    @staticmethod
    def count_attempts(quiz_id: int, student_id: int) -> int:
        return Submission.query.filter_by(quiz_id=quiz_id, student_id=student_id).count()

    @staticmethod
    def _check_attempt_limit(quiz: Quiz, student_id: int) -> int:
        count = SubmissionPipeline.count_attempts(quiz.id, student_id)
        if count >= quiz.attempts_allowed:
            SecurityLogger.log_attempts_exceeded(quiz.id, student_id, quiz.attempts_allowed)
            raise AttemptsExceeded(f"Maximum attempts ({quiz.attempts_allowed}) reached for this quiz")
        return count

    @staticmethod
    def open_session(quiz_id: int, student_id: int) -> QuizSession | None:
        return QuizSession.query.filter_by(
            quiz_id=quiz_id,
            student_id=student_id,
            submission_id=None,
        ).order_by(QuizSession.started_at.desc()).first()

    @staticmethod
    def start_attempt(quiz_id: int, student_id: int) -> QuizSession:
        """
        Record that a student opened a quiz.

        An open session is returned as is, so reloading the quiz page does
        not reset the clock.
        """
        quiz = SubmissionPipeline._load_authorized_quiz(quiz_id, student_id)
        if not quiz.is_active:
            raise InvalidState("This quiz is not available")
        SubmissionPipeline._check_attempt_limit(quiz, student_id)

        session = SubmissionPipeline.open_session(quiz_id, student_id)
        if session:
            return session

        session = QuizSession(quiz_id=quiz_id, student_id=student_id, started_at=utcnow())
        db.session.add(session)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"Error starting quiz {quiz_id} for student {student_id}")
            raise StorageError("Failed to start quiz") from e

        current_app.logger.info(f"Quiz {quiz_id} started by student {student_id}")
        return session

    @staticmethod
    def _resolve_timing(session: QuizSession | None, completed_at: datetime,
                        time_spent: int | None, started_at: datetime | None) -> tuple[datetime, int]:
        """
        Pick ``started_at`` from the open session, else from the caller, else
        ``completed_at - time_spent``. ``time_spent`` defaults to the elapsed time.
        """
        if session is not None:
            start = session.started_at
        elif started_at is not None:
            start = to_naive_utc(started_at)
        elif time_spent is not None:
            start = completed_at - timedelta(seconds=time_spent)
        else:
            start = completed_at

        if start > completed_at:
            raise ValidationError("started_at cannot be in the future")
        if time_spent is None:
            time_spent = int((completed_at - start).total_seconds())
        return start, time_spent

    @staticmethod
    def _append(quiz: Quiz, student_id: int, answers: list, time_spent: int | None,
                started_at: datetime | None) -> Submission:
        count = SubmissionPipeline._check_attempt_limit(quiz, student_id)
        breakdown = scoring.score(quiz.questions, answers)

        completed_at = utcnow()
        session = SubmissionPipeline.open_session(quiz.id, student_id)
        start, elapsed = SubmissionPipeline._resolve_timing(session, completed_at, time_spent, started_at)

        submission = Submission(
            quiz_id=quiz.id,
            student_id=student_id,
            attempt_number=count + 1,
            score=breakdown.total_score,
            max_score=breakdown.max_score,
            started_at=start,
            completed_at=completed_at,
            time_spent=elapsed,
        )
        submission.answers = [
            SubmissionAnswer(
                position=position,
                question_id=result.question_id,
                submitted_value=result.submitted_value,
                is_correct=result.is_correct,
                points_earned=result.points_earned,
            )
            for position, result in enumerate(breakdown.per_question)
        ]
        db.session.add(submission)
        # Raises IntegrityError when another submission took this attempt number
        db.session.flush()

        if session is not None:
            session.submission_id = submission.id
        assignment = QuizAssignment.query.filter_by(quiz_id=quiz.id, student_id=student_id).first()
        if assignment is not None:
            assignment.completed = True

        db.session.commit()
        return submission

    @staticmethod
    def submit(quiz_id: int, student_id: int, answers: list, time_spent: int = None,
               started_at: datetime = None) -> Submission:
        """
        Grade and store one attempt.

        Raises:
            NotFound: quiz does not exist
            Forbidden: no accepted access request to the quiz owner
            InvalidState: quiz is deactivated
            AttemptsExceeded: attempt limit already reached, or the retry after
                a concurrent submission conflicted again
            ValidationError: negative time_spent or a started_at in the future
            StorageError: the store failed; nothing was written
        """
        if time_spent is not None and time_spent < 0:
            raise ValidationError("time_spent must be zero or positive")

        quiz = SubmissionPipeline._load_authorized_quiz(quiz_id, student_id)
        if not quiz.is_active:
            raise InvalidState("This quiz is not available")

        for attempt in range(CONFLICT_RETRIES + 1):
            try:
                submission = SubmissionPipeline._append(quiz, student_id, answers, time_spent, started_at)
                break
            except IntegrityError:
                db.session.rollback()
                current_app.logger.warning(
                    f"Concurrent submission detected for quiz {quiz_id}, student {student_id} (try {attempt + 1})"
                )
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.exception(f"Error submitting quiz {quiz_id} for student {student_id}")
                raise StorageError("Failed to submit quiz") from e
            except Exception:
                db.session.rollback()
                raise
        else:
            # Every try lost to a concurrent submission that used up the attempt
            SecurityLogger.log_attempts_exceeded(quiz_id, student_id, quiz.attempts_allowed)
            raise AttemptsExceeded(f"Maximum attempts ({quiz.attempts_allowed}) reached for this quiz")

        SecurityLogger.log_submission(quiz_id, student_id, {
            'submission_id': submission.id,
            'attempt': submission.attempt_number,
            'score': float(submission.score),
            'max_score': float(submission.max_score),
        })
        return submission

    @staticmethod
    def get_submissions(quiz_id: int, requesting_instructor_id: int) -> list[Submission]:
        """All attempts on a quiz, for the instructor who owns it."""
        quiz = QuizRepository.get_owned_quiz(quiz_id, requesting_instructor_id, "view submissions of")
        return quiz.submissions.order_by(Submission.completed_at, Submission.id).all()

    @staticmethod
    def list_attempts(quiz_id: int, student_id: int) -> list[Submission]:
        """A student's own attempts, newest first."""
        QuizRepository.get_quiz_or_404(quiz_id)
        return Submission.query.filter_by(
            quiz_id=quiz_id,
            student_id=student_id,
        ).order_by(Submission.attempt_number.desc()).all()
