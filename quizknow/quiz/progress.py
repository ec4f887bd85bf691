"""
Progress aggregation.

Nothing here is stored; every record is rebuilt from quizzes, submissions,
sessions and assignment rows, filtered by the student's accepted access
requests.
"""
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime

from quizknow import db
from quizknow.access.service import AccessService
from quizknow.common.time_utils import isoformat, to_naive_utc, utcnow
from quizknow.quiz import scoring
from quizknow.quiz.models import Quiz, QuizAssignment, QuizSession, Submission
from quizknow.quiz.repository import QuizRepository


STATUS_COMPLETED = 'completed'
STATUS_IN_PROGRESS = 'in-progress'
STATUS_NOT_STARTED = 'not-started'


@dataclass
class ProgressRecord:
    quiz_id: int
    title: str
    description: str
    status: str
    total_questions: int
    completed_questions: int
    score: float | None
    max_score: float
    time_spent: int
    attempts: int
    max_attempts: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    due_date: datetime | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ('started_at', 'completed_at', 'due_date'):
            data[key] = isoformat(data[key])
        return data


@dataclass
class StudentStats:
    total_quizzes: int = 0
    completed_quizzes: int = 0
    average_score: float = 0.0
    total_time_spent: int = 0
    upcoming_quizzes: int = 0
    overdue_quizzes: int = 0


@dataclass
class StudentProgress:
    quiz_progress: list[ProgressRecord] = field(default_factory=list)
    stats: StudentStats = field(default_factory=StudentStats)

    def to_dict(self) -> dict:
        return {
            'quiz_progress': [r.to_dict() for r in self.quiz_progress],
            'stats': asdict(self.stats),
        }


class ProgressAggregator:

    @staticmethod
    def _build_record(quiz: Quiz, submissions: list[Submission], session: QuizSession | None,
                      assignment: QuizAssignment | None) -> ProgressRecord:
        total_questions = len(quiz.questions)
        latest = submissions[-1] if submissions else None

        if latest is not None:
            status = STATUS_COMPLETED
        elif session is not None:
            status = STATUS_IN_PROGRESS
        else:
            status = STATUS_NOT_STARTED

        if latest is not None:
            completed_questions = sum(1 for a in latest.answers if a.submitted_value is not None)
            max_score = float(latest.max_score)
        else:
            completed_questions = 0
            max_score = scoring.max_score(quiz.questions)

        started_at = None
        if latest is not None:
            started_at = latest.started_at
        elif session is not None:
            started_at = session.started_at

        return ProgressRecord(
            quiz_id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            status=status,
            total_questions=total_questions,
            completed_questions=completed_questions,
            score=float(latest.score) if latest is not None else None,
            max_score=max_score,
            time_spent=sum(s.time_spent or 0 for s in submissions),
            attempts=len(submissions),
            max_attempts=quiz.attempts_allowed,
            started_at=started_at,
            completed_at=latest.completed_at if latest is not None else None,
            due_date=assignment.due_date if assignment is not None else None,
        )

    @staticmethod
    def _build_stats(records: list[ProgressRecord], now: datetime) -> StudentStats:
        completed = [r for r in records if r.status == STATUS_COMPLETED]
        percentages = [r.score / r.max_score * 100 if r.max_score else 0.0 for r in completed]
        not_started = [r for r in records if r.status == STATUS_NOT_STARTED and r.due_date is not None]

        return StudentStats(
            total_quizzes=len(records),
            completed_quizzes=len(completed),
            average_score=round(sum(percentages) / len(percentages), 2) if percentages else 0.0,
            total_time_spent=sum(r.time_spent for r in records),
            upcoming_quizzes=sum(1 for r in not_started if r.due_date > now),
            overdue_quizzes=sum(1 for r in not_started if r.due_date < now),
        )

    @staticmethod
    def student_progress(student_id: int, now: datetime = None) -> StudentProgress:
        """
        Progress of one student across every quiz they can see.

        The quiz universe comes from ``AccessService`` alone: an assignment
        row pointing at a quiz of an instructor the student is no longer
        authorized with is ignored.
        """
        now = to_naive_utc(now) if now is not None else utcnow()

        instructor_ids = AccessService.authorized_instructor_ids(student_id)
        if not instructor_ids:
            return StudentProgress()

        quizzes = Quiz.query.filter(
            Quiz.instructor_id.in_(instructor_ids),
        ).order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()
        if not quizzes:
            return StudentProgress()
        quiz_ids = [q.id for q in quizzes]

        submissions = defaultdict(list)
        for submission in Submission.query.filter(
            Submission.quiz_id.in_(quiz_ids),
            Submission.student_id == student_id,
        ).order_by(Submission.attempt_number).all():
            submissions[submission.quiz_id].append(submission)

        open_sessions = {}
        for session in QuizSession.query.filter(
            QuizSession.quiz_id.in_(quiz_ids),
            QuizSession.student_id == student_id,
            QuizSession.submission_id.is_(None),
        ).order_by(QuizSession.started_at).all():
            open_sessions[session.quiz_id] = session

        assignments = {
            a.quiz_id: a for a in QuizAssignment.query.filter(
                QuizAssignment.quiz_id.in_(quiz_ids),
                QuizAssignment.student_id == student_id,
            ).all()
        }

        records = [
            ProgressAggregator._build_record(
                quiz,
                submissions.get(quiz.id, []),
                open_sessions.get(quiz.id),
                assignments.get(quiz.id),
            )
            for quiz in quizzes
        ]
        return StudentProgress(quiz_progress=records, stats=ProgressAggregator._build_stats(records, now))

    @staticmethod
    def quiz_summary(quiz_id: int, instructor_id: int) -> dict:
        """
        Results overview for the owning instructor.

        Each student counts once, with their latest attempt.
        """
        quiz = QuizRepository.get_owned_quiz(quiz_id, instructor_id, "view the summary of")

        latest = {}
        submission_count = 0
        for submission in quiz.submissions.order_by(Submission.attempt_number).all():
            submission_count += 1
            latest[submission.student_id] = submission

        percentages = [s.percentage for s in latest.values()]
        passed = sum(1 for s in latest.values() if s.is_passing(quiz.passing_score))
        roster = AccessService.authorized_student_ids(instructor_id)
        started = {
            row.student_id for row in db.session.query(QuizSession.student_id).filter_by(quiz_id=quiz_id).all()
        }

        return {
            'quiz_id': quiz.id,
            'title': quiz.title,
            'max_score': scoring.max_score(quiz.questions),
            'passing_score': quiz.passing_score,
            'submission_count': submission_count,
            'student_count': len(latest),
            'average_percentage': round(sum(percentages) / len(percentages), 2) if percentages else 0.0,
            'pass_rate': round(passed / len(latest) * 100, 2) if latest else 0.0,
            'not_started': sum(1 for sid in roster if sid not in latest and sid not in started),
        }
