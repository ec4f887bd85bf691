"""
Database models for quiz functionality.

Supports four question types:
- multiple-choice: options, one flagged correct
- true-false: correct_answer stores "true" or "false"
- short-answer: free text, left ungraded
- essay: free text, left ungraded
"""
from quizknow import db
from quizknow.common.time_utils import utcnow


class Quiz(db.Model):
    """
    Model for quizzes owned by an instructor.

    Settings live in plain columns; ``settings`` exposes them as one mapping.
    """
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    difficulty = db.Column(db.String(20), nullable=False, default="medium")
    tags = db.Column(db.String(500), nullable=False, default="")  # Comma-separated
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Settings
    time_limit = db.Column(db.Integer, nullable=False, default=0)  # Minutes, 0 means no time limit
    attempts_allowed = db.Column(db.Integer, nullable=False, default=1)
    shuffle_questions = db.Column(db.Boolean, nullable=False, default=False)
    show_correct_answers = db.Column(db.Boolean, nullable=False, default=True)
    passing_score = db.Column(db.Integer, nullable=False, default=70)  # Percentage

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    instructor = db.relationship("User", foreign_keys=[instructor_id], backref="quizzes")
    questions = db.relationship(
        "Question", backref="quiz", cascade="all, delete-orphan",
        order_by="Question.order_index",
    )
    assignments = db.relationship("QuizAssignment", backref="quiz", lazy="dynamic", cascade="all, delete-orphan")
    submissions = db.relationship(
        "Submission", backref="quiz", lazy="dynamic", cascade="all, delete-orphan",
        order_by="Submission.completed_at",
    )
    sessions = db.relationship("QuizSession", backref="quiz", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index('ix_quizzes_instructor_created', 'instructor_id', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    @property
    def settings(self) -> dict:
        return {
            'time_limit': self.time_limit,
            'attempts_allowed': self.attempts_allowed,
            'shuffle_questions': self.shuffle_questions,
            'show_correct_answers': self.show_correct_answers,
            'passing_score': self.passing_score,
        }

    @property
    def tag_list(self) -> list[str]:
        return [t for t in (self.tags or "").split(",") if t]

    def get_question_count(self) -> int:
        return len(self.questions)


class Question(db.Model):
    """Model for quiz questions, ordered by ``order_index``."""
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False)
    # For true-false: "true" or "false". For multiple-choice the flagged option wins.
    correct_answer = db.Column(db.Text, nullable=True)
    points = db.Column(db.Numeric(6, 2, asdecimal=False), nullable=False, default=1)
    explanation = db.Column(db.Text, nullable=True)

    options = db.relationship(
        "QuestionOption", backref="question", cascade="all, delete-orphan",
        order_by="QuestionOption.order_index",
    )

    __table_args__ = (
        db.Index('ix_quiz_questions_quiz_order', 'quiz_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_type}>"


class QuestionOption(db.Model):
    """Option of a multiple-choice question."""
    __tablename__ = "quiz_question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<QuestionOption {self.id}: {self.text[:50]}>"


class QuizAssignment(db.Model):
    """A quiz earmarked for a student, optionally with a due date."""
    __tablename__ = "quiz_assignments"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    due_date = db.Column(db.DateTime, nullable=True)
    completed = db.Column(db.Boolean, default=False, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('quiz_id', 'student_id', name='uq_quiz_assignment_student'),
    )

    def __repr__(self) -> str:
        return f"<QuizAssignment quiz={self.quiz_id} student={self.student_id}>"


class QuizSession(db.Model):
    """
    Start record of an attempt.

    Written when a student opens a quiz and closed by the submission that
    ends it; anchors ``Submission.started_at``.
    """
    __tablename__ = "quiz_sessions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    started_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    submission_id = db.Column(db.Integer, db.ForeignKey("quiz_submissions.id", ondelete='SET NULL'), nullable=True)

    __table_args__ = (
        db.Index('ix_quiz_sessions_quiz_student', 'quiz_id', 'student_id'),
    )

    @property
    def is_open(self) -> bool:
        return self.submission_id is None


class Submission(db.Model):
    """
    One completed attempt. Rows are never updated after insert.

    ``attempt_number`` is unique per (quiz, student); inserting attempt
    ``n`` only succeeds once, which makes the attempt-limit check and the
    append a single conditional write.
    """
    __tablename__ = "quiz_submissions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    attempt_number = db.Column(db.Integer, nullable=False)
    score = db.Column(db.Numeric(8, 2, asdecimal=False), nullable=False, default=0)
    max_score = db.Column(db.Numeric(8, 2, asdecimal=False), nullable=False, default=0)
    started_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=False, index=True)
    time_spent = db.Column(db.Integer, nullable=False, default=0)  # Seconds

    student = db.relationship("User", foreign_keys=[student_id])
    answers = db.relationship(
        "SubmissionAnswer", backref="submission", cascade="all, delete-orphan",
        order_by="SubmissionAnswer.position",
    )

    __table_args__ = (
        db.UniqueConstraint('quiz_id', 'student_id', 'attempt_number', name='uq_submission_attempt'),
        db.Index('ix_quiz_submissions_quiz_student', 'quiz_id', 'student_id'),
    )

    def __repr__(self) -> str:
        return f"<Submission {self.id}: Student {self.student_id}, Quiz {self.quiz_id}, attempt {self.attempt_number}>"

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return float(self.score) / float(self.max_score) * 100

    def is_passing(self, passing_score: int) -> bool:
        return self.percentage >= passing_score


class SubmissionAnswer(db.Model):
    """Graded answer, aligned by position with the quiz's questions."""
    __tablename__ = "quiz_submission_answers"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey("quiz_submissions.id", ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    question_id = db.Column(db.Integer, nullable=True)
    submitted_value = db.Column(db.Text, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=True)  # NULL when ungraded
    points_earned = db.Column(db.Numeric(6, 2, asdecimal=False), nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint('submission_id', 'position', name='uq_submission_answer_position'),
    )
