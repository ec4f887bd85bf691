"""
Scoring engine.

Pure functions that grade an ordered list of submitted answers against a
quiz's questions:

- answers are aligned by index with the questions; a missing (or null)
  answer is incorrect and earns nothing, whatever the question type
- multiple-choice and true-false answers must equal the stored canonical
  value exactly
- short-answer and essay answers are left ungraded (``is_correct`` is None)

Questions only need ``id``, ``question_type``, ``correct_answer``, ``points``
and, for multiple-choice, ``options`` with ``text``/``is_correct``; ORM rows and
plain objects both work.
"""
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence


UNGRADED_TYPES = ('short-answer', 'essay')


@dataclass(frozen=True)
class AnswerResult:
    question_id: Optional[int]
    submitted_value: Optional[str]
    is_correct: Optional[bool]
    points_earned: float


@dataclass(frozen=True)
class ScoreBreakdown:
    per_question: list[AnswerResult] = field(default_factory=list)
    total_score: float = 0.0
    max_score: float = 0.0

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return self.total_score / self.max_score * 100


def question_points(question) -> float:
    """Points a question is worth; absent or zero counts as 1."""
    points = getattr(question, 'points', None)
    if not points:
        return 1.0
    return float(points)


def max_score(questions: Sequence) -> float:
    return float(sum(question_points(q) for q in questions))


def canonical_answer(question) -> Optional[str]:
    """The stored value a choice answer must equal."""
    if question.question_type == 'multiple-choice':
        for option in getattr(question, 'options', None) or []:
            if option.is_correct:
                return option.text
        return question.correct_answer
    return question.correct_answer


def normalize_submitted(value: Any) -> Optional[str]:
    """
    Render a submitted value in the stored string form.

    Booleans become "true"/"false"; None stays None. No case folding or
    trimming is applied.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def grade_answer(question, value: Any) -> AnswerResult:
    submitted = normalize_submitted(value)
    question_id = getattr(question, 'id', None)

    if submitted is None:
        return AnswerResult(question_id, None, False, 0.0)
    if question.question_type in UNGRADED_TYPES:
        return AnswerResult(question_id, submitted, None, 0.0)

    expected = canonical_answer(question)
    is_correct = expected is not None and submitted == expected
    return AnswerResult(question_id, submitted, is_correct, question_points(question) if is_correct else 0.0)


def score(questions: Sequence, submitted_answers: Sequence) -> ScoreBreakdown:
    """
    Grade ``submitted_answers`` against ``questions`` by position.

    Extra answers beyond the last question are ignored.
    """
    answers = list(submitted_answers or [])
    per_question = []
    for index, question in enumerate(questions):
        value = answers[index] if index < len(answers) else None
        per_question.append(grade_answer(question, value))

    total = float(sum(result.points_earned for result in per_question))
    return ScoreBreakdown(per_question=per_question, total_score=total, max_score=max_score(questions))
