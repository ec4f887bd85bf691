"""
Pydantic schemas for quiz-related requests
"""
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


QuestionType = Literal['multiple-choice', 'true-false', 'short-answer', 'essay']
Difficulty = Literal['easy', 'medium', 'hard']
AnswerValue = Union[bool, int, float, str, None]


class OptionPayload(BaseModel):
    """Multiple-choice option"""
    text: str = Field(..., min_length=1)
    is_correct: bool = Field(False, validation_alias=AliasChoices('is_correct', 'isCorrect'))


class QuestionPayload(BaseModel):
    """Individual quiz question"""
    text: str = Field(..., min_length=1, validation_alias=AliasChoices('text', 'question'))
    type: QuestionType
    options: List[OptionPayload] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(None, validation_alias=AliasChoices('correct_answer', 'correctAnswer'))
    points: float = Field(1.0, ge=0)
    explanation: Optional[str] = None

    @field_validator('correct_answer', mode='before')
    @classmethod
    def _stringify_answer(cls, value):
        if isinstance(value, bool):
            return "true" if value else "false"
        return value

    @model_validator(mode='after')
    def _check_answer_key(self):
        if self.type == 'multiple-choice':
            if len(self.options) < 2:
                raise ValueError("multiple-choice questions need at least two options")
            flagged = [o for o in self.options if o.is_correct]
            if len(flagged) > 1:
                raise ValueError("multiple-choice questions take exactly one correct option")
            if not flagged:
                texts = [o.text for o in self.options]
                if self.correct_answer not in texts:
                    raise ValueError("multiple-choice questions need a correct option")
        elif self.type == 'true-false':
            if self.correct_answer not in ("true", "false"):
                raise ValueError("true-false questions need correct_answer 'true' or 'false'")
        return self


class SettingsPayload(BaseModel):
    """Quiz settings; omitted fields keep their current or default value"""
    time_limit: Optional[int] = Field(None, ge=0, validation_alias=AliasChoices('time_limit', 'timeLimit'))
    attempts_allowed: Optional[int] = Field(
        None, ge=1, validation_alias=AliasChoices('attempts_allowed', 'attemptsAllowed'),
    )
    shuffle_questions: Optional[bool] = Field(
        None, validation_alias=AliasChoices('shuffle_questions', 'shuffleQuestions'),
    )
    show_correct_answers: Optional[bool] = Field(
        None, validation_alias=AliasChoices('show_correct_answers', 'showCorrectAnswers'),
    )
    passing_score: Optional[int] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices('passing_score', 'passingScore'),
    )


class QuizCreate(BaseModel):
    """Request schema for quiz creation"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    questions: List[QuestionPayload] = Field(..., min_length=1)
    settings: SettingsPayload = Field(default_factory=SettingsPayload)
    difficulty: Difficulty = "medium"
    tags: List[str] = Field(default_factory=list)


class QuizUpdate(BaseModel):
    """Request schema for quiz update; only provided fields change"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    questions: Optional[List[QuestionPayload]] = Field(None, min_length=1)
    settings: Optional[SettingsPayload] = None
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None


class AssignmentCreate(BaseModel):
    student_id: int = Field(..., gt=0)
    due_date: Optional[datetime] = None


class SubmissionCreate(BaseModel):
    """Schema for quiz submission; answers are aligned with the question order"""
    answers: List[AnswerValue] = Field(default_factory=list)
    time_spent: Optional[int] = Field(None, ge=0, validation_alias=AliasChoices('time_spent', 'timeSpent'))
    started_at: Optional[datetime] = Field(None, validation_alias=AliasChoices('started_at', 'startedAt'))
