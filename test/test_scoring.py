"""
Test cases for the scoring engine. No database needed: questions are plain objects.
"""
from types import SimpleNamespace

from quizknow.quiz import scoring


def choice(qid, options, correct, points=1):
    return SimpleNamespace(
        id=qid,
        question_type='multiple-choice',
        correct_answer=None,
        points=points,
        options=[SimpleNamespace(text=o, is_correct=(o == correct)) for o in options],
    )


def true_false(qid, correct, points=1):
    return SimpleNamespace(id=qid, question_type='true-false', correct_answer=correct, points=points, options=[])


def free_text(qid, kind='short-answer', points=1):
    return SimpleNamespace(id=qid, question_type=kind, correct_answer='anything', points=points, options=[])


class TestScoreScenario:
    """Test cases for the two-question reference quiz."""

    def test_one_right_one_wrong(self):
        """Answers [B, false] against [B, true] score 1 of 2."""
        questions = [choice(1, ['A', 'B', 'C'], 'B'), true_false(2, 'true')]
        result = scoring.score(questions, ['B', False])

        assert result.total_score == 1
        assert result.max_score == 2
        assert [(r.is_correct, r.points_earned) for r in result.per_question] == [(True, 1.0), (False, 0.0)]

    def test_boolean_and_string_true_are_equivalent(self):
        """True and "true" grade the same."""
        questions = [true_false(1, 'true')]
        assert scoring.score(questions, [True]).total_score == 1
        assert scoring.score(questions, ['true']).total_score == 1

    def test_exact_match_only(self):
        """Case and whitespace differences are wrong answers."""
        questions = [choice(1, ['Paris', 'Rome'], 'Paris'), true_false(2, 'true')]
        result = scoring.score(questions, ['paris', 'True'])
        assert result.total_score == 0


class TestMissingAnswers:
    """Test cases for short or sparse answer lists."""

    def test_short_answer_list_is_graded_wrong(self):
        """Questions past the end of the answer list are wrong."""
        questions = [choice(1, ['A', 'B'], 'A'), true_false(2, 'false')]
        result = scoring.score(questions, ['A'])

        assert len(result.per_question) == 2
        assert result.per_question[1].is_correct is False
        assert result.per_question[1].points_earned == 0
        assert result.total_score == 1

    def test_null_answer_is_wrong(self):
        """A null answer is wrong and stored as missing."""
        result = scoring.score([true_false(1, 'true')], [None])
        assert result.per_question[0].is_correct is False
        assert result.per_question[0].submitted_value is None

    def test_missing_free_text_answer_is_wrong_not_ungraded(self):
        """A missing essay answer is wrong, not ungraded."""
        result = scoring.score([free_text(1, 'essay')], [])
        assert result.per_question[0].is_correct is False

    def test_extra_answers_are_ignored(self):
        """Answers beyond the last question are dropped."""
        result = scoring.score([true_false(1, 'true')], ['true', 'true', 'false'])
        assert len(result.per_question) == 1
        assert result.total_score == 1

    def test_no_answers_at_all(self):
        """A None answer list scores zero."""
        result = scoring.score([true_false(1, 'true')], None)
        assert result.total_score == 0
        assert result.max_score == 1


class TestUngradedAndPoints:
    """Test cases for free-text questions and point weights."""

    def test_free_text_is_ungraded(self):
        """Free-text answers earn nothing and stay ungraded."""
        questions = [free_text(1, 'short-answer'), free_text(2, 'essay')]
        result = scoring.score(questions, ['anything', 'long text'])

        assert [r.is_correct for r in result.per_question] == [None, None]
        assert result.total_score == 0
        assert result.max_score == 2

    def test_zero_points_count_as_one(self):
        """Zero or absent points count as one."""
        questions = [true_false(1, 'true', points=0), true_false(2, 'true', points=None)]
        result = scoring.score(questions, [True, True])
        assert result.max_score == 2
        assert result.total_score == 2

    def test_weighted_points(self):
        """Points are summed with their weights."""
        questions = [choice(1, ['A', 'B'], 'B', points=3), true_false(2, 'false', points=2.5)]
        result = scoring.score(questions, ['B', 'true'])
        assert result.total_score == 3
        assert result.max_score == 5.5
        assert round(result.percentage, 2) == 54.55

    def test_total_stays_within_bounds(self):
        """The total always lies between zero and max_score."""
        questions = [choice(1, ['A', 'B'], 'A', points=2), true_false(2, 'true'), free_text(3)]
        for answers in ([], ['A'], ['A', True, 'x'], ['B', False, None], [None, None, None]):
            result = scoring.score(questions, answers)
            assert result.total_score == sum(r.points_earned for r in result.per_question)
            assert 0 <= result.total_score <= result.max_score


class TestCanonicalAnswer:
    """Test cases for the stored value answers are compared with."""

    def test_flagged_option_wins(self):
        """A flagged option beats correct_answer."""
        question = choice(1, ['A', 'B'], 'B')
        question.correct_answer = 'A'
        assert scoring.canonical_answer(question) == 'B'

    def test_falls_back_to_correct_answer(self):
        """Without a flagged option correct_answer is used."""
        question = choice(1, ['A', 'B'], None)
        question.correct_answer = 'A'
        assert scoring.canonical_answer(question) == 'A'
        assert scoring.grade_answer(question, 'A').is_correct is True

    def test_numbers_are_compared_as_text(self):
        """Numeric answers are compared in their string form."""
        question = choice(1, ['1', '2'], '2')
        assert scoring.grade_answer(question, 2).is_correct is True


class TestNormalizeSubmitted:
    """Test cases for rendering submitted values before the compare."""

    def test_booleans_and_none(self):
        """Booleans become the stored true/false strings, None stays missing."""
        assert scoring.normalize_submitted(True) == 'true'
        assert scoring.normalize_submitted(False) == 'false'
        assert scoring.normalize_submitted(None) is None

    def test_other_values_are_not_folded(self):
        """No trimming or case folding is applied."""
        assert scoring.normalize_submitted(' Paris ') == ' Paris '
        assert scoring.normalize_submitted(3) == '3'
