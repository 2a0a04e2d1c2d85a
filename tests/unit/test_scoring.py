"""Unit tests for quiz scoring."""

from questline.quizzes.scoring import score_answers

KEY = [(1, "A"), (2, "B"), (3, "C"), (4, "D")]


class TestScoreAnswers:
    def test_all_correct(self):
        result = score_answers(KEY, {"1": "A", "2": "B", "3": "C", "4": "D"}, passing_score=70)
        assert result.correct_answers == 4
        assert result.total_questions == 4
        assert result.score == 100.0
        assert result.passed is True

    def test_partial_below_passing(self):
        result = score_answers(KEY, {"1": "A", "2": "B", "3": "A"}, passing_score=70)
        assert result.correct_answers == 2
        assert result.score == 50.0
        assert result.passed is False

    def test_score_equal_to_passing_passes(self):
        result = score_answers(KEY, {"1": "A", "2": "B", "3": "C"}, passing_score=75)
        assert result.score == 75.0
        assert result.passed is True

    def test_rounds_to_two_decimals(self):
        result = score_answers([(1, "A"), (2, "B"), (3, "C")], {"1": "A"}, passing_score=30)
        assert result.score == 33.33
        assert result.passed is True

    def test_unanswered_questions_count_as_wrong(self):
        result = score_answers(KEY, {}, passing_score=0)
        assert result.correct_answers == 0
        assert result.total_questions == 4
        assert result.score == 0.0

    def test_unknown_question_ids_ignored(self):
        result = score_answers(KEY, {"99": "A", "1": "A"}, passing_score=70)
        assert result.correct_answers == 1
        assert result.total_questions == 4

    def test_answers_must_match_exactly(self):
        result = score_answers(KEY, {"1": " a ", "2": "b", "3": "C"}, passing_score=50)
        assert result.correct_answers == 1
        assert result.score == 25.0
        assert result.passed is False

    def test_pass_decided_before_rounding(self):
        key = [(i, "A") for i in range(1, 25001)]
        answers = {str(i): "A" for i in range(1, 25000)}
        result = score_answers(key, answers, passing_score=100)
        assert result.score == 100.0
        assert result.passed is False

    def test_quiz_without_questions_scores_zero(self):
        result = score_answers([], {"1": "A"}, passing_score=70)
        assert result.total_questions == 0
        assert result.score == 0.0
        assert result.passed is False

    def test_quiz_without_questions_and_zero_passing_score(self):
        assert score_answers([], {}, passing_score=0).passed is True
