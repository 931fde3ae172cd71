"""
Tests for the comprehensive question validator
"""

from unittest.mock import Mock

import pytest

from twenty_questions.contracts import (
    ISSUE_CATEGORY_CONTAMINATION,
    ISSUE_LOGICAL_REDUNDANCY,
    ISSUE_SEMANTIC_DUPLICATE,
    SEVERITY_CRITICAL,
    SEVERITY_WARNING,
    OracleVerdict,
)
from twenty_questions.core.knowledge_state import build_knowledge_state
from twenty_questions.core.question_validator import QuestionValidator


@pytest.fixture
def validator():
    return QuestionValidator()


def oracle_returning(is_similar, confidence=0.9, alternative=None):
    oracle = Mock()
    oracle.check.return_value = OracleVerdict(
        is_similar=is_similar,
        confidence=confidence,
        reasoning="mock verdict",
        suggested_alternative=alternative,
    )
    return oracle


class TestValidateQuestion:

    def test_clean_question(self, validator):
        result = validator.validate_question("Are they from Europe?", [], "world leaders")

        assert result.is_valid
        assert result.issues == ()
        assert result.confidence == pytest.approx(0.8)

    def test_category_contamination(self, validator):
        result = validator.validate_question("Is it made of metal?", [], "world leaders")

        assert not result.is_valid
        assert len(result.issues) == 2
        assert all(i.type == ISSUE_CATEGORY_CONTAMINATION for i in result.issues)
        assert all(i.severity == SEVERITY_CRITICAL for i in result.issues)
        assert result.issues[0].description.startswith("Category violation for world leaders: ")
        assert result.confidence == pytest.approx(0.4)

    def test_semantic_duplicate(self, validator):
        result = validator.validate_question("Are they European?", ["Are they from Europe?"], "world leaders")

        assert not result.is_valid
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.type == ISSUE_SEMANTIC_DUPLICATE
        assert issue.conflicts_with == "Are they from Europe?"
        assert issue.description == 'Semantically similar to previous question: "Are they from Europe?"'
        assert result.confidence == pytest.approx(0.72)

    def test_only_first_duplicate_reported(self, validator):
        previous = ["Is it big?", "Is it large?"]

        result = validator.validate_question("Is it huge?", previous, "objects")

        assert [i.conflicts_with for i in result.issues] == ["Is it big?"]

    def test_implied_property_is_a_warning(self, validator):
        state = build_knowledge_state([("Is it a mammal?", "Yes")], "animals")

        result = validator.validate_question("Is it warm-blooded?", ["Is it a mammal?"], "animals", state)

        assert result.is_valid
        assert len(result.issues) == 1
        assert result.issues[0].type == ISSUE_LOGICAL_REDUNDANCY
        assert result.issues[0].severity == SEVERITY_WARNING
        assert '"warm-blooded" can be deduced' in result.issues[0].description

    def test_deduced_topic_is_a_warning(self, validator):
        state = build_knowledge_state([("Is it a mammal?", "Yes")], "animals")

        result = validator.validate_question("Does it lay eggs like a bird?", [], "animals", state)

        assert result.is_valid
        assert any("'bird'" in i.description for i in result.issues)

    def test_redundancy_skipped_without_state(self, validator):
        result = validator.validate_question("Is it warm-blooded?", ["Is it a mammal?"], "animals")

        assert result.issues == ()


class TestOracle:

    def test_similar_verdict_adds_critical_issue(self):
        oracle = oracle_returning(True, confidence=0.9, alternative="Are they male?")
        validator = QuestionValidator(oracle=oracle)

        result = validator.validate_question(
            "Did they rule for more than ten years?", ["Did they govern for many years?"], "world leaders"
        )

        oracle.check.assert_called_once_with(
            "Did they rule for more than ten years?", ["Did they govern for many years?"], "world leaders"
        )
        assert not result.is_valid
        assert result.issues[-1].description == "Oracle detected semantic similarity: mock verdict"
        assert result.confidence == pytest.approx(0.9)
        assert result.suggested_alternative == "Are they male?"

    def test_distinct_verdict_inverts_confidence(self):
        validator = QuestionValidator(oracle=oracle_returning(False, confidence=0.9))

        result = validator.validate_question("Are they male?", ["Are they from Asia?"], "world leaders")

        assert result.is_valid
        assert result.confidence == pytest.approx(0.1)

    def test_not_consulted_after_critical_issue(self):
        oracle = oracle_returning(False)
        validator = QuestionValidator(oracle=oracle)

        result = validator.validate_question("Is it made of metal?", [], "world leaders")

        oracle.check.assert_not_called()
        assert result.suggested_alternative is None


class TestBatch:

    def test_later_items_checked_against_earlier_ones(self, validator):
        results = validator.batch_validate(["Is it big?", "Is it huge?"], [], "objects")

        assert results[0].is_valid
        assert not results[1].is_valid
        assert results[1].issues[0].conflicts_with == "Is it big?"

    def test_stats(self, validator):
        results = validator.batch_validate(
            ["Is it big?", "Is it huge?", "Is it alive?"], [], "objects"
        )

        stats = QuestionValidator.validation_stats(results)

        assert stats['total_questions'] == 3
        assert stats['valid_questions'] == 1
        assert stats['invalid_questions'] == 2
        assert stats['semantic_duplicates'] == 1
        assert stats['category_violations'] == 1
        assert stats['logical_redundancies'] == 0
        assert stats['average_confidence'] == pytest.approx((0.8 + 0.72 + 0.4) / 3)

    def test_empty_stats(self):
        stats = QuestionValidator.validation_stats([])

        assert stats['total_questions'] == 0
        assert stats['average_confidence'] == 0.0
