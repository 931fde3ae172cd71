"""
Question Validator - Full check of a proposed question before it is surfaced

Checks, in order:
1. Category contamination (critical): predicate inapplicable to the category
2. Semantic duplicate (critical): local heuristic, first conflict only
3. Logical redundancy (warning): answer already implied by known facts
4. Oracle duplicate (critical): only when nothing critical was found so far

Used for externally supplied "recommended" questions, where the caller
wants the reasons and not just a yes/no.
"""

import logging
from typing import Dict, List, Optional, Sequence

from twenty_questions.contracts import (
    ISSUE_CATEGORY_CONTAMINATION,
    ISSUE_LOGICAL_REDUNDANCY,
    ISSUE_SEMANTIC_DUPLICATE,
    SEVERITY_CRITICAL,
    SEVERITY_WARNING,
    ValidationIssue,
    ValidationResult,
)
from twenty_questions.core.category_validator import CategoryConstraintValidator
from twenty_questions.core.knowledge_state import KnowledgeState, implied_redundancies, redundant_topics
from twenty_questions.core.similarity_detector import SimilarityDetector

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.8
DUPLICATE_PENALTY = 0.9
CONTAMINATION_PENALTY = 0.5


class QuestionValidator:
    """Combines constraint, similarity and redundancy checks into one report."""

    def __init__(
        self,
        detector: Optional[SimilarityDetector] = None,
        constraint_validator: Optional[CategoryConstraintValidator] = None,
        oracle=None
    ):
        self.detector = detector or SimilarityDetector()
        self.constraint_validator = constraint_validator or CategoryConstraintValidator()
        self.oracle = oracle

    def validate_question(
        self,
        question: str,
        previous_questions: Sequence[str],
        category: str,
        state: Optional[KnowledgeState] = None
    ) -> ValidationResult:
        """
        Validate one proposed question.

        Args:
            question: Proposed question
            previous_questions: Questions already asked
            category: Category name
            state: Knowledge state for redundancy checks (skipped if None)

        Returns:
            ValidationResult
        """
        contamination = self._check_contamination(question, category)
        duplicates = self._check_duplicate(question, previous_questions)
        redundancies = self._check_redundancy(question, state) if state is not None else []
        issues = contamination + duplicates + redundancies

        verdict = None
        if self.oracle is not None and not any(i.severity == SEVERITY_CRITICAL for i in issues):
            verdict = self.oracle.check(question, list(previous_questions), category)
            if verdict.is_similar:
                issues.append(ValidationIssue(
                    type=ISSUE_SEMANTIC_DUPLICATE,
                    severity=SEVERITY_CRITICAL,
                    description=f"Oracle detected semantic similarity: {verdict.reasoning}",
                    conflicts_with="Previous questions",
                ))

        confidence = BASE_CONFIDENCE
        if verdict is not None:
            confidence = verdict.confidence if verdict.is_similar else 1 - verdict.confidence
        if duplicates:
            confidence *= DUPLICATE_PENALTY
        if contamination:
            confidence *= CONTAMINATION_PENALTY

        is_valid = not any(i.severity == SEVERITY_CRITICAL for i in issues)
        if not is_valid:
            logger.info(f"Rejected '{question}' for '{category}': {issues[0].description}")

        return ValidationResult(
            is_valid=is_valid,
            issues=tuple(issues),
            confidence=confidence,
            suggested_alternative=verdict.suggested_alternative if verdict is not None else None,
        )

    def batch_validate(
        self,
        questions: Sequence[str],
        previous_questions: Sequence[str],
        category: str,
        state: Optional[KnowledgeState] = None
    ) -> List[ValidationResult]:
        """Validate each question against the transcript plus earlier batch items."""
        results = []
        for i, question in enumerate(questions):
            current_previous = list(previous_questions) + list(questions[:i])
            results.append(self.validate_question(question, current_previous, category, state))
        return results

    @staticmethod
    def validation_stats(results: Sequence[ValidationResult]) -> Dict:
        def count(issue_type):
            return sum(1 for r in results if any(i.type == issue_type for i in r.issues))

        total = len(results)
        valid = sum(1 for r in results if r.is_valid)
        return {
            'total_questions': total,
            'valid_questions': valid,
            'invalid_questions': total - valid,
            'semantic_duplicates': count(ISSUE_SEMANTIC_DUPLICATE),
            'category_violations': count(ISSUE_CATEGORY_CONTAMINATION),
            'logical_redundancies': count(ISSUE_LOGICAL_REDUNDANCY),
            'average_confidence': sum(r.confidence for r in results) / total if total else 0.0,
        }

    # =========================================================================
    # Checks
    # =========================================================================

    def _check_contamination(self, question: str, category: str) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                type=ISSUE_CATEGORY_CONTAMINATION,
                severity=SEVERITY_CRITICAL,
                description=f"Category violation for {category}: {reason}",
                conflicts_with=question,
            )
            for reason in self.constraint_validator.explain(question, category)
        ]

    def _check_duplicate(self, question: str, previous_questions: Sequence[str]) -> List[ValidationIssue]:
        verdict = self.detector.check(question, previous_questions)
        if not verdict.is_similar:
            return []
        return [ValidationIssue(
            type=ISSUE_SEMANTIC_DUPLICATE,
            severity=SEVERITY_CRITICAL,
            description=f'Semantically similar to previous question: "{verdict.matched_against}"',
            conflicts_with=verdict.matched_against,
        )]

    def _check_redundancy(self, question: str, state: KnowledgeState) -> List[ValidationIssue]:
        issues = [
            ValidationIssue(
                type=ISSUE_LOGICAL_REDUNDANCY,
                severity=SEVERITY_WARNING,
                description=f'{description}: "{implied}" can be deduced',
                conflicts_with=question,
            )
            for description, implied in implied_redundancies(question, state)
        ]
        issues.extend(
            ValidationIssue(
                type=ISSUE_LOGICAL_REDUNDANCY,
                severity=SEVERITY_WARNING,
                description=f"Answer about '{topic}' already follows from earlier answers",
                conflicts_with=question,
            )
            for topic in redundant_topics(question, state)
        )
        return issues
