"""
Semantic contracts for the twenty questions engine.

This module defines immutable data structures that serve as contracts
between modules. These are NOT validators - they define shape and
semantics without enforcing rules.

Design principles:
- Frozen dataclasses (immutable after creation)
- No validation logic (contracts, not validators)
- No dependencies on other modules
- Definition layer only (no enforcement)

Contents:
- Answer: Normalized answer classes
- Fact: One classified transcript entry (tagged by its Answer)
- CandidateQuestion: Scored entry from a category candidate pool
- SimilarityVerdict: Result of the local similarity heuristic
- OracleVerdict: Result of the optional LLM similarity oracle
- ValidationIssue / ValidationResult: Comprehensive validator output

Usage:
    from twenty_questions.contracts import Answer, Fact, CandidateQuestion
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, FrozenSet


class Answer(str, Enum):
    """
    Normalized class of a free-text answer.

    UNCLASSIFIED answers are excluded from every fact bucket. This is an
    accepted information loss, not an error.
    """
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"
    UNKNOWN = "unknown"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Fact:
    """
    One classified transcript entry.

    Attributes:
        question_index: 1-based position in the transcript
        question_text: Question exactly as asked
        answer: Normalized answer (the fact's tag)
    """
    question_index: int
    question_text: str
    answer: Answer

    @property
    def key(self) -> str:
        """Bucket key: lower-cased, trimmed question text."""
        return self.question_text.lower().strip()


@dataclass(frozen=True)
class CandidateQuestion:
    """
    Candidate next question drawn from a category pool.

    Attributes:
        text: Canonical yes/no question
        eliminates_on_yes: Sub-population labels ruled out by a Yes
        eliminates_on_no: Sub-population labels ruled out by a No
        information_gain: Heuristic ranking score (>= 0)
        priority: Tie-breaker, higher wins
        split_ratio: Prior fraction of category members satisfying the predicate
        topic: Free label used for logging and focus reporting
    """
    text: str
    eliminates_on_yes: FrozenSet[str] = frozenset()
    eliminates_on_no: FrozenSet[str] = frozenset()
    information_gain: float = 0.0
    priority: int = 0
    split_ratio: float = 0.5
    topic: str = ""


@dataclass(frozen=True)
class SimilarityVerdict:
    """
    Local heuristic verdict on whether a question repeats an earlier one.

    Attributes:
        is_similar: True if the candidate asks the same thing
        matched_against: Earlier question that matched (if any)
        reason: Which check fired ('exact', 'substring', 'token_overlap',
            'semantic_group:<name>')
    """
    is_similar: bool
    matched_against: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class OracleVerdict:
    """
    Richer similarity verdict from the optional LLM oracle.

    Attributes:
        is_similar: True if the candidate asks the same thing
        confidence: Oracle confidence in [0, 1]
        reasoning: Short explanation
        suggested_alternative: Replacement question proposed by the oracle
        source: 'llm' when the model answered, 'heuristic' on fallback
    """
    is_similar: bool
    confidence: float
    reasoning: str
    suggested_alternative: Optional[str] = None
    source: str = "llm"


# Issue types (mirrors the validator's report vocabulary)
ISSUE_SEMANTIC_DUPLICATE = "semantic_duplicate"
ISSUE_CATEGORY_CONTAMINATION = "category_contamination"
ISSUE_LOGICAL_REDUNDANCY = "logical_redundancy"

SEVERITY_CRITICAL = "critical"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """Single problem found with a proposed question."""
    type: str
    severity: str
    description: str
    conflicts_with: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one proposed question.

    Attributes:
        is_valid: False if any critical issue was found
        issues: All issues found, in check order
        confidence: Heuristic confidence in the verdict
        suggested_alternative: Oracle-proposed replacement (if any)
    """
    is_valid: bool
    issues: Tuple[ValidationIssue, ...] = field(default_factory=tuple)
    confidence: float = 0.8
    suggested_alternative: Optional[str] = None
