"""
Similarity Detector - Decide whether two questions ask the same thing

Responsibilities:
- Normalize question text (case, punctuation, whitespace, stoplist)
- Apply ordered similarity checks, first match wins:
    1. exact match after normalization
    2. substring containment
    3. token overlap (shared count or shared/union ratio)
    4. semantic-group lookup (curated topic clusters)
- Check a candidate against a whole transcript

Design principles:
- Stateless and deterministic (pure functions of the two strings)
- Bounded heuristic, not NLP: lexical normalization + curated clusters
- Errs towards flagging: any one check firing marks a pair similar
"""

import logging
import re
from typing import Iterable, Optional

from twenty_questions.contracts import SimilarityVerdict
from twenty_questions.utils.semantic_groups import STOPWORDS, shared_group

logger = logging.getLogger(__name__)

# Verdict reasons
REASON_EXACT = "exact"
REASON_SUBSTRING = "substring"
REASON_TOKEN_OVERLAP = "token_overlap"
REASON_SEMANTIC_GROUP = "semantic_group"

MIN_TOKEN_LENGTH = 3

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


class SimilarityDetector:
    """
    Lexical + cluster-based question similarity heuristic.

    Thresholds are injectable; defaults are the strict values used for
    live deduplication.
    """

    def __init__(
        self,
        min_shared_tokens: int = 2,
        overlap_threshold: float = 0.70,
        use_semantic_groups: bool = True
    ) -> None:
        """
        Args:
            min_shared_tokens: Shared-token count that alone implies similarity
            overlap_threshold: Shared/union ratio above which texts are similar
            use_semantic_groups: Disable to get the purely lexical variant
        """
        if min_shared_tokens < 1:
            raise ValueError(f"min_shared_tokens must be >= 1, got {min_shared_tokens}")
        if not 0.0 < overlap_threshold <= 1.0:
            raise ValueError(f"overlap_threshold must be in (0, 1], got {overlap_threshold}")

        self.min_shared_tokens = min_shared_tokens
        self.overlap_threshold = overlap_threshold
        self.use_semantic_groups = use_semantic_groups

    # =========================================================================
    # Public API
    # =========================================================================

    @staticmethod
    def normalize(text: str) -> str:
        """
        Normalize a question for comparison.

        Lowercase, strip punctuation, collapse whitespace, drop stopwords.

        Examples:
            >>> SimilarityDetector.normalize("Are they from Europe?")
            'from europe'
            >>> SimilarityDetector.normalize("Is it  a MAMMAL?!")
            'mammal'
        """
        lowered = _PUNCTUATION.sub(" ", text.lower())
        tokens = [t for t in _WHITESPACE.split(lowered) if t and t not in STOPWORDS]
        return " ".join(tokens)

    def are_similar(self, question_a: str, question_b: str) -> bool:
        """True if the two questions express the same concept."""
        return self._first_match(question_a, question_b) is not None

    def check(self, candidate: str, previous_questions: Iterable[str]) -> SimilarityVerdict:
        """
        Compare a candidate against every earlier question.

        Args:
            candidate: Proposed question
            previous_questions: Questions already asked (any order)

        Returns:
            SimilarityVerdict for the first earlier question that matches,
            or a not-similar verdict
        """
        for previous in previous_questions:
            reason = self._first_match(candidate, previous)
            if reason is not None:
                logger.debug(f"'{candidate}' similar to '{previous}' ({reason})")
                return SimilarityVerdict(
                    is_similar=True,
                    matched_against=previous,
                    reason=reason
                )
        return SimilarityVerdict(is_similar=False)

    def is_similar_to_any(self, candidate: str, previous_questions: Iterable[str]) -> bool:
        return self.check(candidate, previous_questions).is_similar

    # =========================================================================
    # Checks
    # =========================================================================

    def _first_match(self, question_a: str, question_b: str) -> Optional[str]:
        """Run the ordered checks; return the reason of the first that fires."""
        n1 = self.normalize(question_a)
        n2 = self.normalize(question_b)

        # Nothing left to compare (e.g. "Is it?")
        if not n1 or not n2:
            return None

        if n1 == n2:
            return REASON_EXACT

        if n1 in n2 or n2 in n1:
            return REASON_SUBSTRING

        if self._tokens_overlap(n1, n2):
            return REASON_TOKEN_OVERLAP

        if self.use_semantic_groups:
            group = shared_group(n1, n2)
            if group is not None:
                return f"{REASON_SEMANTIC_GROUP}:{group}"

        return None

    def _tokens_overlap(self, n1: str, n2: str) -> bool:
        words1 = {w for w in n1.split() if len(w) >= MIN_TOKEN_LENGTH}
        words2 = {w for w in n2.split() if len(w) >= MIN_TOKEN_LENGTH}
        if not words1 or not words2:
            return False

        shared = words1 & words2
        if len(shared) >= self.min_shared_tokens:
            return True

        ratio = len(shared) / len(words1 | words2)
        return ratio > self.overlap_threshold
