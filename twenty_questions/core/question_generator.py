"""
Question Generator - Rank and select the next question from a category pool

Responsibilities:
- Score every pool entry by heuristic information gain
- Prune entries that repeat, are already deduced, or break category constraints
- Select the best survivor (gain, then priority, then pool order)
- Fall back to slot-filled templates, then to a last-resort hint request

Design principles:
- Stateless: all game state arrives as KnowledgeState + PossibilitySpace
- Deterministic given the injected random.Random (fallback only)
- The optional similarity oracle is consulted lazily, best candidate first,
  so at most one oracle call is made per candidate considered

Information gain:
    gain(remaining, p) = 0                              if remaining <= 1
                       = |1 + p*log2(p) + q*log2(q)|    otherwise (q = 1 - p)

    where p = max(0.01, split_ratio) and q = max(0.01, 1 - split_ratio) are
    floored independently from the raw ratio (at the extremes p + q = 1.01,
    e.g. split_ratio 0.0 scores with p = 0.01, q = 1.0). Inside (0.01, 0.99)
    this equals 1 - H(p), so it ranks lopsided
    splits above even ones. It is a relative score inside one pool, computed
    from the entry's prior split ratio and not from the remaining items, and
    is kept in exactly this form.
"""

import itertools
import logging
import math
import random
from dataclasses import replace
from typing import List, Optional

from twenty_questions.contracts import CandidateQuestion
from twenty_questions.core.category_validator import CategoryConstraintValidator
from twenty_questions.core.knowledge_state import KnowledgeState, is_question_redundant
from twenty_questions.core.possibility_space import PossibilitySpace
from twenty_questions.core.similarity_detector import SimilarityDetector
from twenty_questions.utils.category_registry import CategoryRegistry, template_slots

logger = logging.getLogger(__name__)

MIN_PROBABILITY = 0.01
LAST_RESORT_QUESTION = "Can you give me a hint about its most distinctive feature?"


def information_gain(remaining: int, split_ratio: float) -> float:
    """
    Heuristic gain of asking a question with the given prior split.

    Examples:
        >>> information_gain(1, 0.5)
        0.0
        >>> round(information_gain(10, 0.5), 6)
        0.0
        >>> round(information_gain(10, 0.15), 3)
        0.39
    """
    if remaining <= 1:
        return 0.0

    p = max(MIN_PROBABILITY, split_ratio)
    q = max(MIN_PROBABILITY, 1 - split_ratio)
    return abs(1 + p * math.log2(p) + q * math.log2(q))


class QuestionGenerator:
    """
    Pool-based next-question selector.

    One instance can serve any number of games and categories.
    """

    def __init__(
        self,
        registry: Optional[CategoryRegistry] = None,
        detector: Optional[SimilarityDetector] = None,
        validator: Optional[CategoryConstraintValidator] = None,
        oracle=None,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            registry: Category registry (bundled ruleset if omitted)
            detector: Local similarity heuristic
            validator: Category constraint gate
            oracle: Optional LLMSimilarityChecker, consulted after the local
                checks pass
            rng: Random source for fallback templates (seed it for
                reproducible games)
        """
        self.registry = registry or CategoryRegistry()
        self.detector = detector or SimilarityDetector()
        self.validator = validator or CategoryConstraintValidator(self.registry)
        self.oracle = oracle
        self.rng = rng or random.Random()

    # =========================================================================
    # Public API
    # =========================================================================

    def rank_candidates(
        self,
        category: str,
        state: KnowledgeState,
        space: PossibilitySpace
    ) -> List[CandidateQuestion]:
        """
        Score and prune the category pool.

        Returns:
            Surviving candidates with information_gain filled in, best first
        """
        profile = self.registry.get(category)
        asked = state.asked_questions
        remaining = space.remaining_count

        survivors = []
        for index, entry in enumerate(profile.candidate_pool):
            if not self._passes_local_checks(entry.text, category, state):
                continue
            scored = replace(entry, information_gain=information_gain(remaining, entry.split_ratio))
            survivors.append((index, scored))

        survivors.sort(key=lambda pair: (-pair[1].information_gain, -pair[1].priority, pair[0]))

        logger.debug(
            f"{len(survivors)}/{len(profile.candidate_pool)} '{profile.name}' candidates "
            f"survive after {len(asked)} questions"
        )
        return [entry for _, entry in survivors]

    def select_question(
        self,
        category: str,
        state: KnowledgeState,
        space: PossibilitySpace
    ) -> str:
        """
        Best next question, always ending in '?'.

        Falls back to templates and finally to LAST_RESORT_QUESTION when
        the pool is exhausted.
        """
        for candidate in self.rank_candidates(category, state, space):
            if self._oracle_rejects(candidate.text, state, category):
                continue
            logger.debug(
                f"Selected '{candidate.text}' (gain={candidate.information_gain:.3f}, "
                f"priority={candidate.priority})"
            )
            return candidate.text

        return self.fallback_question(category, state)

    def fallback_question(self, category: str, state: KnowledgeState) -> str:
        """
        Slot-filled template question, or the last-resort hint request.

        Every filling of every template is shuffled with the injected RNG;
        the first one that passes the same checks as pool entries wins.
        """
        profile = self.registry.get(category)

        fillings = []
        for template in profile.fallback_templates:
            fillings.extend(self._fill_template(template, profile.fallback_values))
        self.rng.shuffle(fillings)

        for question in fillings:
            if self._passes_local_checks(question, category, state):
                logger.info(f"Pool exhausted for '{profile.name}', using fallback '{question}'")
                return question

        logger.warning(f"No fallback left for '{profile.name}', asking for a hint")
        return LAST_RESORT_QUESTION

    # =========================================================================
    # Checks
    # =========================================================================

    def _passes_local_checks(self, text: str, category: str, state: KnowledgeState) -> bool:
        verdict = self.detector.check(text, state.asked_questions)
        if verdict.is_similar:
            logger.debug(f"Pruned '{text}': similar to '{verdict.matched_against}' ({verdict.reason})")
            return False

        if is_question_redundant(text, state):
            logger.debug(f"Pruned '{text}': answer already deduced")
            return False

        if not self.validator.validate(text, category):
            logger.debug(f"Pruned '{text}': inappropriate for '{category}'")
            return False

        return True

    def _oracle_rejects(self, text: str, state: KnowledgeState, category: str) -> bool:
        if self.oracle is None or not state.asked_questions:
            return False

        verdict = self.oracle.check(text, list(state.asked_questions), category)
        if verdict.is_similar:
            logger.debug(f"Oracle rejected '{text}': {verdict.reasoning}")
            return True
        return False

    @staticmethod
    def _fill_template(template: str, values) -> List[str]:
        """All fillings of a template, in value-list order."""
        # Dedupe repeated slot names, keep first-appearance order
        slots = list(dict.fromkeys(template_slots(template)))
        if not slots:
            return [template]
        return [
            template.format(**dict(zip(slots, combo)))
            for combo in itertools.product(*(values[slot] for slot in slots))
        ]

