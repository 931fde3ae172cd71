"""
Guess Policy - When to stop asking and whom to name

Two phases, both re-derived every turn from the possibility space and the
number of questions asked (no hidden history):

    QUESTIONING <-> GUESSING

Transition rule (first match wins):
1. exactly one item remains        -> GUESSING
2. no item remains                 -> QUESTIONING (recover via fallback)
3. remaining <= max_remaining and asked >= min_questions -> GUESSING
   asked >= late_game_threshold and remaining <= 5       -> GUESSING
4. otherwise                       -> QUESTIONING
"""

import logging
from enum import Enum
from typing import Optional

from twenty_questions.core.possibility_space import PossibilitySpace
from twenty_questions.utils.category_registry import CategoryRegistry

logger = logging.getLogger(__name__)

LATE_GAME_MAX_REMAINING = 5
GUESS_CONFIDENCE_THRESHOLD = 0.7


class GamePhase(str, Enum):
    QUESTIONING = "questioning"
    GUESSING = "guessing"


class GuessPolicy:
    """Phase decision and guess phrasing, thresholds taken from the category registry."""

    def __init__(self, registry: Optional[CategoryRegistry] = None):
        self.registry = registry or CategoryRegistry()

    def decide_phase(
        self,
        space: PossibilitySpace,
        questions_asked: int,
        category: str
    ) -> GamePhase:
        """
        Decide the phase for this turn.

        Args:
            space: Current possibility space
            questions_asked: Transcript length
            category: Category name (selects thresholds)

        Returns:
            GamePhase
        """
        remaining = space.remaining_count

        if remaining == 1:
            return GamePhase.GUESSING
        if remaining == 0:
            return GamePhase.QUESTIONING

        thresholds = self.registry.get(category).thresholds
        if remaining <= thresholds.max_remaining and questions_asked >= thresholds.min_questions:
            logger.debug(f"Guessing: {remaining} remaining after {questions_asked} questions")
            return GamePhase.GUESSING

        if questions_asked >= thresholds.late_game_threshold and remaining <= LATE_GAME_MAX_REMAINING:
            logger.debug(f"Late-game guess forced at question {questions_asked}")
            return GamePhase.GUESSING

        return GamePhase.QUESTIONING

    def build_guess(self, space: PossibilitySpace, category: str) -> Optional[str]:
        """
        Phrase a guess for the best remaining item.

        People keep their name's casing; other kinds are lower-cased.

        Returns:
            "Is it {item}?" or None when nothing qualifies (empty space, or
            several items and none above the confidence threshold, or only
            blank names). The caller falls back to an exploratory question on None.
        """
        # Blank names cannot be phrased as a guess
        ranked = [(item, score) for item, score in space.ranked() if item.strip()]
        if not ranked:
            return None

        item, confidence = ranked[0]
        if confidence <= GUESS_CONFIDENCE_THRESHOLD and len(ranked) > 1:
            return None

        name = item if self.registry.get(category).is_person_category else item.lower()
        return f"Is it {name}?"
