"""
Possibility Space - Which candidate targets are still plausible

Responsibilities:
- Partition the supplied catalog into remaining vs eliminated
- Assign each remaining item a coarse confidence score

Design principles:
- Stateless: a pure function of (category, knowledge state, catalog)
- Invariant: remaining + eliminated == catalog, disjoint
- Confidence is a ranking aid, not a calibrated probability

Known weak spot:
    Elimination only fires when a fact names the item explicitly
    ('is_<item>' / '<item>' answered No, 'not_<item>' / 'eliminated_<item>'
    deduced, or a rejected guess "Is it <item>?"). There is no general
    mapping from negative facts to catalog items; category-specific
    enrichment would hook in here.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple

from twenty_questions.core.knowledge_state import KnowledgeState

logger = logging.getLogger(__name__)

BASELINE_CONFIDENCE = 0.8

_GUESS_FORM = re.compile(r"^(?:is it|is this|is that|are they|is he|is she|was it)\s+(?:an?\s+|the\s+)?(.+)$")


@dataclass(frozen=True)
class PossibilitySpace:
    """
    Partition of the catalog for one transcript snapshot.

    Attributes:
        category: Category name as supplied
        total_items: Catalog, de-duplicated, in supplied order
        eliminated: Items ruled out
        remaining: Items still plausible (catalog order)
        confidence: Score per remaining item (flat baseline)
    """
    category: str
    total_items: Tuple[str, ...] = ()
    eliminated: Tuple[str, ...] = ()
    remaining: Tuple[str, ...] = ()
    confidence: Mapping[str, float] = field(default_factory=dict)

    @property
    def remaining_count(self) -> int:
        return len(self.remaining)

    def ranked(self) -> Tuple[Tuple[str, float], ...]:
        """Remaining items by confidence, highest first (ties keep catalog order)."""
        return tuple(sorted(
            ((item, self.confidence[item]) for item in self.remaining),
            key=lambda pair: -pair[1]
        ))

    def to_dict(self) -> Dict:
        return {
            'category': self.category,
            'totalItems': list(self.total_items),
            'eliminated': list(self.eliminated),
            'remaining': list(self.remaining),
            'confidence': {item: self.confidence[item] for item in self.remaining},
        }


def guess_target(question_key: str) -> Optional[str]:
    """
    Item named by a guess-shaped question, if any.

    Examples:
        >>> guess_target("is it an eagle?")
        'eagle'
        >>> guess_target("are they winston churchill?")
        'winston churchill'
        >>> guess_target("does it fly?") is None
        True
    """
    match = _GUESS_FORM.match(question_key.lower().strip().rstrip('?').strip())
    if not match:
        return None
    return match.group(1).strip()


def is_item_eliminated(item: str, state: KnowledgeState, category: str) -> bool:
    """
    True if a fact explicitly rules the item out.

    Args:
        item: Catalog item
        state: Current knowledge state
        category: Category name (reserved for category-specific enrichment)
    """
    item_lower = item.lower().strip()

    if f"is_{item_lower}" in state.confirmed_no or item_lower in state.confirmed_no:
        return True

    if f"not_{item_lower}" in state.deduced_facts or f"eliminated_{item_lower}" in state.deduced_facts:
        return True

    # Rejected guess: "Is it <item>?" answered No
    for key in state.confirmed_no:
        if guess_target(key) == item_lower:
            return True

    return False


def calculate_item_confidence(item: str, state: KnowledgeState, category: str) -> float:
    """Flat baseline for every item. Per-category scoring would plug in here."""
    return BASELINE_CONFIDENCE


def build_possibility_space(
    category: str,
    state: KnowledgeState,
    candidate_items: Iterable[str]
) -> PossibilitySpace:
    """
    Partition the catalog into remaining and eliminated items.

    Args:
        category: Category name
        state: Knowledge state for the transcript
        candidate_items: Catalog supplied by the caller

    Returns:
        PossibilitySpace
    """
    # De-duplicate, keep first occurrence order
    total = tuple(dict.fromkeys(candidate_items))

    remaining = []
    eliminated = []
    for item in total:
        if is_item_eliminated(item, state, category):
            eliminated.append(item)
        else:
            remaining.append(item)

    confidence = {
        item: calculate_item_confidence(item, state, category)
        for item in remaining
    }

    if eliminated:
        logger.debug(f"Eliminated {len(eliminated)}/{len(total)} items: {eliminated}")

    return PossibilitySpace(
        category=category,
        total_items=total,
        eliminated=tuple(eliminated),
        remaining=tuple(remaining),
        confidence=confidence,
    )
