"""
Inference Rules - Deduction tables for the knowledge state

Tables:
- GENERIC_RULES: apply to every category
- KIND_RULES: keyed by entity kind (people / animals / objects)
- CATEGORY_RULES: keyed by normalized category name
- REDUNDANCY_TOPICS: topic -> pattern a candidate question must match for
  the topic's deduced predicates to make it redundant
- IMPLIED_PROPERTIES: properties implied by a confirmed Yes

Predicates follow the 'is_<topic>' / 'not_<topic>' naming so that
REDUNDANCY_TOPICS can look both polarities up by topic name.

Rules are purely additive: a later rule never retracts or reconciles an
earlier one. Contradictory transcripts therefore yield contradictory
predicates (e.g. 'is_male' and 'not_male').
"""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Pattern, Tuple

from twenty_questions.contracts import Answer

INFERENCE_RULES_VERSION = "1.0.0"


@dataclass(frozen=True)
class InferenceRule:
    """(question pattern, answer polarity) -> derived predicates."""
    pattern: Pattern
    polarity: Answer
    predicates: FrozenSet[str]

    def applies_to(self, question_key: str, answer: Answer) -> bool:
        return answer == self.polarity and self.pattern.search(question_key) is not None


@dataclass(frozen=True)
class ImpliedProperty:
    """Confirmed-Yes trigger whose consequences need not be asked."""
    trigger: Pattern
    implies: Tuple[str, ...]
    description: str


def _rule(pattern: str, polarity: Answer, *predicates: str) -> InferenceRule:
    return InferenceRule(re.compile(pattern), polarity, frozenset(predicates))


YES = Answer.YES
NO = Answer.NO

GENERIC_RULES: Tuple[InferenceRule, ...] = (
    _rule(r"\b(living|alive)\b", YES,
          'is_living', 'not_dead', 'not_object', 'not_electronic', 'not_furniture', 'not_tool'),
    _rule(r"\b(living|alive)\b", NO,
          'not_living', 'not_animal', 'not_plant'),
    _rule(r"\bdead\b", YES, 'is_dead', 'not_living', 'was_living'),
    _rule(r"\bdead\b", NO, 'not_dead', 'is_living'),
    _rule(r"\belectronic\b", YES,
          'is_electronic', 'not_living', 'is_man_made', 'not_edible', 'needs_power'),
    _rule(r"\belectronic\b", NO, 'not_electronic'),
    _rule(r"\bman-?made\b", YES, 'is_man_made'),
    _rule(r"\bman-?made\b", NO, 'not_man_made'),
)

KIND_RULES: Dict[str, Tuple[InferenceRule, ...]] = {
    'animals': (
        _rule(r"\bmammals?\b", YES,
              'is_animal', 'is_living', 'is_mammal', 'not_bird', 'not_reptile', 'not_fish', 'not_insect'),
        _rule(r"\bmammals?\b", NO, 'not_mammal'),
        _rule(r"\bbirds?\b", YES,
              'is_animal', 'is_living', 'is_bird', 'not_mammal', 'not_reptile', 'not_fish', 'not_insect'),
        _rule(r"\bbirds?\b", NO, 'not_bird'),
        _rule(r"\breptiles?\b", YES,
              'is_animal', 'is_living', 'is_reptile', 'not_mammal', 'not_bird', 'not_fish', 'not_insect'),
        _rule(r"\breptiles?\b", NO, 'not_reptile'),
        _rule(r"\bfish\b", YES,
              'is_animal', 'is_living', 'is_fish', 'not_mammal', 'not_bird', 'not_reptile', 'not_insect'),
        _rule(r"\bfish\b", NO, 'not_fish'),
        _rule(r"\binsects?\b", YES,
              'is_animal', 'is_living', 'is_insect', 'not_mammal', 'not_bird', 'not_reptile', 'not_fish'),
        _rule(r"\binsects?\b", NO, 'not_insect'),
        _rule(r"\bwild\b", YES, 'is_wild', 'not_domestic'),
        _rule(r"\bwild\b", NO, 'not_wild'),
        _rule(r"\bpet\b", YES, 'is_domestic', 'not_wild'),
    ),
    'objects': (
        _rule(r"\b(hold|handheld|portable)\b|\bin one hand\b", YES, 'is_portable', 'not_furniture'),
        _rule(r"\b(hold|handheld|portable)\b|\bin one hand\b", NO, 'not_portable'),
        _rule(r"\bfurniture\b", YES, 'is_furniture', 'not_portable'),
        _rule(r"\bfurniture\b", NO, 'not_furniture'),
        _rule(r"\bkitchen\b", YES, 'is_kitchenware'),
        _rule(r"\bkitchen\b", NO, 'not_kitchenware'),
    ),
    'people': (
        _rule(r"\bmale\b", YES, 'is_male', 'not_female'),
        _rule(r"\bmale\b", NO, 'is_female', 'not_male'),
        _rule(r"\b(female|woman)\b", YES, 'is_female', 'not_male'),
        _rule(r"\b(female|woman)\b", NO, 'is_male', 'not_female'),
    ),
}

_SPORTS_RULES: Tuple[InferenceRule, ...] = (
    _rule(r"\b(still playing|active|current)\b", YES, 'is_active', 'not_retired'),
    _rule(r"\b(still playing|active|current)\b", NO, 'is_retired', 'not_active'),
    _rule(r"\bretired\b", YES, 'is_retired', 'not_active'),
    _rule(r"\bretired\b", NO, 'is_active', 'not_retired'),
    _rule(r"\bcaptain", YES, 'is_captain'),
    _rule(r"\bcaptain", NO, 'not_captain'),
)

CATEGORY_RULES: Dict[str, Tuple[InferenceRule, ...]] = {
    'world leaders': (
        _rule(r"\b(living|alive)\b", YES, 'is_contemporary', 'not_historical'),
        _rule(r"\b(living|alive)\b", NO, 'is_dead', 'is_historical', 'not_contemporary'),
        _rule(r"\b(europe|european)\b", YES, 'is_european', 'not_asian', 'not_african', 'not_american'),
        _rule(r"\b(europe|european)\b", NO, 'not_european'),
        _rule(r"\b(asia|asian)\b", YES, 'is_asian', 'not_european', 'not_african', 'not_american'),
        _rule(r"\b(asia|asian)\b", NO, 'not_asian'),
        _rule(r"\b(africa|african)\b", YES, 'is_african', 'not_european', 'not_asian', 'not_american'),
        _rule(r"\b(africa|african)\b", NO, 'not_african'),
        _rule(r"\b(americas?|american)\b", YES, 'is_american', 'not_european', 'not_asian', 'not_african'),
        _rule(r"\b(americas?|american)\b", NO, 'not_american'),
        _rule(r"\bpresident\b", YES, 'is_president', 'is_political_leader', 'not_monarch'),
        _rule(r"\bpresident\b", NO, 'not_president'),
        _rule(r"\b(monarch|king|queen)\b", YES, 'is_monarch', 'not_president'),
        _rule(r"\b(monarch|king|queen)\b", NO, 'not_monarch'),
    ),
    'cricket players': _SPORTS_RULES,
    'football players': _SPORTS_RULES,
    'nba players': _SPORTS_RULES,
}

REDUNDANCY_TOPICS: Dict[str, Pattern] = {
    'living': re.compile(r"\b(alive|living|dead)\b"),
    'animal': re.compile(r"\ban animal\b"),
    'mammal': re.compile(r"\bmammals?\b"),
    'bird': re.compile(r"\bbirds?\b"),
    'reptile': re.compile(r"\breptiles?\b"),
    'fish': re.compile(r"\bfish\b"),
    'insect': re.compile(r"\binsects?\b"),
    'electronic': re.compile(r"\belectronic\b"),
    'man_made': re.compile(r"\bman-?made\b"),
    'wild': re.compile(r"\bwild\b"),
    'domestic': re.compile(r"\b(pet|domestic|domesticated)\b"),
    'portable': re.compile(r"\b(hold it|handheld|portable)\b"),
    'furniture': re.compile(r"\bfurniture\b"),
    'male': re.compile(r"\bmale\b"),
    'female': re.compile(r"\b(female|woman)\b"),
    'european': re.compile(r"\b(europe|european)\b"),
    'asian': re.compile(r"\b(asia|asian)\b"),
    'african': re.compile(r"\b(africa|african)\b"),
    'american': re.compile(r"\b(americas?|american)\b"),
    'president': re.compile(r"\bpresident\b"),
    'monarch': re.compile(r"\b(monarch|king|queen)\b"),
    'active': re.compile(r"\b(still playing|active)\b"),
    'retired': re.compile(r"\bretired\b"),
}

IMPLIED_PROPERTIES: Tuple[ImpliedProperty, ...] = (
    ImpliedProperty(
        trigger=re.compile(r"\bmammal"),
        implies=('warm-blooded', 'vertebrate', 'have fur or hair'),
        description="If it's a mammal, certain properties are automatically true",
    ),
    ImpliedProperty(
        trigger=re.compile(r"\belectronic"),
        implies=('uses electricity', 'has circuits', 'needs power'),
        description="If it's electronic, certain properties are automatically true",
    ),
    ImpliedProperty(
        trigger=re.compile(r"\bpresident"),
        implies=('political leader', 'government role', 'elected position'),
        description="If they were president, certain roles are automatically true",
    ),
)


def rules_for(category: str, kind: str) -> Tuple[InferenceRule, ...]:
    """
    All rules that apply to a category, in application order.

    Generic rules first, then the kind's rules, then the category's own.
    """
    return (
        GENERIC_RULES
        + KIND_RULES.get(kind, ())
        + CATEGORY_RULES.get(category.lower().strip(), ())
    )
