"""
Knowledge State - Classified facts and deduced predicates from a transcript

Responsibilities:
- Normalize free-text answers into Answer classes
- Bucket transcript questions by answer (yes / no / maybe / unknown)
- Apply category inference rules to derive atomic predicates
- Judge whether a candidate question is already answered by deduction

Design principles:
- Stateless: rebuilt from the full transcript on every call
- Idempotent: same transcript always yields an equal state
- Additive deductions only (no retraction, no conflict resolution)
- Unclassifiable answers are dropped silently (accepted information loss)
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from twenty_questions.contracts import Answer, Fact
from twenty_questions.utils.category_registry import alias_kind
from twenty_questions.utils.inference_rules import (
    IMPLIED_PROPERTIES,
    REDUNDANCY_TOPICS,
    rules_for,
)

logger = logging.getLogger(__name__)

# Answer vocabulary (checked in this order, first match wins)
YES_CONTAINS = ('yeah', 'yep')
NO_CONTAINS = ('nope',)
MAYBE_CONTAINS = ('maybe', 'sometimes', 'it depends')
UNKNOWN_CONTAINS = ("don't know", 'dont know', 'unknown')


def classify_answer(answer: str) -> Answer:
    """
    Normalize a free-text answer.

    Note:
        Prefix matching is loose: "not sure" starts with "n"
        and classifies as NO.

    Examples:
        >>> classify_answer("Yeah, definitely")
        <Answer.YES: 'yes'>
        >>> classify_answer("it depends")
        <Answer.MAYBE: 'maybe'>
        >>> classify_answer("I don't know")
        <Answer.UNKNOWN: 'unknown'>
        >>> classify_answer("ask someone else")
        <Answer.UNCLASSIFIED: 'unclassified'>
    """
    a = answer.lower().strip()
    if not a:
        return Answer.UNCLASSIFIED

    if a.startswith('y') or a == 'yes' or any(w in a for w in YES_CONTAINS):
        return Answer.YES
    if a.startswith('n') or a == 'no' or any(w in a for w in NO_CONTAINS):
        return Answer.NO
    if any(w in a for w in MAYBE_CONTAINS):
        return Answer.MAYBE
    if any(w in a for w in UNKNOWN_CONTAINS):
        return Answer.UNKNOWN
    return Answer.UNCLASSIFIED


@dataclass(frozen=True)
class KnowledgeState:
    """
    Everything learned from one transcript snapshot.

    Attributes:
        facts: One Fact per transcript entry, in question order
            (UNCLASSIFIED entries included; they feed no bucket)
        confirmed_yes: Question keys answered Yes
        confirmed_no: Question keys answered No
        uncertain: Question keys answered Maybe
        unknown: Question keys answered Don't know
        deduced_facts: Atomic predicates ('is_animal', 'not_bird', ...)
    """
    facts: Tuple[Fact, ...] = ()
    confirmed_yes: FrozenSet[str] = frozenset()
    confirmed_no: FrozenSet[str] = frozenset()
    uncertain: FrozenSet[str] = frozenset()
    unknown: FrozenSet[str] = frozenset()
    deduced_facts: FrozenSet[str] = frozenset()

    @property
    def asked_questions(self) -> Tuple[str, ...]:
        """Every question in the transcript as originally phrased."""
        return tuple(fact.question_text for fact in self.facts)

    @property
    def question_count(self) -> int:
        return len(self.facts)

    def facts_with(self, answer: Answer) -> Tuple[Fact, ...]:
        return tuple(fact for fact in self.facts if fact.answer == answer)

    def to_dict(self) -> Dict[str, List[str]]:
        """JSON-safe bucket view (sorted lists)."""
        return {
            'confirmedYes': sorted(self.confirmed_yes),
            'confirmedNo': sorted(self.confirmed_no),
            'uncertainQuestions': sorted(self.uncertain),
            'unknownQuestions': sorted(self.unknown),
            'deducedFacts': sorted(self.deduced_facts),
        }


def build_knowledge_state(
    history: Sequence[Tuple[str, str]],
    category: str,
    kind: Optional[str] = None
) -> KnowledgeState:
    """
    Build the knowledge state for a transcript.

    Args:
        history: (question, answer) pairs in ascending question order
        category: Category name (selects category inference rules)
        kind: Entity kind; resolved from the category name when omitted

    Returns:
        KnowledgeState
    """
    if kind is None:
        kind = alias_kind(category)
    rules = rules_for(category, kind)

    facts = []
    buckets = {
        Answer.YES: set(),
        Answer.NO: set(),
        Answer.MAYBE: set(),
        Answer.UNKNOWN: set(),
    }
    deduced = set()

    for index, (question, answer) in enumerate(history, start=1):
        fact = Fact(question_index=index, question_text=question, answer=classify_answer(answer))
        facts.append(fact)

        if fact.answer == Answer.UNCLASSIFIED:
            logger.debug(f"Q{index}: unclassifiable answer '{answer}' dropped")
            continue

        buckets[fact.answer].add(fact.key)

        for rule in rules:
            if rule.applies_to(fact.key, fact.answer):
                deduced.update(rule.predicates)

    return KnowledgeState(
        facts=tuple(facts),
        confirmed_yes=frozenset(buckets[Answer.YES]),
        confirmed_no=frozenset(buckets[Answer.NO]),
        uncertain=frozenset(buckets[Answer.MAYBE]),
        unknown=frozenset(buckets[Answer.UNKNOWN]),
        deduced_facts=frozenset(deduced),
    )


def redundant_topics(candidate: str, state: KnowledgeState) -> Tuple[str, ...]:
    """Topics the candidate mentions whose answer is already deduced."""
    text = candidate.lower()
    return tuple(
        topic
        for topic, pattern in REDUNDANCY_TOPICS.items()
        if pattern.search(text)
        and (f"is_{topic}" in state.deduced_facts or f"not_{topic}" in state.deduced_facts)
    )


def implied_redundancies(candidate: str, state: KnowledgeState) -> Tuple[Tuple[str, str], ...]:
    """
    Implied properties the candidate asks about.

    Returns:
        tuple of (description, implied property) pairs
    """
    text = candidate.lower()
    found = []
    for prop in IMPLIED_PROPERTIES:
        if not any(prop.trigger.search(key) for key in state.confirmed_yes):
            continue
        for implied in prop.implies:
            if implied in text:
                found.append((prop.description, implied))
    return tuple(found)


def is_question_redundant(candidate: str, state: KnowledgeState) -> bool:
    """
    Keyword-containment redundancy heuristic.

    A candidate is redundant when it mentions a topic already settled by a
    deduced predicate (e.g. mentions 'bird' while 'not_bird' is deduced), or
    asks about a property implied by a confirmed Yes. False negatives are
    acceptable; false positives should be rare.
    """
    return bool(redundant_topics(candidate, state) or implied_redundancies(candidate, state))
