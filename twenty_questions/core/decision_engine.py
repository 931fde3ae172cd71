"""
Decision Engine - Public entry point for one game turn

Responsibilities:
- Validate input shape at the boundary (fail fast on wrong types)
- Rebuild knowledge state and possibility space from the transcript
- Decide phase and produce the next question or guess
- Produce the analysis report consumed by prompt builders
- Validate externally recommended questions

Design principles:
- Stateless: every call is a function of (category, transcript, catalog)
- Business conditions never raise (empty history, contradictions,
  unknown category, empty catalog)
- Collaborators are injected; defaults use the bundled ruleset

Per-turn flow:
    transcript -> KnowledgeState -> PossibilitySpace
               -> GuessPolicy (phase) -> guess | QuestionGenerator
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from twenty_questions.contracts import ValidationResult
from twenty_questions.core.category_validator import CategoryConstraintValidator
from twenty_questions.core.guess_policy import GamePhase, GuessPolicy
from twenty_questions.core.knowledge_state import KnowledgeState, build_knowledge_state
from twenty_questions.core.possibility_space import PossibilitySpace, build_possibility_space
from twenty_questions.core.question_generator import QuestionGenerator
from twenty_questions.core.question_validator import QuestionValidator
from twenty_questions.core.similarity_detector import SimilarityDetector
from twenty_questions.utils.category_registry import CategoryProfile, CategoryRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 20
MAX_TOP_CANDIDATES = 5

History = Sequence[Any]


@dataclass(frozen=True)
class ConversationAnalysis:
    """
    Analytical snapshot of one turn.

    Attributes:
        category: Category name as supplied
        possibility_space: Remaining vs eliminated catalog items
        knowledge_state: Classified facts and deduced predicates
        question_count: Transcript length
        should_enter_guessing_phase: GuessPolicy verdict for this turn
        insights: remainingCount, topCandidates, suggestedFocus,
            questionsRemaining, appropriateDomains
    """
    category: str
    possibility_space: PossibilitySpace
    knowledge_state: KnowledgeState
    question_count: int
    should_enter_guessing_phase: bool
    insights: Mapping[str, Any] = field(default_factory=dict)

    @property
    def facts(self) -> Dict[str, List[str]]:
        return self.knowledge_state.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe camelCase report."""
        return {
            'category': self.category,
            'possibilitySpace': self.possibility_space.to_dict(),
            'facts': self.facts,
            'questionCount': self.question_count,
            'shouldEnterGuessingPhase': self.should_enter_guessing_phase,
            'insights': {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.insights.items()
            },
        }


class DecisionEngine:
    """
    Question selection and knowledge-state engine.

    Example:
        >>> engine = DecisionEngine(rng=random.Random(7))
        >>> engine.generate_optimal_question(
        ...     "animals", [("Is it a mammal?", "Yes")], ["eagle", "shark", "snake", "goldfish"])
        'Does it live in water?'
    """

    def __init__(
        self,
        registry: Optional[CategoryRegistry] = None,
        oracle=None,
        rng: Optional[random.Random] = None,
        detector: Optional[SimilarityDetector] = None
    ):
        """
        Args:
            registry: Category registry (bundled ruleset if omitted)
            oracle: Optional LLMSimilarityChecker
            rng: Random source for fallback questions
            detector: Similarity heuristic (default thresholds if omitted)
        """
        self.registry = registry or CategoryRegistry()
        self.detector = detector or SimilarityDetector()
        self.constraint_validator = CategoryConstraintValidator(self.registry)
        self.policy = GuessPolicy(self.registry)
        self.generator = QuestionGenerator(
            registry=self.registry,
            detector=self.detector,
            validator=self.constraint_validator,
            oracle=oracle,
            rng=rng,
        )
        self.validator = QuestionValidator(
            detector=self.detector,
            constraint_validator=self.constraint_validator,
            oracle=oracle,
        )
        logger.info(f"Decision engine ready ({len(self.registry.categories)} categories, oracle: {oracle is not None})")

    # =========================================================================
    # Public API
    # =========================================================================

    def analyze_conversation_state(
        self,
        category: str,
        history: History,
        remaining_items: Optional[Iterable[str]] = None
    ) -> ConversationAnalysis:
        """
        Build the analysis report for the current transcript.

        Args:
            category: Category name
            history: Ordered mappings with 'question'/'answer', or
                (question, answer) pairs
            remaining_items: Category catalog (may be empty)

        Returns:
            ConversationAnalysis

        Raises:
            TypeError / ValueError: On malformed input shape only
        """
        state, space = self._build(category, history, remaining_items)
        profile = self.registry.get(category)
        phase = self.policy.decide_phase(space, state.question_count, category)

        insights = {
            'remainingCount': space.remaining_count,
            'topCandidates': tuple(item for item, _ in space.ranked()[:MAX_TOP_CANDIDATES]),
            'suggestedFocus': suggested_focus(profile, state),
            'questionsRemaining': max(0, DEFAULT_MAX_QUESTIONS - state.question_count),
            'appropriateDomains': self.constraint_validator.appropriate_domains(category),
        }

        return ConversationAnalysis(
            category=category,
            possibility_space=space,
            knowledge_state=state,
            question_count=state.question_count,
            should_enter_guessing_phase=phase == GamePhase.GUESSING,
            insights=insights,
        )

    def generate_optimal_question(
        self,
        category: str,
        history: History,
        remaining_items: Optional[Iterable[str]] = None
    ) -> str:
        """
        Next question (or guess) for the transcript.

        Returns:
            str: Question text ending in '?'

        Raises:
            TypeError / ValueError: On malformed input shape only
        """
        state, space = self._build(category, history, remaining_items)
        phase = self.policy.decide_phase(space, state.question_count, category)

        if phase == GamePhase.GUESSING:
            guess = self.policy.build_guess(space, category)
            asked = {fact.key for fact in state.facts}
            if guess is not None and guess.lower() not in asked:
                logger.info(f"Guessing after {state.question_count} questions: {guess}")
                return guess
            logger.debug("Guessing phase without a usable guess, asking instead")

        return self.generator.select_question(category, state, space)

    def validate_recommended_question(
        self,
        question: str,
        category: str,
        history: History
    ) -> ValidationResult:
        """
        Check an externally supplied question against the transcript.

        Raises:
            TypeError / ValueError: On malformed input shape only
        """
        if not isinstance(question, str):
            raise TypeError(f"question must be a str, got {type(question).__name__}")
        state, _ = self._build(category, history, ())
        return self.validator.validate_question(question, state.asked_questions, category, state)

    # =========================================================================
    # Internals
    # =========================================================================

    def _build(
        self,
        category: str,
        history: History,
        remaining_items: Optional[Iterable[str]]
    ) -> Tuple[KnowledgeState, PossibilitySpace]:
        if not isinstance(category, str):
            raise TypeError(f"category must be a str, got {type(category).__name__}")

        pairs = normalize_history(history)
        items = normalize_items(remaining_items)

        state = build_knowledge_state(pairs, category, kind=self.registry.kind_of(category))
        space = build_possibility_space(category, state, items)
        return state, space


def normalize_history(history: History) -> List[Tuple[str, str]]:
    """
    Coerce a transcript into (question, answer) pairs.

    Raises:
        TypeError: If history or an entry has the wrong type
        ValueError: If an entry is missing its question or answer
    """
    if history is None:
        return []
    if isinstance(history, (str, bytes)) or not isinstance(history, Sequence):
        raise TypeError(f"history must be a sequence of entries, got {type(history).__name__}")

    pairs = []
    for index, entry in enumerate(history, start=1):
        if isinstance(entry, Mapping):
            missing = [key for key in ('question', 'answer') if key not in entry]
            if missing:
                raise ValueError(f"History entry {index} missing {missing}")
            question, answer = entry['question'], entry['answer']
        elif isinstance(entry, (tuple, list)):
            if len(entry) != 2:
                raise ValueError(f"History entry {index} must be a (question, answer) pair")
            question, answer = entry
        else:
            raise TypeError(f"History entry {index} must be a mapping or pair, got {type(entry).__name__}")

        if not isinstance(question, str) or not isinstance(answer, str):
            raise TypeError(f"History entry {index} question and answer must be str")
        pairs.append((question, answer))
    return pairs


def normalize_items(remaining_items: Optional[Iterable[str]]) -> List[str]:
    if remaining_items is None:
        return []
    if isinstance(remaining_items, (str, bytes)):
        raise TypeError("remaining_items must be an iterable of names, not a single string")

    items = []
    for item in remaining_items:
        if not isinstance(item, str):
            raise TypeError(f"remaining_items must contain str, got {type(item).__name__}")
        if not item.strip():
            logger.debug("Dropping blank catalog item")
            continue
        items.append(item)
    return items


def suggested_focus(profile: CategoryProfile, state: KnowledgeState) -> Tuple[str, ...]:
    """Focus areas whose keywords no transcript question mentions yet."""
    asked = [fact.key for fact in state.facts]
    return tuple(
        area.label
        for area in profile.focus_areas
        if not area.keywords or not any(k in q for k in area.keywords for q in asked)
    )
