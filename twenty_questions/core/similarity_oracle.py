"""
Similarity Oracle - LLM-assisted duplicate-question check

Responsibilities:
- Ask a language model whether a candidate repeats any earlier question
- Parse the model's SIMILAR / CONFIDENCE / REASONING / ALTERNATIVE reply
- Bound every call with a timeout
- Degrade to the local SimilarityDetector on any failure

Design principles:
- Never raises on model trouble: timeouts, exceptions and unparseable
  replies all produce a heuristic verdict (source='heuristic')
- Client is duck-typed: anything with generate(prompt, ...) and is_loaded()
- At most one model call per check, and at most one generation in flight:
  while a timed-out generation is still running, checks use the heuristic
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional, Sequence

from twenty_questions.contracts import OracleVerdict
from twenty_questions.core.similarity_detector import SimilarityDetector

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_TOKENS = 300
DEFAULT_TEMPERATURE = 0.1

FALLBACK_SIMILAR_CONFIDENCE = 0.7
FALLBACK_DISTINCT_CONFIDENCE = 0.8

SOURCE_LLM = "llm"
SOURCE_HEURISTIC = "heuristic"

_PROMPT_TEMPLATE = """TASK: Determine if the NEW QUESTION is semantically similar to any PREVIOUS QUESTIONS.

CATEGORY: {category}

PREVIOUS QUESTIONS:
{previous}

NEW QUESTION: "{candidate}"

SEMANTIC SIMILARITY EXAMPLES:

SIMILAR - SYNONYMS: "Are they from Europe?" vs "Are they European?" (same concept - geographic origin)
SIMILAR - SIZE WORDS: "Is it big?" vs "Is it large?" vs "Is it huge?" (same concept - size)
SIMILAR - CONCEPT MATCH: "Is it electronic?" vs "Does it use electricity?" (same concept - electrical device)
SIMILAR - GRAMMAR VARIATION: "Were they president?" vs "Did they serve as president?" (same concept - presidential role)
SIMILAR - CONCEPT SYNONYMS: "Does it eat meat?" vs "Is it carnivorous?" (same concept - diet)

DIFFERENT: "Are they from Europe?" vs "Are they alive?" (geography vs life status)
DIFFERENT: "Did they start wars?" vs "Did they serve during wartime?" (initiating vs serving during)
DIFFERENT: "Were they popular with voters?" vs "Were they democratically elected?" (popularity vs election process)
DIFFERENT: "Is it big?" vs "Is it expensive?" (size vs cost)

GUIDELINES:
1. RELATED is not SAME: only mark as similar if both ask for the EXACT SAME INFORMATION.
2. Rephrasings, synonyms and active/passive variants of one question are the same question.

RESPOND IN THIS EXACT FORMAT:
SIMILAR: [YES/NO]
CONFIDENCE: [0.0-1.0]
REASONING: [Brief explanation of why they are/aren't similar]
ALTERNATIVE: [If similar, suggest a different question, otherwise write "N/A"]

ANALYSIS:"""


class OracleResponseError(ValueError):
    """Model reply did not contain a usable SIMILAR line."""


class LLMSimilarityChecker:
    """
    Optional similarity oracle backed by a language model.

    Usage:
        checker = LLMSimilarityChecker(hf_client, SimilarityDetector(), timeout_seconds=3)
        verdict = checker.check("Are they European?", ["Are they from Europe?"], "world leaders")
        if verdict.is_similar:
            ...
    """

    def __init__(
        self,
        client,
        detector: Optional[SimilarityDetector] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE
    ):
        """
        Args:
            client: Object with generate(prompt, max_tokens=..., temperature=...)
                and is_loaded() (e.g. HuggingFaceClient)
            detector: Local heuristic used on fallback
            timeout_seconds: Upper bound on one model call

        Raises:
            TypeError: If the client lacks generate() or is_loaded()
            ValueError: If timeout_seconds is not positive
        """
        for method in ("generate", "is_loaded"):
            if not callable(getattr(client, method, None)):
                raise TypeError(f"Similarity client must provide {method}()")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")

        self.client = client
        self.detector = detector or SimilarityDetector()
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature

        # Single long-lived worker; a hung generation blocks no new submits
        self._executor = ThreadPoolExecutor(max_workers=1)
        self._pending = None

    # =========================================================================
    # Public API
    # =========================================================================

    def check(self, candidate: str, previous_questions: Sequence[str], category: str) -> OracleVerdict:
        """
        Judge whether the candidate repeats any earlier question.

        Args:
            candidate: Proposed question
            previous_questions: Questions already asked
            category: Category name (context for the model)

        Returns:
            OracleVerdict (source='llm' or 'heuristic')
        """
        if not previous_questions:
            return OracleVerdict(
                is_similar=False,
                confidence=1.0,
                reasoning="No previous questions to compare against",
                source=SOURCE_LLM,
            )

        if not self.client.is_loaded():
            logger.warning("Similarity model not loaded, using heuristic check")
            return self._fallback(candidate, previous_questions)

        if self._pending is not None and not self._pending.done():
            logger.warning("Previous similarity generation still running, using heuristic check")
            return self._fallback(candidate, previous_questions)

        prompt = self.build_prompt(candidate, previous_questions, category)

        try:
            self._pending = self._executor.submit(
                self.client.generate,
                prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            reply = self._pending.result(timeout=self.timeout_seconds)
            return self.parse_response(reply)
        except FutureTimeoutError:
            logger.warning(f"Similarity model timed out after {self.timeout_seconds}s, using heuristic check")
        except OracleResponseError as e:
            logger.warning(f"Unusable similarity model reply ({e}), using heuristic check")
        except Exception as e:
            logger.error(f"Similarity model call failed: {e}")

        return self._fallback(candidate, previous_questions)

    def close(self):
        """Release the worker thread without waiting on a running generation."""
        self._executor.shutdown(wait=False)

    @staticmethod
    def build_prompt(candidate: str, previous_questions: Sequence[str], category: str) -> str:
        previous = "\n".join(f"{i}. {q}" for i, q in enumerate(previous_questions, start=1))
        return _PROMPT_TEMPLATE.format(category=category, previous=previous, candidate=candidate)

    @staticmethod
    def parse_response(reply) -> OracleVerdict:
        """
        Parse the model's line-oriented reply.

        Raises:
            OracleResponseError: If the reply is not text or has no SIMILAR line
        """
        if not isinstance(reply, str):
            raise OracleResponseError(f"expected text, got {type(reply).__name__}")

        fields = {}
        for line in reply.splitlines():
            key, sep, value = line.strip().partition(":")
            if sep and key.strip().upper() in ("SIMILAR", "CONFIDENCE", "REASONING", "ALTERNATIVE"):
                fields.setdefault(key.strip().upper(), value.strip())

        if "SIMILAR" not in fields:
            raise OracleResponseError("missing SIMILAR line")

        try:
            confidence = float(fields.get("CONFIDENCE", "0.5"))
        except ValueError:
            confidence = 0.5
        confidence = max(0.0, min(1.0, confidence))

        alternative = fields.get("ALTERNATIVE") or None
        if alternative is not None and alternative.strip('"').upper() == "N/A":
            alternative = None

        return OracleVerdict(
            is_similar="YES" in fields["SIMILAR"].upper(),
            confidence=confidence,
            reasoning=fields.get("REASONING") or "Unable to parse reasoning",
            suggested_alternative=alternative,
            source=SOURCE_LLM,
        )

    # =========================================================================
    # Fallback
    # =========================================================================

    def _fallback(self, candidate: str, previous_questions: Sequence[str]) -> OracleVerdict:
        verdict = self.detector.check(candidate, previous_questions)
        if verdict.is_similar:
            return OracleVerdict(
                is_similar=True,
                confidence=FALLBACK_SIMILAR_CONFIDENCE,
                reasoning=f"Similar to '{verdict.matched_against}' ({verdict.reason}) by heuristic check",
                source=SOURCE_HEURISTIC,
            )
        return OracleVerdict(
            is_similar=False,
            confidence=FALLBACK_DISTINCT_CONFIDENCE,
            reasoning="No similarity detected by heuristic check",
            source=SOURCE_HEURISTIC,
        )
