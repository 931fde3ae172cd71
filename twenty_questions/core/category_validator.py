"""
Category Constraint Validator - Reject questions that cannot apply to a category

Responsibilities:
- Resolve a category to its entity kind (people / animals / objects)
- Reject questions matching a forbidden predicate pattern for that kind
  or for the category itself
- Report the violated reasons (for the comprehensive validator)
- Expose the appropriate predicate domains per category

Design principles:
- Pure lookups over versioned pattern tables
- Unknown categories allow everything (never raise on business input)
"""

import logging
from typing import Optional, Tuple

from twenty_questions.utils.category_registry import CategoryRegistry, alias_kind, normalize_category
from twenty_questions.utils.constraint_patterns import (
    APPROPRIATE_DOMAINS,
    CATEGORY_FORBIDDEN,
    KIND_FORBIDDEN,
    ForbiddenRule,
)

logger = logging.getLogger(__name__)


class CategoryConstraintValidator:
    """Forbidden-pattern gate for candidate and externally supplied questions."""

    def __init__(self, registry: Optional[CategoryRegistry] = None):
        """
        Args:
            registry: Used to resolve registered category kinds; without it
                kinds are resolved by name alias only
        """
        self.registry = registry

    def _kind(self, category: str) -> str:
        if self.registry is not None:
            return self.registry.kind_of(category)
        return alias_kind(category)

    def _rules(self, category: str) -> Tuple[ForbiddenRule, ...]:
        return (
            KIND_FORBIDDEN.get(self._kind(category), ())
            + CATEGORY_FORBIDDEN.get(normalize_category(category), ())
        )

    def explain(self, question: str, category: str) -> Tuple[str, ...]:
        """
        Reasons the question is inappropriate for the category.

        Returns:
            tuple[str]: One reason per violated rule (empty if acceptable)
        """
        text = question.lower()
        return tuple(reason for pattern, reason in self._rules(category) if pattern.search(text))

    def validate(self, question: str, category: str) -> bool:
        """
        True if no forbidden pattern matches.

        Examples:
            >>> v = CategoryConstraintValidator()
            >>> v.validate("Is it made of metal?", "world leaders")
            False
            >>> v.validate("Are they from Europe?", "world leaders")
            True
        """
        reasons = self.explain(question, category)
        if reasons:
            logger.debug(f"'{question}' rejected for '{category}': {reasons[0]}")
            return False
        return True

    def appropriate_domains(self, category: str) -> Tuple[str, ...]:
        """Canonical predicate domains for the category (empty if unknown)."""
        key = normalize_category(category)
        if key in APPROPRIATE_DOMAINS:
            return APPROPRIATE_DOMAINS[key]
        return APPROPRIATE_DOMAINS.get(self._kind(category), ())
