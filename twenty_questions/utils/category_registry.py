"""
Category Registry - Immutable per-category configuration

Responsibilities:
- Load category ruleset (candidate pools, guessing thresholds, fallback
  templates, focus areas) from JSON
- Validate ruleset structure on initialization
- Resolve a category name to its profile, or to the default profile
- Resolve a category name to its entity kind (people / animals / objects)

Design principles:
- Registry, not control flow: adding a category means adding data
- Read-only after load (MappingProxyType, frozen dataclasses, tuples)
- Fail fast: bad ruleset raises at construction, never per turn
- Unknown categories degrade to the default profile (never raise)
"""

import json
import logging
import string
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from twenty_questions.contracts import CandidateQuestion

logger = logging.getLogger(__name__)

DEFAULT_RULESET_PATH = Path(__file__).resolve().parent.parent / "data" / "category_ruleset.json"

# Entity kinds used by constraint and inference tables
KIND_PEOPLE = "people"
KIND_ANIMALS = "animals"
KIND_OBJECTS = "objects"
KIND_GENERIC = "generic"
VALID_KINDS = {KIND_PEOPLE, KIND_ANIMALS, KIND_OBJECTS, KIND_GENERIC}

# Substring aliases for category names not in the ruleset
KIND_ALIASES = (
    ("leader", KIND_PEOPLE),
    ("player", KIND_PEOPLE),
    ("people", KIND_PEOPLE),
    ("animal", KIND_ANIMALS),
    ("object", KIND_OBJECTS),
)

REQUIRED_THRESHOLD_KEYS = ("min_questions", "max_remaining", "late_game_threshold")


def normalize_category(category: str) -> str:
    """Lower-case and trim a category name for registry lookup."""
    return category.lower().strip()


def alias_kind(category: str) -> str:
    """
    Map a free category name to an entity kind by substring.

    Examples:
        >>> alias_kind("Famous Scientists People")
        'people'
        >>> alias_kind("sea animals")
        'animals'
        >>> alias_kind("movies")
        'generic'
    """
    name = normalize_category(category)
    for fragment, kind in KIND_ALIASES:
        if fragment in name:
            return kind
    return KIND_GENERIC


@dataclass(frozen=True)
class GuessThresholds:
    """Per-category guessing thresholds (see GuessPolicy)."""
    min_questions: int = 6
    max_remaining: int = 2
    late_game_threshold: int = 12


@dataclass(frozen=True)
class FocusArea:
    """
    Analytical focus area reported while its keywords are unexplored.

    Empty keywords means the area is always suggested.
    """
    label: str
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryProfile:
    """Everything the engine knows about one category."""
    name: str
    kind: str
    thresholds: GuessThresholds
    candidate_pool: Tuple[CandidateQuestion, ...]
    fallback_templates: Tuple[str, ...]
    fallback_values: Mapping[str, Tuple[str, ...]]
    focus_areas: Tuple[FocusArea, ...]

    @property
    def is_person_category(self) -> bool:
        return self.kind == KIND_PEOPLE


class CategoryRegistry:
    """
    Immutable registry of category profiles keyed by normalized name.

    Loaded once from the ruleset JSON; safe to share across sessions.
    """

    def __init__(self, ruleset_path: Optional[str] = None):
        """
        Load and validate the category ruleset.

        Args:
            ruleset_path: Path to ruleset JSON (defaults to the bundled ruleset)

        Raises:
            FileNotFoundError: If ruleset doesn't exist
            ValueError: If ruleset structure is invalid
        """
        self.ruleset_path = Path(ruleset_path) if ruleset_path else DEFAULT_RULESET_PATH

        if not self.ruleset_path.exists():
            raise FileNotFoundError(f"Category ruleset not found: {self.ruleset_path}")

        with open(self.ruleset_path, 'r', encoding='utf-8') as f:
            self.ruleset = json.load(f)

        self.version = self.ruleset.get("version", "unversioned")
        self.default_category = self.ruleset.get("default_category")
        raw_categories = self.ruleset.get("categories", {})

        self._validate_ruleset(raw_categories)

        profiles = {
            normalize_category(name): self._build_profile(name, definition)
            for name, definition in raw_categories.items()
        }
        self._profiles: Mapping[str, CategoryProfile] = MappingProxyType(profiles)

        logger.info(
            f"Category registry v{self.version} loaded with "
            f"{len(self._profiles)} categories"
        )

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def categories(self) -> Tuple[str, ...]:
        """Registered category names (normalized), excluding the default."""
        default_key = normalize_category(self.default_category)
        return tuple(name for name in self._profiles if name != default_key)

    def is_registered(self, category: str) -> bool:
        return normalize_category(category) in self._profiles

    def get(self, category: str) -> CategoryProfile:
        """
        Resolve a category to its profile.

        Unknown categories get the default profile, renamed to the requested
        category and with its kind resolved by alias.
        """
        key = normalize_category(category)
        profile = self._profiles.get(key)
        if profile is not None:
            return profile

        logger.warning(f"Unknown category '{category}', using default profile")
        default = self._profiles[normalize_category(self.default_category)]
        return CategoryProfile(
            name=key,
            kind=alias_kind(key),
            thresholds=default.thresholds,
            candidate_pool=default.candidate_pool,
            fallback_templates=default.fallback_templates,
            fallback_values=default.fallback_values,
            focus_areas=default.focus_areas,
        )

    def kind_of(self, category: str) -> str:
        """Entity kind for a category (registered kind, else alias)."""
        profile = self._profiles.get(normalize_category(category))
        if profile is not None:
            return profile.kind
        return alias_kind(category)

    # =========================================================================
    # Construction
    # =========================================================================

    def _build_profile(self, name: str, definition: dict) -> CategoryProfile:
        thresholds = GuessThresholds(**{
            key: int(definition["thresholds"][key]) for key in REQUIRED_THRESHOLD_KEYS
        })

        pool = tuple(
            CandidateQuestion(
                text=entry["text"],
                eliminates_on_yes=frozenset(entry.get("eliminates_on_yes", [])),
                eliminates_on_no=frozenset(entry.get("eliminates_on_no", [])),
                priority=int(entry.get("priority", 0)),
                split_ratio=float(entry["split_ratio"]),
                topic=entry.get("topic", ""),
            )
            for entry in definition.get("candidate_pool", [])
        )

        fallback_values = MappingProxyType({
            slot: tuple(values)
            for slot, values in definition.get("fallback_values", {}).items()
        })

        focus_areas = tuple(
            FocusArea(label=area["label"], keywords=tuple(k.lower() for k in area.get("keywords", [])))
            for area in definition.get("focus_areas", [])
        )

        return CategoryProfile(
            name=normalize_category(name),
            kind=definition["kind"],
            thresholds=thresholds,
            candidate_pool=pool,
            fallback_templates=tuple(definition.get("fallback_templates", [])),
            fallback_values=fallback_values,
            focus_areas=focus_areas,
        )

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_ruleset(self, categories: Dict[str, dict]):
        """
        Validate ruleset structure on initialization.

        Checks:
        - default_category exists and is defined
        - Every category has a valid kind and complete thresholds
        - Pool entries have text ending in '?', split_ratio in (0, 1)
        - No duplicate question text within a pool
        - Fallback template slots all have value lists
        - Focus areas have labels

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if not self.default_category:
            errors.append("Missing 'default_category' in ruleset")
        elif self.default_category not in categories:
            errors.append(f"Default category '{self.default_category}' not defined in categories")

        for name, definition in categories.items():
            kind = definition.get("kind")
            if kind not in VALID_KINDS:
                errors.append(f"Category '{name}' has invalid kind '{kind}'")

            thresholds = definition.get("thresholds", {})
            for key in REQUIRED_THRESHOLD_KEYS:
                value = thresholds.get(key)
                if not isinstance(value, int) or value < 0:
                    errors.append(f"Category '{name}' threshold '{key}' must be a non-negative int")

            seen_texts = set()
            for i, entry in enumerate(definition.get("candidate_pool", [])):
                text = entry.get("text")
                if not text:
                    errors.append(f"Question at index {i} in category '{name}' missing 'text'")
                    continue
                if not text.endswith("?"):
                    errors.append(f"Question '{text}' in category '{name}' must end with '?'")
                if text.lower() in seen_texts:
                    errors.append(f"Duplicate question '{text}' in category '{name}'")
                seen_texts.add(text.lower())

                ratio = entry.get("split_ratio")
                if not isinstance(ratio, (int, float)) or not 0 < ratio < 1:
                    errors.append(f"Question '{text}' in category '{name}' has invalid split_ratio {ratio}")

            values = definition.get("fallback_values", {})
            for template in definition.get("fallback_templates", []):
                for slot in template_slots(template):
                    if not values.get(slot):
                        errors.append(
                            f"Fallback template '{template}' in category '{name}' "
                            f"references undefined slot '{slot}'"
                        )

            for i, area in enumerate(definition.get("focus_areas", [])):
                if not area.get("label"):
                    errors.append(f"Focus area at index {i} in category '{name}' missing 'label'")

        if errors:
            error_msg = "Category ruleset validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        logger.info("Category ruleset validation passed")


def template_slots(template: str) -> Tuple[str, ...]:
    """Named slots of a fallback template, in order of appearance."""
    return tuple(
        field_name
        for _, field_name, _, _ in string.Formatter().parse(template)
        if field_name
    )
