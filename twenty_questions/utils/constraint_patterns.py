"""
Constraint Patterns - Which predicates make sense for which entity kind

Tables:
- KIND_FORBIDDEN: kind -> (pattern, reason) pairs for predicates that are
  definitionally inapplicable to that kind (material questions for people,
  career questions for animals, biological questions for objects)
- CATEGORY_FORBIDDEN: extra keyword bans for individual categories
- APPROPRIATE_DOMAINS: canonical predicate domains per kind / category,
  used when auditing candidate pools and reported in analysis

Pattern matching is done on the lower-cased question text.

Note:
    The people table has no "are they alive" ban. Life status separates
    historical from contemporary people (world leaders, retired players).
"""

import re
from typing import Dict, Pattern, Tuple

CONSTRAINT_PATTERNS_VERSION = "1.0.0"

ForbiddenRule = Tuple[Pattern, str]


def _forbid(pattern: str, reason: str) -> ForbiddenRule:
    return re.compile(pattern), reason


def _keywords(*phrases: str) -> Pattern:
    """Word-bounded alternation over literal phrases."""
    return re.compile(r"\b(" + "|".join(re.escape(p) for p in phrases) + r")\b")


KIND_FORBIDDEN: Dict[str, Tuple[ForbiddenRule, ...]] = {
    'animals': (
        _forbid(r"are they alive", "All animals are alive by definition"),
        _forbid(r"are they human", "Humans are not in the animals category"),
        _forbid(r"do they have a job|are they employed|are they retired", "Animals do not have careers"),
        _forbid(r"are they (famous|celebrities|politicians|wealthy)", "Animals do not have human social status"),
        _forbid(r"are they married|do they have children", "Animals do not have human family structures"),
        _forbid(r"do they speak|do they have a college degree|are they educated",
                "Animals do not have human education/language"),
        _forbid(r"were they born in \d{4}|are they over \d+", "Animals do not have human-style ages/birth years"),
        _forbid(r"(is it|are they) (electronic|digital|manufactured)", "Animals are biological, not technological"),
        _forbid(r"(is it|are they) made of (metal|plastic|wood)", "Animals are not manufactured"),
        _forbid(r"(does it|do they) need (electricity|batteries|power)", "Animals do not require power sources"),
        _forbid(r"are they (expensive|waterproof|tools)", "Animals are not commercial products"),
        _forbid(r"do they have screens|do they break easily", "Animals do not have technological features"),
        _forbid(r"do they (drive|use computers|watch tv|cook food|wear clothes|read books)",
                "Animals do not perform human activities"),
    ),
    'objects': (
        _forbid(r"(is it|are they) alive|(does it|do they) live\b", "Objects are not living entities"),
        _forbid(r"(does it|do they) (eat|breathe|sleep|reproduce|grow|age|die)\b",
                "Objects do not have biological functions"),
        _forbid(r"are they (born|conscious)|do they (have parents|feel pain|have emotions|think)",
                "Objects do not have biological/cognitive attributes"),
        _forbid(r"(is it|are they) (male|female)|(does it|do they) have (a )?gender", "Objects do not have gender"),
        _forbid(r"do they have (children|babies|offspring|names)",
                "Objects do not reproduce or have personal identity"),
        _forbid(r"were they born|when were they born", "Objects are manufactured, not born"),
        _forbid(r"are they married|do they have (family|jobs)", "Objects do not have relationships or careers"),
        _forbid(r"are they (famous|educated)|do they (speak|vote)",
                "Objects do not have social/political attributes"),
        _forbid(r"(does it|do they) (hunt|migrate|hibernate)", "Objects do not have animal behaviors"),
        _forbid(r"(is it|are they) (wild|a predator|predators|carnivorous|domesticated|nocturnal)",
                "Objects do not have animal characteristics"),
        _forbid(r"do they (mate|have territories)", "Objects do not have animal behaviors"),
    ),
    'people': (
        _forbid(r"do they (hibernate|migrate|molt)", "People do not have animal behaviors"),
        _forbid(r"are they (domesticated|wild|predators|nocturnal)", "People are not animals"),
        _forbid(r"do they have (fur|claws)|do they lay eggs|can they fly", "People do not have animal physical features"),
        _forbid(r"are they mammals|do they live in packs|are they territorial",
                "People are not classified as animals in this context"),
        _forbid(r"do they hunt(?! for)", "People do not hunt prey like animals"),
        _forbid(r"(is it|are they) made of (metal|plastic|wood)", "People are biological, not manufactured"),
        _forbid(r"(does it|do they) need (electricity|batteries|power)|(is it|are they) electronic",
                "People are not electronic devices"),
        _forbid(r"are they (manufactured|waterproof|digital)", "People are not technological objects"),
        _forbid(r"do they (break|have circuits|have screens)", "People do not have technological features"),
        _forbid(r"are they tools|are they expensive to buy", "People are not commercial products"),
        _forbid(r"are they carnivorous|do they hunt prey", "Use dietary questions appropriate for people"),
        _forbid(r"do they eat meat", "Use appropriate dietary questions for people"),
        _forbid(r"do they breathe|do they have blood|are they human",
                "Redundant: all people breathe, have blood and are human"),
    ),
}

CATEGORY_FORBIDDEN: Dict[str, Tuple[ForbiddenRule, ...]] = {
    'world leaders': (
        (_keywords('made of', 'plastic', 'metal', 'wood', 'material', 'electronic', 'digital'),
         "World leaders are people, not manufactured objects"),
        (_keywords('smaller than', 'bigger than', 'size', 'portable', 'handheld', 'hold it'),
         "Object size questions do not apply to world leaders"),
        (_keywords('used for', 'communication', 'tool', 'furniture', 'device', 'machine'),
         "Usage questions do not apply to world leaders"),
        (_keywords('color', 'black', 'white', 'red', 'blue', 'weigh', 'heavy', 'light'),
         "Physical appearance questions do not apply to world leaders"),
        (_keywords('famous', 'well-known', 'popular', 'controversial', 'important', 'significant'),
         "Every world leader is notable; fame questions split nothing"),
    ),
    'animals': (
        (_keywords('president', 'prime minister', 'elected', 'political', 'served',
                   'office', 'government', 'vote', 'democratic', 'leader'),
         "Political questions do not apply to animals"),
    ),
    'objects': (
        (_keywords('alive', 'living', 'breathe', 'eat', 'carnivore', 'herbivore',
                   'mammal', 'bird', 'reptile', 'wild', 'domesticated', 'fur', 'feathers'),
         "Biological questions do not apply to objects"),
    ),
}

APPROPRIATE_DOMAINS: Dict[str, Tuple[str, ...]] = {
    # by kind
    'people': ('gender', 'life status', 'geography', 'leadership role', 'time period', 'achievements'),
    'animals': ('classification', 'habitat', 'size', 'diet', 'locomotion', 'behavior', 'geography'),
    'objects': ('technology', 'size', 'material', 'location', 'function', 'usage'),
    # by category (overrides kind)
    'world leaders': ('gender', 'life status', 'geography', 'political role', 'time period',
                      'achievements and circumstances'),
    'cricket players': ('activity status', 'nationality', 'playing role', 'era', 'achievements'),
    'football players': ('activity status', 'nationality', 'position', 'clubs', 'trophies'),
    'nba players': ('activity status', 'position', 'teams', 'championships', 'era'),
}
