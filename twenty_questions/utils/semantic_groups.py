"""
Semantic Groups - Lexicon for question similarity detection

Responsibilities:
- Stoplist of function words removed during normalization
- Curated topic clusters: two questions touching the same cluster are
  treated as asking about the same concept
- Single source of truth for the similarity lexicon

Design principles:
- Simple lookup tables (no logic beyond lookup)
- Versioned (SEMANTIC_GROUPS_VERSION)
- Over-inclusive: a shared cluster word is enough to call two questions similar
"""

from typing import Dict, FrozenSet, Optional

SEMANTIC_GROUPS_VERSION = "1.0.0"

STOPWORDS: FrozenSet[str] = frozenset({
    'is', 'it', 'a', 'an', 'the', 'does', 'do', 'can', 'will', 'would',
    'they', 'he', 'she', 'are', 'were', 'was', 'did', 'have', 'has', 'had',
    'its', 'their', 'them', 'be', 'been', 'of', 'to', 'in', 'on', 'at',
    'for', 'or', 'and', 'any', 'this', 'that', 'there', 'you', 'your',
})

# Cluster name -> words expressing one underlying concept
SEMANTIC_GROUPS: Dict[str, FrozenSet[str]] = {
    'size': frozenset({
        'size', 'big', 'bigger', 'large', 'larger', 'small', 'smaller',
        'tiny', 'huge', 'massive', 'enormous', 'gigantic', 'giant',
    }),
    'life_status': frozenset({
        'alive', 'living', 'life', 'dead', 'deceased', 'extinct',
    }),
    'gender': frozenset({
        'male', 'female', 'man', 'woman', 'gender', 'boy', 'girl',
    }),
    'geography': frozenset({
        'country', 'nation', 'nationality', 'from', 'region', 'area', 'place',
        'location', 'where', 'continent', 'europe', 'european', 'asia',
        'asian', 'africa', 'african', 'america', 'american',
    }),
    'leadership_role': frozenset({
        'president', 'leader', 'prime minister', 'head', 'ruler', 'king',
        'queen', 'monarch', 'dictator', 'emperor',
    }),
    'time_era': frozenset({
        'time', 'era', 'period', 'century', 'decade', 'when', 'before',
        'after', 'during', 'recent', 'historical',
    }),
    'color': frozenset({
        'color', 'colour', 'coloured', 'colored', 'black', 'white', 'red',
        'blue', 'green', 'yellow', 'appearance', 'looks',
    }),
    'electronics': frozenset({
        'electronic', 'digital', 'technology', 'tech', 'computer', 'machine',
        'device', 'gadget', 'electric', 'electrical', 'electricity',
        'battery', 'batteries', 'power',
    }),
    'animal_classification': frozenset({
        'mammal', 'animal', 'creature', 'species', 'bird', 'reptile', 'fish',
        'insect',
    }),
    'diet': frozenset({
        'food', 'eat', 'edible', 'consume', 'diet', 'carnivore', 'carnivorous',
        'herbivore', 'omnivore', 'meat',
    }),
    'domesticity': frozenset({
        'house', 'home', 'domestic', 'household', 'indoor', 'kitchen',
        'bedroom', 'bathroom',
    }),
    'material': frozenset({
        'material', 'made', 'metal', 'wood', 'plastic', 'glass', 'fabric',
        'stone',
    }),
    'function': frozenset({
        'use', 'function', 'purpose', 'tool', 'instrument', 'equipment', 'work',
    }),
    'activity_status': frozenset({
        'active', 'current', 'retired', 'former', 'still', 'playing', 'serving',
    }),
    'achievement': frozenset({
        'won', 'champion', 'award', 'prize', 'famous', 'successful',
        'achievement', 'accomplished',
    }),
}


def _singular(token: str) -> str:
    """Crude plural strip ('mammals' -> 'mammal'); leaves short words alone."""
    if len(token) > 3 and token.endswith('s') and not token.endswith('ss'):
        return token[:-1]
    return token


def groups_for(normalized_text: str) -> FrozenSet[str]:
    """
    Return the names of every cluster the normalized text touches.

    Single words match on tokens (with a plural strip); multi-word entries
    such as 'prime minister' match as phrases.

    Args:
        normalized_text: Output of SimilarityDetector.normalize()

    Returns:
        frozenset[str]: Cluster names
    """
    tokens = set(normalized_text.split())
    tokens |= {_singular(t) for t in tokens}
    padded = f" {normalized_text} "

    hits = set()
    for name, words in SEMANTIC_GROUPS.items():
        for word in words:
            if ' ' in word:
                if f" {word} " in padded:
                    hits.add(name)
                    break
            elif word in tokens:
                hits.add(name)
                break
    return frozenset(hits)


def shared_group(text_a: str, text_b: str) -> Optional[str]:
    """First cluster (in table order) touched by both normalized texts."""
    common = groups_for(text_a) & groups_for(text_b)
    for name in SEMANTIC_GROUPS:
        if name in common:
            return name
    return None
