"""
Tests for the lexical + semantic-group similarity heuristic
"""

import pytest

from twenty_questions.core.similarity_detector import SimilarityDetector
from twenty_questions.utils.semantic_groups import SEMANTIC_GROUPS, groups_for


@pytest.fixture
def detector():
    return SimilarityDetector()


class TestNormalize:

    def test_strips_stopwords_and_punctuation(self):
        assert SimilarityDetector.normalize("Are they from Europe?") == "from europe"
        assert SimilarityDetector.normalize("Are they European?") == "european"

    def test_collapses_whitespace(self):
        assert SimilarityDetector.normalize("  Is it   a  MAMMAL?! ") == "mammal"

    def test_only_stopwords_normalizes_to_empty(self):
        assert SimilarityDetector.normalize("Is it?") == ""


class TestAreSimilar:

    def test_europe_vs_european(self, detector):
        verdict = detector.check("Are they European?", ["Are they from Europe?"])

        assert verdict.is_similar
        assert verdict.reason == "semantic_group:geography"

    def test_exact_after_normalization(self, detector):
        verdict = detector.check("is it a MAMMAL", ["Is it a mammal?"])

        assert verdict.reason == "exact"

    def test_substring(self, detector):
        verdict = detector.check("Is it big and heavy?", ["Is it big?"])

        assert verdict.reason == "substring"

    def test_token_overlap(self, detector):
        verdict = detector.check("Does it have sharp teeth and claws?", ["Does it have claws and sharp teeth?"])

        assert verdict.reason == "token_overlap"

    @pytest.mark.parametrize("a, b", [
        ("Is it big?", "Is it huge?"),
        ("Is it electronic?", "Does it need batteries?"),
        ("Does it eat meat?", "Is it carnivorous?"),
        ("Were they a president?", "Were they a monarch?"),
        ("Are they still alive?", "Are they dead?"),
    ])
    def test_semantic_group_pairs(self, detector, a, b):
        assert detector.are_similar(a, b)

    @pytest.mark.parametrize("a, b", [
        ("Are they from Europe?", "Are they male?"),
        ("Is it a mammal?", "Does it live in water?"),
        ("Is it big?", "Is it electronic?"),
        ("Can it fly?", "Is it nocturnal?"),
    ])
    def test_different_concepts(self, detector, a, b):
        assert not detector.are_similar(a, b)

    def test_symmetric(self, detector):
        assert detector.are_similar("Is it huge?", "Is it big?") == detector.are_similar("Is it big?", "Is it huge?")

    def test_empty_after_normalization_never_similar(self, detector):
        assert not detector.are_similar("Is it?", "Is it?")

    def test_lexical_only_variant(self):
        lexical = SimilarityDetector(use_semantic_groups=False)

        assert not lexical.are_similar("Are they European?", "Are they from Europe?")
        assert lexical.are_similar("Is it a mammal?", "Is it a MAMMAL")


class TestCheckAgainstTranscript:

    def test_reports_first_matching_question(self, detector):
        previous = ["Is it alive?", "Is it a mammal?", "Is it a mammal or not?"]

        verdict = detector.check("Is it a mammal?", previous)

        assert verdict.is_similar
        assert verdict.matched_against == "Is it a mammal?"

    def test_no_previous_questions(self, detector):
        verdict = detector.check("Is it a mammal?", [])

        assert not verdict.is_similar
        assert verdict.matched_against is None

    def test_is_similar_to_any(self, detector):
        assert detector.is_similar_to_any("Is it large?", ["Can it fly?", "Is it bigger than a car?"])
        assert not detector.is_similar_to_any("Is it nocturnal?", ["Can it fly?"])


class TestConstruction:

    def test_rejects_zero_shared_tokens(self):
        with pytest.raises(ValueError):
            SimilarityDetector(min_shared_tokens=0)

    @pytest.mark.parametrize("threshold", [0.0, 1.5])
    def test_rejects_bad_overlap_threshold(self, threshold):
        with pytest.raises(ValueError):
            SimilarityDetector(overlap_threshold=threshold)


class TestSemanticGroups:

    def test_fifteen_clusters(self):
        assert len(SEMANTIC_GROUPS) == 15

    def test_plural_tokens_match(self):
        assert "animal_classification" in groups_for("mammals")

    def test_multi_word_entries_match_as_phrase(self):
        assert "leadership_role" in groups_for("serve prime minister")
        assert "leadership_role" not in groups_for("prime number")
