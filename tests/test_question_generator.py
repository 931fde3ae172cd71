"""
Tests for pool ranking, pruning, fallback templates and oracle consultation
"""

import json
import math
import random

import pytest

from twenty_questions.contracts import OracleVerdict
from twenty_questions.core.knowledge_state import build_knowledge_state
from twenty_questions.core.possibility_space import build_possibility_space
from twenty_questions.core.question_generator import (
    LAST_RESORT_QUESTION,
    QuestionGenerator,
    information_gain,
)
from twenty_questions.core.similarity_detector import SimilarityDetector
from twenty_questions.utils.category_registry import CategoryRegistry

ANIMALS = ["eagle", "shark", "snake", "goldfish", "lion", "elephant"]


class MockOracle:
    """Rejects the first N candidates it is asked about."""

    def __init__(self, reject_first=1):
        self.reject_first = reject_first
        self.calls = []

    def check(self, candidate, previous_questions, category):
        self.calls.append((candidate, tuple(previous_questions), category))
        if len(self.calls) <= self.reject_first:
            return OracleVerdict(is_similar=True, confidence=0.9, reasoning="mock: same concept")
        return OracleVerdict(is_similar=False, confidence=0.9, reasoning="mock: different")


@pytest.fixture(scope="module")
def registry():
    return CategoryRegistry()


@pytest.fixture
def generator(registry):
    return QuestionGenerator(registry, rng=random.Random(42))


def snapshot(history, category="animals", items=ANIMALS):
    state = build_knowledge_state(history, category)
    return state, build_possibility_space(category, state, items)


class TestInformationGain:

    def test_no_gain_with_one_item_left(self):
        assert information_gain(1, 0.12) == 0.0
        assert information_gain(0, 0.12) == 0.0

    def test_even_split_scores_zero(self):
        assert information_gain(10, 0.5) == pytest.approx(0.0, abs=1e-12)

    def test_lopsided_split_scores_higher(self):
        assert information_gain(10, 0.15) == pytest.approx(0.390, abs=1e-3)
        assert information_gain(10, 0.12) > information_gain(10, 0.15) > information_gain(10, 0.2)

    def test_extremes_are_floored(self):
        # Each side floored on its own: p = 0.01, q = 1.0
        expected = abs(1 + 0.01 * math.log2(0.01) + 1.0 * math.log2(1.0))

        assert information_gain(10, 0.0) == pytest.approx(expected)
        assert information_gain(10, 1.0) == pytest.approx(expected)
        assert information_gain(10, 0.0) == pytest.approx(0.9336, abs=1e-4)

    def test_floor_only_applies_outside_bounds(self):
        expected = abs(1 + 0.02 * math.log2(0.02) + 0.98 * math.log2(0.98))

        assert information_gain(10, 0.02) == pytest.approx(expected)

    def test_symmetric_in_split(self):
        assert information_gain(10, 0.3) == pytest.approx(information_gain(10, 0.7))

    @pytest.mark.parametrize("ratio", [0.0, 0.05, 0.25, 0.5, 0.75, 0.99, 1.0])
    def test_non_negative(self, ratio):
        assert information_gain(5, ratio) >= 0.0


class TestRankCandidates:

    def test_empty_history_starts_with_reptile(self, generator):
        state, space = snapshot([])

        ranked = generator.rank_candidates("animals", state, space)

        assert ranked[0].text == "Is it a reptile?"
        assert ranked[0].information_gain == pytest.approx(0.471, abs=1e-3)
        assert ranked[1].text == "Does it live in water?"

    def test_equal_gain_breaks_on_priority(self, generator):
        state, space = snapshot([])

        texts = [c.text for c in generator.rank_candidates("animals", state, space)]

        assert texts.index("Is it a bird?") < texts.index("Is it commonly kept as a pet?") \
            < texts.index("Is it nocturnal?")
        assert texts.index("Is it bigger than a human?") < texts.index("Can it fly?")

    def test_mammal_yes_prunes_other_classes(self, generator):
        state, space = snapshot([("Is it a mammal?", "Yes")])

        ranked = generator.rank_candidates("animals", state, space)
        texts = [c.text for c in ranked]

        assert texts[0] == "Does it live in water?"
        assert ranked[0].information_gain == pytest.approx(0.390, abs=1e-3)
        assert "Is it a bird?" not in texts
        assert "Is it a reptile?" not in texts
        assert "Is it a mammal?" not in texts

    def test_single_item_orders_by_priority(self, generator):
        state, space = snapshot([], items=["eagle"])

        ranked = generator.rank_candidates("animals", state, space)

        assert all(c.information_gain == 0.0 for c in ranked)
        assert [c.priority for c in ranked] == sorted((c.priority for c in ranked), reverse=True)
        assert ranked[0].text == "Is it a mammal?"

    def test_pool_entries_are_not_mutated(self, generator, registry):
        state, space = snapshot([])

        generator.rank_candidates("animals", state, space)

        assert all(entry.information_gain == 0.0 for entry in registry.get("animals").candidate_pool)

    def test_inappropriate_entries_pruned(self, tmp_path):
        leaders = {
            "kind": "people",
            "thresholds": {"min_questions": 8, "max_remaining": 3, "late_game_threshold": 15},
            "candidate_pool": [
                {"text": "Is it made of metal?", "split_ratio": 0.1, "priority": 10},
                {"text": "Are they from Europe?", "split_ratio": 0.35, "priority": 9},
            ],
            "fallback_templates": [],
            "fallback_values": {},
            "focus_areas": [],
        }
        path = tmp_path / "ruleset.json"
        path.write_text(json.dumps({
            "default_category": "world leaders",
            "categories": {"world leaders": leaders},
        }))
        generator = QuestionGenerator(CategoryRegistry(str(path)))
        state, space = snapshot([], category="world leaders", items=["a", "b", "c"])

        texts = [c.text for c in generator.rank_candidates("world leaders", state, space)]

        assert texts == ["Are they from Europe?"]


class TestSelectQuestion:

    def test_scenario_after_mammal(self, generator):
        state, space = snapshot([("Is it a mammal?", "Yes")])

        assert generator.select_question("animals", state, space) == "Does it live in water?"

    def test_always_ends_with_question_mark(self, generator):
        state, space = snapshot([("Is it a reptile?", "no"), ("Does it live in water?", "no")])

        assert generator.select_question("animals", state, space).endswith("?")

    def test_oracle_rejection_moves_to_next_candidate(self, registry):
        oracle = MockOracle(reject_first=1)
        generator = QuestionGenerator(registry, oracle=oracle)
        state, space = snapshot([("Is it a mammal?", "Yes")])

        question = generator.select_question("animals", state, space)

        assert question == "Is it commonly kept as a pet?"
        assert [call[0] for call in oracle.calls] == ["Does it live in water?", "Is it commonly kept as a pet?"]
        assert oracle.calls[0][1] == ("Is it a mammal?",)
        assert oracle.calls[0][2] == "animals"

    def test_oracle_not_called_on_empty_history(self, registry):
        oracle = MockOracle(reject_first=99)
        generator = QuestionGenerator(registry, oracle=oracle)
        state, space = snapshot([])

        assert generator.select_question("animals", state, space) == "Is it a reptile?"
        assert oracle.calls == []


class TestFallback:

    @pytest.fixture
    def exhausted(self, registry):
        history = [(entry.text, "maybe") for entry in registry.get("animals").candidate_pool]
        return snapshot(history)

    def test_fallback_after_pool_exhausted(self, registry, exhausted):
        state, space = exhausted
        profile = registry.get("animals")
        fillings = {
            q for t in profile.fallback_templates
            for q in QuestionGenerator._fill_template(t, profile.fallback_values)
        }
        generator = QuestionGenerator(registry, rng=random.Random(1))

        question = generator.select_question("animals", state, space)

        assert question in fillings
        assert not SimilarityDetector().is_similar_to_any(question, state.asked_questions)

    def test_seeded_rng_is_deterministic(self, registry, exhausted):
        state, _ = exhausted

        first = QuestionGenerator(registry, rng=random.Random(7)).fallback_question("animals", state)
        second = QuestionGenerator(registry, rng=random.Random(7)).fallback_question("animals", state)

        assert first == second

    def test_last_resort_when_everything_is_used(self, tmp_path):
        ruleset = {
            "default_category": "default",
            "categories": {
                "default": {
                    "kind": "generic",
                    "thresholds": {"min_questions": 6, "max_remaining": 2, "late_game_threshold": 12},
                    "candidate_pool": [{"text": "Is it big?", "split_ratio": 0.3, "priority": 1}],
                    "fallback_templates": ["Is it {color}?"],
                    "fallback_values": {"color": ["red", "blue"]},
                    "focus_areas": [],
                }
            },
        }
        path = tmp_path / "ruleset.json"
        path.write_text(json.dumps(ruleset))
        generator = QuestionGenerator(CategoryRegistry(str(path)), rng=random.Random(0))
        history = [("Is it big?", "no"), ("Is it red?", "no"), ("Is it blue?", "no")]
        state, space = snapshot(history, category="things", items=["x", "y", "z"])

        assert generator.select_question("things", state, space) == LAST_RESORT_QUESTION


class TestFillTemplate:

    def test_cartesian_product_in_value_order(self):
        values = {"a": ["x", "y"], "b": ["1", "2"]}

        assert QuestionGenerator._fill_template("Is it {a}{b}?", values) == ["Is it x1?", "Is it x2?", "Is it y1?", "Is it y2?"]

    def test_template_without_slots(self):
        assert QuestionGenerator._fill_template("Is it round?", {}) == ["Is it round?"]
