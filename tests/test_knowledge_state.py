"""
Tests for answer classification, fact buckets, deductions and redundancy
"""

import pytest

from twenty_questions.contracts import Answer
from twenty_questions.core.knowledge_state import (
    build_knowledge_state,
    classify_answer,
    implied_redundancies,
    is_question_redundant,
)


class TestClassifyAnswer:

    @pytest.mark.parametrize("text", ["Yes", "y", "  YES  ", "yeah sure", "Yep!", "oh yeah"])
    def test_yes(self, text):
        assert classify_answer(text) == Answer.YES

    @pytest.mark.parametrize("text", ["No", "n", "nope", "Nah", "definitely nope"])
    def test_no(self, text):
        assert classify_answer(text) == Answer.NO

    @pytest.mark.parametrize("text", ["Maybe", "sometimes", "it depends", "I guess maybe"])
    def test_maybe(self, text):
        assert classify_answer(text) == Answer.MAYBE

    @pytest.mark.parametrize("text", ["I don't know", "dont know", "Unknown"])
    def test_unknown(self, text):
        assert classify_answer(text) == Answer.UNKNOWN

    @pytest.mark.parametrize("text", ["", "   ", "ask someone else", "probably"])
    def test_unclassified(self, text):
        assert classify_answer(text) == Answer.UNCLASSIFIED

    def test_not_sure_classifies_as_no(self):
        """Prefix rule wins over intent: 'not sure' starts with 'n'."""
        assert classify_answer("not sure") == Answer.NO


class TestBuildKnowledgeState:

    def test_empty_history(self):
        state = build_knowledge_state([], "animals")

        assert state.question_count == 0
        assert state.confirmed_yes == frozenset()
        assert state.deduced_facts == frozenset()

    def test_buckets_use_normalized_keys(self):
        history = [
            ("Is it a Mammal? ", "Yes"),
            ("Can it fly?", "no"),
            ("Is it nocturnal?", "maybe"),
            ("Is it found in Africa?", "I don't know"),
        ]

        state = build_knowledge_state(history, "animals")

        assert state.confirmed_yes == {"is it a mammal?"}
        assert state.confirmed_no == {"can it fly?"}
        assert state.uncertain == {"is it nocturnal?"}
        assert state.unknown == {"is it found in africa?"}

    def test_unclassified_answer_dropped_from_buckets(self):
        history = [("Is it a mammal?", "ask my friend"), ("Can it fly?", "no")]

        state = build_knowledge_state(history, "animals")

        assert state.question_count == 2
        assert state.facts[0].answer == Answer.UNCLASSIFIED
        assert "is it a mammal?" not in state.confirmed_yes | state.confirmed_no
        assert state.confirmed_no == {"can it fly?"}

    def test_facts_keep_question_order_and_index(self):
        state = build_knowledge_state([("A?", "yes"), ("B?", "no")], "animals")

        assert [f.question_index for f in state.facts] == [1, 2]
        assert state.asked_questions == ("A?", "B?")

    def test_mammal_deductions(self):
        state = build_knowledge_state([("Is it a mammal?", "Yes")], "animals")

        assert {"is_animal", "is_living", "is_mammal", "not_bird", "not_reptile", "not_fish"} <= state.deduced_facts

    def test_not_living_deductions(self):
        state = build_knowledge_state([("Is it alive?", "No")], "objects")

        assert {"not_animal", "not_plant", "not_living"} <= state.deduced_facts

    def test_maybe_answers_deduce_nothing(self):
        state = build_knowledge_state([("Is it a mammal?", "maybe")], "animals")

        assert state.deduced_facts == frozenset()

    def test_category_rules_do_not_leak(self):
        """Animal classification rules do not fire for people."""
        state = build_knowledge_state([("Are they mammals?", "Yes")], "world leaders")

        assert "is_mammal" not in state.deduced_facts

    def test_world_leader_rules(self):
        history = [("Are they still alive?", "No"), ("Are they from Europe?", "Yes")]

        state = build_knowledge_state(history, "world leaders")

        assert {"is_historical", "is_european", "not_asian"} <= state.deduced_facts

    def test_sports_rules(self):
        state = build_knowledge_state([("Are they still playing professionally?", "no")], "cricket players")

        assert {"is_retired", "not_active"} <= state.deduced_facts

    def test_contradictions_are_kept(self):
        """Deductions are additive; conflicting answers yield conflicting predicates."""
        history = [("Are they male?", "Yes"), ("Are they male?", "No")]

        state = build_knowledge_state(history, "world leaders")

        assert {"is_male", "not_male"} <= state.deduced_facts

    def test_idempotent(self):
        history = [("Is it a mammal?", "Yes"), ("Does it live in water?", "No"), ("Is it wild?", "maybe")]

        assert build_knowledge_state(history, "animals") == build_knowledge_state(history, "animals")

    def test_to_dict_is_sorted(self):
        history = [("Is it wild?", "yes"), ("Is it a mammal?", "yes")]

        report = build_knowledge_state(history, "animals").to_dict()

        assert report["confirmedYes"] == ["is it a mammal?", "is it wild?"]
        assert report["deducedFacts"] == sorted(report["deducedFacts"])
        assert set(report) == {"confirmedYes", "confirmedNo", "uncertainQuestions",
                               "unknownQuestions", "deducedFacts"}


class TestRedundancy:

    @pytest.fixture
    def mammal_state(self):
        return build_knowledge_state([("Is it a mammal?", "Yes")], "animals")

    def test_deduced_topic_is_redundant(self, mammal_state):
        assert is_question_redundant("Is it a bird?", mammal_state)
        assert is_question_redundant("Is it a reptile?", mammal_state)

    def test_implied_property_is_redundant(self, mammal_state):
        assert is_question_redundant("Is it warm-blooded?", mammal_state)
        assert implied_redundancies("Is it a vertebrate?", mammal_state)[0][1] == "vertebrate"

    def test_open_question_is_not_redundant(self, mammal_state):
        assert not is_question_redundant("Does it live in water?", mammal_state)
        assert not is_question_redundant("Does it eat meat?", mammal_state)

    def test_male_does_not_match_female(self):
        state = build_knowledge_state([("Are they female?", "Yes")], "world leaders")

        # 'is_female' and 'not_male' are both deduced, so either phrasing is redundant
        assert is_question_redundant("Are they male?", state)
        assert is_question_redundant("Are they a woman?", state)

    def test_nothing_known_nothing_redundant(self):
        state = build_knowledge_state([], "animals")

        assert not is_question_redundant("Is it a bird?", state)
