"""
Console Test Harness for the Twenty Questions engine

Think of something from the chosen category, answer each question with
yes / no / maybe / don't know, and see whether the engine gets there.
"""

import argparse
import json
import logging
import random
import sys

from twenty_questions.core.decision_engine import DEFAULT_MAX_QUESTIONS, DecisionEngine
from twenty_questions.utils.category_registry import CategoryRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

STOP_WORDS = {'quit', 'exit', 'stop'}


def print_separator(char="=", length=60):
    print(char * length)


def print_debug_info(analysis):
    """Print the engine's analysis for the current transcript"""
    print("\n" + "-" * 60)
    print("DEBUG INFO:")
    print("-" * 60)

    report = analysis.to_dict()
    insights = report['insights']
    print(f"Remaining: {insights['remainingCount']} {insights['topCandidates']}")
    print(f"Eliminated: {report['possibilitySpace']['eliminated']}")
    print(f"Deduced facts: {report['facts']['deducedFacts']}")
    print(f"Suggested focus: {insights['suggestedFocus']}")
    print(f"Guessing phase: {report['shouldEnterGuessingPhase']}")
    print("-" * 60)


def build_oracle(model_name, device):
    """Load the optional LLM similarity oracle (slow; needs model weights)"""
    from twenty_questions.core.similarity_oracle import LLMSimilarityChecker
    from twenty_questions.utils.hf_client import HuggingFaceClient

    client = HuggingFaceClient(model_name=model_name, device=device, load_in_4bit=device == "cuda")
    return LLMSimilarityChecker(client)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Twenty Questions console harness")
    parser.add_argument("--category", type=str, default="animals", help="Category to play")
    parser.add_argument("--items", type=str, default="",
                        help="Comma-separated candidate items the target is drawn from")
    parser.add_argument("--seed", type=int, default=None, help="Seed for fallback question selection")
    parser.add_argument("--model", type=str, default=None,
                        help="HuggingFace model for the similarity oracle (off by default)")
    parser.add_argument("--device", choices=["cuda", "cpu"], default="cuda", help="Device for --model")
    parser.add_argument("--debug", action="store_true", help="Print analysis after every answer")
    parser.add_argument("--list-categories", action="store_true", help="List registered categories and exit")
    return parser.parse_args(argv)


def main(argv=None):
    """Run console game"""
    args = parse_args(argv)

    registry = CategoryRegistry()
    if args.list_categories:
        print(json.dumps(list(registry.categories), indent=2))
        return 0

    items = [item.strip() for item in args.items.split(",") if item.strip()]

    try:
        oracle = build_oracle(args.model, args.device) if args.model else None
    except Exception as e:
        print(f"\nFailed to load similarity model: {e}")
        return 1

    engine = DecisionEngine(registry=registry, oracle=oracle, rng=random.Random(args.seed))

    print_separator()
    print(f"TWENTY QUESTIONS - {args.category.upper()}")
    print_separator()
    print("Answer yes / no / maybe / don't know.")
    print("Type 'quit', 'exit', or 'stop' to end early\n")

    # Transcript is external - we hold it in this loop
    history = []

    while len(history) < DEFAULT_MAX_QUESTIONS:
        try:
            analysis = engine.analyze_conversation_state(args.category, history, items)
            question = engine.generate_optimal_question(args.category, history, items)
            is_guess = analysis.should_enter_guessing_phase and any(
                question.lower() == f"is it {item.lower()}?" for item in analysis.possibility_space.remaining
            )
            print(f"\nQ{len(history) + 1}: {question}")

            answer = input("> ").strip()
            if answer.lower() in STOP_WORDS:
                print("\nGame ended by user")
                break
            if not answer:
                print("Please enter an answer.")
                continue

            history.append({'question': question, 'answer': answer})

            if args.debug:
                print_debug_info(engine.analyze_conversation_state(args.category, history, items))

            if is_guess and answer.lower().startswith("y"):
                print_separator()
                print(f"GOT IT in {len(history)} questions!")
                print_separator()
                break

        except KeyboardInterrupt:
            print("\n\nGame interrupted by user (Ctrl+C)")
            break
    else:
        print_separator()
        print(f"Out of questions after {DEFAULT_MAX_QUESTIONS}. You win!")
        print_separator()

    if oracle is not None:
        oracle.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
