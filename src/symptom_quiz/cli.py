"""
Command-line interface for symptom-quiz

Runs a quiz definition in the terminal, or validates one.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Callable, List, Optional

from .config import config
from .engine import QuizEngine
from .errors import QuizLoadError
from .export import QuizResult
from .loader import QuizDataLoader, tool_name_from_source
from .quiz.schema import QuestionKind, QuizDefinition, QuizQuestion

LEVEL_COLORS = {
    "low": "\033[92m",  # Green
    "moderate": "\033[93m",  # Yellow
    "high": "\033[91m",  # Red
}
RESET = "\033[0m"


def format_question(question: QuizQuestion, total: int, current_text: Optional[str] = None) -> str:
    """Format a question and its numbered options for terminal output."""
    lines = [
        "",
        f"Question {question.index + 1} of {total}",
        question.prompt,
    ]
    if question.description:
        lines.append(f"  {question.description}")
    lines.append("")

    for i, option in enumerate(question.options, start=1):
        if question.kind == QuestionKind.SCALE:
            lines.append(f"  {i}. {option.value}")
        else:
            icon = f"{option.icon} " if option.icon else ""
            lines.append(f"  {i}. {icon}{option.text}")

    if question.kind == QuestionKind.SCALE and question.scale_labels:
        lines.append(f"     (1 = {question.scale_labels.min}, {len(question.options)} = {question.scale_labels.max})")

    if current_text:
        lines.append(f"\n  Current answer: {current_text}")

    return "\n".join(lines)


def format_result(result: QuizResult) -> str:
    """Format a quiz result for terminal output."""
    color = LEVEL_COLORS.get(result.level, "")
    lines = [
        "",
        "=" * 60,
        "YOUR RESULTS",
        "=" * 60,
        f"Risk Score: {result.score} / {result.max_score}",
        f"Risk Level: {color}{result.label}{RESET}",
    ]

    if result.recommendations:
        lines.append("\nRecommendations:")
        for rec in result.recommendations:
            lines.append(f"  • {rec}")

    if result.is_high_risk:
        lines.append(
            f"\n{LEVEL_COLORS['high']}If your symptoms are severe, seek medical care right away.{RESET}"
        )

    lines.append("")
    return "\n".join(lines)


def run_quiz(
    engine: QuizEngine,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
) -> Optional[QuizResult]:
    """
    Drive a quiz interactively until it completes or the user quits.

    Commands: an option number answers and advances, Enter advances,
    b goes back, r restarts, q quits.

    Returns:
        The exported result, or None if the user quit
    """
    total = engine.definition.question_count

    while not engine.is_completed:
        question = engine.current_question
        current = engine.session.answers.get(question.index)
        output(format_question(question, total, current.display_text if current else None))

        try:
            raw = input_fn(f"\nChoose 1-{len(question.options)}, [b]ack, [r]estart, [q]uit: ")
        except EOFError:
            return None
        choice = raw.strip().lower()

        if choice == "q":
            return None
        if choice == "b":
            if not engine.previous():
                output("Already at the first question.")
            continue
        if choice == "r":
            engine.restart()
            continue
        if choice == "":
            if not engine.next():
                output("Please choose an answer first.")
            continue
        if choice.isdigit() and 1 <= int(choice) <= len(question.options):
            engine.select_answer(question.index, question.options[int(choice) - 1])
            engine.next()
            continue

        output(f"Invalid choice: {raw.strip()}")

    return engine.export_results()


def summarize_definition(definition: QuizDefinition) -> dict:
    """Summary of a definition for the validate command."""
    kinds = [q.kind.value for q in definition.questions]
    return {
        "title": definition.title,
        "questions": definition.question_count,
        "choice_questions": kinds.count(QuestionKind.CHOICE.value),
        "scale_questions": kinds.count(QuestionKind.SCALE.value),
        "levels": {r.level: r.max_score for r in definition.ordered_rules()},
        "max_score": definition.max_score,
        "auto_advance": definition.auto_advance_enabled,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="symptom-quiz",
        description="Run symptom-assessment quizzes in the terminal",
        epilog="Example: symptom-quiz take tools/anxiety-check/quiz-data.json",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    take_parser = subparsers.add_parser("take", help="Take a quiz interactively")
    take_parser.add_argument(
        "source",
        nargs="?",
        default=config.loader.default_source,
        help=f"Quiz data URL or path (default: {config.loader.default_source})"
    )
    take_parser.add_argument(
        "--tool",
        help="Tool identifier (default: derived from the source location)"
    )
    take_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a quiz definition")
    validate_parser.add_argument("source", help="Quiz data URL or path")
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Output summary as JSON"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    try:
        definition = asyncio.run(QuizDataLoader().load(args.source))
    except QuizLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "validate":
        summary = summarize_definition(definition)
        if args.json:
            print(json.dumps(summary, indent=2))
        else:
            print(f"✓ {args.source}: {summary['questions']} questions "
                  f"({summary['choice_questions']} choice, {summary['scale_questions']} scale)")
            for level, bound in summary["levels"].items():
                print(f"  {level}: up to {bound}")
        return 0

    engine = QuizEngine(
        definition,
        args.tool or tool_name_from_source(args.source),
        auto_advance=False,
    )
    result = run_quiz(engine)
    if result is None:
        print("\nQuiz not completed.", file=sys.stderr)
        return 1

    if args.json:
        print(result.to_json())
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
