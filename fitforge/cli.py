"""
CLI Interface for the FitForge questionnaire

Runs the questionnaire in the terminal, or replays a JSON list of answers
and prints the resulting profile.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from .branching.engine import QuestionnaireEngine, QuestionnaireSession
from .branching.projector import resolve_subfield
from .errors import GraphIntegrityError, ValidationError
from .injury_kb import DEFAULT_KB_PATH, InjuryKnowledgeBase
from .schemas.questionnaire import NUMERIC_TYPES, SELECT_TYPES, Question, QuestionType


COMMANDS = ("back", "status", "quit")


def print_header():
    """Print CLI header."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║     FITFORGE - Training Questionnaire                         ║
║                                                               ║
║     Commands: back, status, quit                              ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """)


def format_question(question: Question, progress: float, answer: Any = None) -> str:
    """Render a question with numbered options."""
    lines = [f"\n[{int(progress * 100):>3}%] {question.title}"]
    if question.subtitle:
        lines.append(f"       {question.subtitle}")
    for idx, option in enumerate(question.options, 1):
        desc = f" - {option.description}" if option.description else ""
        lines.append(f"   {idx}. {option.label}{desc}")
    if question.type in SELECT_TYPES:
        lines.append("   (comma-separated numbers or ids; blank for none)")
    elif question.type == QuestionType.MULTI_TEXT_ADD:
        lines.append("   (separate entries with ';')")
    if answer not in (None, "", [], {}):
        lines.append(f"   previous answer: {answer}")
    return "\n".join(lines)


def parse_choice(question: Question, text: str) -> str:
    """Map '2' or an option id to the option id."""
    text = text.strip()
    if text.isdigit() and text not in question.option_ids():
        idx = int(text) - 1
        if 0 <= idx < len(question.options):
            return question.options[idx].id
    return text


def parse_response(question: Question, text: str) -> Any:
    """Turn a typed line into the raw answer value for the question type."""
    if question.type == QuestionType.SINGLE_SELECT:
        return parse_choice(question, text)
    if question.type in SELECT_TYPES:
        return [parse_choice(question, part) for part in text.split(",") if part.strip()]
    if question.type == QuestionType.MULTI_TEXT_ADD:
        return [part for part in text.split(";")]
    if question.type in NUMERIC_TYPES:
        return text.strip()
    return text


def ask_fields(
    session: QuestionnaireSession,
    question: Question,
    input_fn: Callable[[str], str],
) -> dict:
    """Prompt each visible sub-field of a multi-field screen in order."""
    values: dict[str, Any] = {}
    for sub in question.fields:
        resolved = resolve_subfield(sub, session.profile, values)
        if not resolved.visible:
            continue
        label = resolved.label + (f" ({resolved.unit})" if resolved.unit else "")
        if resolved.field.options:
            choices = ", ".join(f"{i}={o.id}" for i, o in enumerate(resolved.field.options, 1))
            label += f" [{choices}]"
        text = input_fn(f"   {label}: ").strip()
        if resolved.field.options:
            text = parse_choice(resolved.field, text)
        values[sub.id] = text
    return values


def print_status(session: QuestionnaireSession):
    state = session.state
    print(f"\nProgress: {int(state.progress * 100)}%")
    print(f"Answered: {len(state.history)}")
    if state.history:
        print(f"Path: {' -> '.join(state.history_ids)}")


def run_interactive(session: QuestionnaireSession, input_fn: Callable[[str], str] = input) -> bool:
    """
    Run an interactive questionnaire session in the terminal.

    Returns:
        True when the questionnaire was completed, False if the user quit.
    """
    while not session.is_complete:
        question = session.current_node()
        print(format_question(question, session.progress, session.current_answer()))

        if question.type == QuestionType.MULTI_FIELD:
            command = input_fn("\nPress enter to continue (or back/status/quit): ").strip().lower()
        else:
            response = input_fn("\nYour answer: ")
            command = response.strip().lower()

        if command == "back":
            if session.state.can_go_back():
                session.back()
                print("Going back to previous question...")
            else:
                print("Already at the first question.")
            continue

        if command == "status":
            print_status(session)
            continue

        if command == "quit":
            print("Questionnaire abandoned.")
            return False

        if question.type == QuestionType.MULTI_FIELD:
            value = ask_fields(session, question, input_fn)
        else:
            value = parse_response(question, response)

        try:
            session.advance(value)
        except ValidationError as e:
            for field_id, message in e.errors.items():
                print(f"  ✗ {field_id}: {message}")

    print("""
╔═══════════════════════════════════════════════════════════════╗
║                  QUESTIONNAIRE COMPLETE!                      ║
╚═══════════════════════════════════════════════════════════════╝
""")
    return True


def replay_answers(engine: QuestionnaireEngine, answers: list) -> QuestionnaireSession:
    """Feed a list of raw answers through a fresh session, in order."""
    session = QuestionnaireSession(engine, session_id="replay")
    for value in answers:
        if session.is_complete:
            break
        session.advance(value)
    return session


def load_engine(kb_path: Optional[str] = None) -> QuestionnaireEngine:
    path = Path(kb_path or os.getenv("FITFORGE_KB_PATH") or DEFAULT_KB_PATH)
    return QuestionnaireEngine(knowledge_base=InjuryKnowledgeBase.from_json(path))


def main(argv: Optional[list] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="FitForge training questionnaire",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Answer the questionnaire interactively
  fitforge

  # Replay saved answers and print the profile
  fitforge --answers answers.json

  # Write the finished profile to a file
  fitforge --output profile.json
        """
    )

    parser.add_argument(
        "--answers", "-a",
        help="JSON file with a list of answers to replay, one per question"
    )

    parser.add_argument(
        "--output", "-o",
        help="Write the completed profile JSON to this file"
    )

    parser.add_argument(
        "--kb",
        help="Injury knowledge base JSON (default: $FITFORGE_KB_PATH or bundled file)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log engine transitions"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    engine = load_engine(args.kb)

    if args.answers:
        try:
            answers = json.loads(Path(args.answers).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error: could not read answers file: {e}")
            sys.exit(1)
        if not isinstance(answers, list):
            print("Error: answers file must contain a JSON list")
            sys.exit(1)
        try:
            session = replay_answers(engine, answers)
        except ValidationError as e:
            print(f"Error: {e}")
            sys.exit(1)
        except GraphIntegrityError as e:
            print(f"Error: broken question flow: {e}")
            sys.exit(2)
        if not session.is_complete:
            print(f"Answers ran out at '{session.state.current_question_id}'")
    else:
        print_header()
        session = QuestionnaireSession(engine, session_id="cli")
        if not run_interactive(session):
            return

    profile_json = json.dumps(session.profile.to_dict(), indent=2)
    print(profile_json)

    if args.output:
        Path(args.output).write_text(profile_json, encoding="utf-8")
        print(f"\nProfile saved to: {args.output}")


if __name__ == "__main__":
    main()
