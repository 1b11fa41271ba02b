"""
Interactive CLI adapter for recipe generation.

Architectural role:
- Exposes terminal interaction over one `GenerationOrchestrator` session.
- Renders the catalog, the active selection, and generated output.
- Delegates all pipeline work to `orchestrator.submit`.

Interface responsibilities:
- Maintain the active selection and instruction through local commands.
- Run one submission per empty line or `/submit`.

Request lifecycle (per input line):
1. Read stdin.
2. Handle local commands (`exit`/`quit`, `/select`, `/prompt`, `/show`, `/help`).
3. Empty input or `/submit` runs one submission with `asyncio.run`.
4. Print the generated text or the error string.

Input validation behavior:
- `/select` accepts a 1-based catalog index or a catalog reference.
- `/prompt` without text keeps the current instruction.

Error handling strategy:
- Pipeline failures arrive as `FAILED` states and are printed, never raised.
- EOF and keyboard interrupts terminate the loop without traceback output.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
import os
import sys

from recipe_vision.core.errors import UnknownReferenceError
from recipe_vision.core.orchestrator import GenerationOrchestrator


HELP_TEXT = (
    "Commands:\n"
    " <enter> | /submit     generate for the selected image\n"
    " /select <n|reference> choose an image\n"
    " /prompt <text>        replace the instruction\n"
    " /show                 show catalog, selection and instruction\n"
    " exit | quit           leave\n"
)


# =========================================================
# UTF-8 SAFE OUTPUT
# Best-effort stdout encoding normalization for interactive terminals.
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (AttributeError, ValueError, OSError):
        pass


# =========================================================
# RENDERING
# =========================================================

def render_session(orchestrator: GenerationOrchestrator) -> str:
    """Return catalog listing with the active item marked, plus the instruction."""
    lines = ["Catalog:"]
    for position, item in enumerate(orchestrator.catalog, start=1):
        marker = " (selected)" if item.reference == orchestrator.selected else ""
        lines.append(f" {position}. {item.label} [{item.reference}]{marker}")
    if orchestrator.selected not in {item.reference for item in orchestrator.catalog}:
        lines.append(f" selected: {orchestrator.selected}")
    lines.append(f"Instruction: {orchestrator.instruction}")
    return "\n".join(lines)


def resolve_selection(orchestrator: GenerationOrchestrator, argument: str) -> str:
    """Map a 1-based index to its reference; other input is taken as a reference."""
    if argument.isdigit():
        index = int(argument) - 1
        if 0 <= index < len(orchestrator.catalog):
            return orchestrator.catalog[index].reference
    return argument


def handle_command(orchestrator: GenerationOrchestrator, line: str) -> str | None:
    """Apply one local command and return text to print.

    Returns `None` for lines that are not local commands.
    """
    command, _, argument = line.partition(" ")
    command = command.lower()
    argument = argument.strip()

    if command == "/help":
        return HELP_TEXT

    if command == "/show":
        return render_session(orchestrator)

    if command == "/select":
        if not argument:
            return "Usage: /select <n|reference>"
        try:
            orchestrator.select(resolve_selection(orchestrator, argument))
        except UnknownReferenceError as exc:
            return str(exc)
        return f"Selected: {orchestrator.selected}"

    if command == "/prompt":
        if argument:
            orchestrator.set_instruction(argument)
        return f"Instruction: {orchestrator.instruction}"

    return None


def run_submission(orchestrator: GenerationOrchestrator) -> str:
    """Run one submission to completion and return the text to print."""
    state = asyncio.run(orchestrator.submit())
    return state.output


# =========================================================
# MAIN
# =========================================================

def main():
    """
    Run the interactive terminal session.

    Error handling strategy:
    - Catalog initialization failure aborts startup with a message.
    - EOF/interrupt are handled without stack traces.
    """
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())

    try:
        orchestrator = GenerationOrchestrator()
    except ValueError as e:
        print(f"Catalog initialization error: {e}")
        return

    print("Recipe Vision started. (Type 'exit' to quit, '/help' for commands)")
    print(f"Model: {orchestrator.model}\n")
    print("-" * 60)
    print(render_session(orchestrator))
    print("-" * 60)

    while True:

        try:
            line = input("> ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if line.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        if line and line.lower() != "/submit":
            reply = handle_command(orchestrator, line)
            if reply is None:
                print("Unknown command. Type '/help' for commands.")
            else:
                print(reply)
            continue

        print("\nGenerating...\n")
        print(run_submission(orchestrator))
        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
