"""Interactive calculator REPL, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from dataclasses import dataclass, field
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .builder import BuildError
from .evaluator import evaluate
from .history import History
from .lower import pretty
from .repl_highlight import CalcLexer
from .runner import error_result, parse
from .types import CalcResult, EvalError
from .utils import configure_logging, debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r\n]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/help": ("Show usage", ""),
    "/history": ("List previous calculations", "[n]"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/recall": ("Edit a previous input (or its result with =)", "N [=]"),
    "/tree": ("Toggle printing the expression tree", "[on|off]"),
}

_HELP_TEXT = """\
Type an expression, like "355/113" or "(9+8)/(7+6)", and hit return.
Numbers, + - * /, and parentheses are supported; a leading - makes a
number negative.
Commands: /history [n], /recall N [=], /tree [on|off], /clear, /help.
Ctrl-D exits."""

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")

DEFAULT_SHOWN = 10


@dataclass
class ReplState:
    history: History = field(default_factory=History)
    show_tree: bool = False
    # text to pre-fill the next prompt with (set by /recall)
    pending: str = ""


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _parse_toggle(arg: str, current: bool) -> bool | None:
    """New flag value for an on/off argument; empty toggles, junk gives None."""
    if arg.lower() in _ON:
        return True
    if arg.lower() in _OFF:
        return False
    if arg == "":
        return not current
    return None


def _handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].strip() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/help":
        print(_HELP_TEXT)
        return True

    if cmd == "/history":
        count = DEFAULT_SHOWN
        if arg:
            if not arg.isdigit():
                print("Usage: /history [n]", file=sys.stderr)
                return True
            count = int(arg)

        for pos, entry in reversed(state.history.recent(count)):
            print(f"{pos:>3}  {entry}")
        return True

    if cmd == "/recall":
        words = arg.split()
        if not words or not words[0].isdigit() or words[1:] not in ([], ["="]):
            print("Usage: /recall N [=]", file=sys.stderr)
            return True

        text = state.history.recall(int(words[0]), result=words[1:] == ["="])
        if text is None:
            print(f"No calculation at position {words[0]}", file=sys.stderr)
            return True

        state.pending = text
        return True

    if cmd == "/tree":
        flag = _parse_toggle(arg, state.show_tree)
        if flag is None:
            print("Usage: /tree [on|off]", file=sys.stderr)
            return True

        state.show_tree = flag
        print(f"Tree display: {'on' if flag else 'off'}")
        return True

    if cmd == "/py-traceback":
        flag = _parse_toggle(arg, debug_py_trace_enabled())
        if flag is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        if flag:
            os.environ["TREECALC_DEBUG_PY_TRACE"] = "1"
        else:
            os.environ.pop("TREECALC_DEBUG_PY_TRACE", None)

        print(f"Python traceback: {'on' if flag else 'off'}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def evaluate_line(text: str, state: ReplState) -> None:
    """Evaluate one submitted expression, print and record the outcome."""
    try:
        tree = parse(text)
        if state.show_tree:
            print(pretty(tree), end="")
        result = CalcResult(value=evaluate(tree))
    except (BuildError, EvalError) as exc:
        result = error_result(exc)
        print(f"Error: {result.display()}", file=sys.stderr)
        if debug_py_trace_enabled():
            print("\nPython traceback:", file=sys.stderr)
            print(
                "".join(traceback.format_tb(exc.__traceback__)),
                file=sys.stderr,
                end="",
            )
    else:
        print(result.display())

    state.history.record(text, result)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    configure_logging()
    state = ReplState()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=CalcLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
    )

    print("treecalc: /help for usage, Ctrl-D to exit")

    while True:
        try:
            text = session.prompt("> ", default=state.pending)
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            state.pending = ""
            continue

        state.pending = ""
        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, state):
            continue

        evaluate_line(text.strip(), state)


if __name__ == "__main__":
    repl()
