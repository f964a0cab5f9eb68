from __future__ import annotations

import argparse
import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .analysis import (
    TestCase,
    analyze_graph,
    format_trace,
    format_verdict,
    run_test_cases,
    summarize_generated,
    summarize_results,
)
from .automata import (
    EMPTY_STRING_LABEL,
    Automaton,
    AutomatonError,
    AutomatonValidationError,
    State,
    split_symbols,
)

logger = logging.getLogger(__name__)

TOKEN_SPLIT_RE = re.compile(r"[\s,]+")
TRANSITION_RE = re.compile(r"^(?P<source>[^:>]+):(?P<symbol>[^>]+)>(?P<target>.+)$")
EMPTY_INPUT_LABEL = EMPTY_STRING_LABEL
ACCEPT_WORDS = {"accept", "a", "yes", "y", "true", "t", "1"}
REJECT_WORDS = {"reject", "r", "no", "n", "false", "f", "0"}


@dataclass
class Session:
    automaton: Automaton
    test_inputs: List[str] = field(default_factory=list)
    test_cases: List[TestCase] = field(default_factory=list)
    max_length: Optional[int] = None
    interactive: bool = False


# ---------------------------------------------------------------
def parse_alphabet(text: str) -> List[str]:
    symbols = list(dict.fromkeys(_split_tokens(text.strip())))
    if not symbols:
        raise ValueError("Please enter at least one symbol.")
    return symbols


def parse_transition(text: str) -> Tuple[str, str, str]:
    match = TRANSITION_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Transition '{text}' must look like SOURCE:SYMBOL>TARGET.")
    source, symbol, target = (match.group(key).strip() for key in ("source", "symbol", "target"))
    if not source or not symbol or not target:
        raise ValueError(f"Transition '{text}' must look like SOURCE:SYMBOL>TARGET.")
    return source, symbol, target


def parse_max_length(text: str) -> int:
    raw = str(text).strip()
    if not raw.isdigit():
        raise ValueError("Max length must be a non-negative integer.")
    return int(raw)


def parse_expected(text: str) -> bool:
    raw = text.strip().lower()
    if raw in ACCEPT_WORDS:
        return True
    if raw in REJECT_WORDS:
        return False
    raise ValueError(f"Expected verdict '{text}' must be accept or reject.")


def parse_case(text: str, alphabet: Sequence[str], label: str = "") -> TestCase:
    raw, sep, verdict = text.rpartition("=")
    if not sep:
        raise ValueError(f"Test case '{text}' must look like INPUT=accept or INPUT=reject.")
    tokens = tokenize_input(raw, alphabet)
    return TestCase(tokens=tuple(tokens), expected=parse_expected(verdict), label=label)


def tokenize_input(raw: str, alphabet: Sequence[str]) -> List[str]:
    """Split user text into alphabet symbols, longest match first.

    Spaces and commas are ordinary characters here, so "1 0" over {0, 1}
    reaches the simulation as an unknown symbol instead of being read as "10".
    """
    if not raw or raw.strip() == EMPTY_INPUT_LABEL:
        return []
    return split_symbols(raw, alphabet)


def available_symbols(automaton: Automaton, source: State, target: State) -> List[str]:
    """Symbols still free on ``source`` or already leading to ``target``."""
    return [
        symbol
        for symbol in automaton.alphabet
        if source.transitions.get(symbol, target.id) == target.id
    ]


def build_automaton(
    alphabet: Sequence[str],
    states: Sequence[str],
    start_state: Optional[str],
    accept_states: Sequence[str],
    transitions: Sequence[Tuple[str, str, str]],
) -> Tuple[Automaton, Dict[str, int]]:
    if len(set(states)) != len(states):
        raise AutomatonValidationError("State names must be unique.")
    automaton = Automaton(alphabet)
    state_ids: Dict[str, int] = {}
    for name in states:
        state_ids[name] = automaton.add_state(name=name).id

    def lookup(name: str, role: str) -> int:
        try:
            return state_ids[name]
        except KeyError as exc:
            raise AutomatonValidationError(f"{role} '{name}' was never declared.") from exc

    if start_state:
        automaton.set_start_state(lookup(start_state, "Start state"))
    for name in accept_states:
        automaton.set_accept(lookup(name, "Accept state"))
    for source, symbol, target in transitions:
        source_id = lookup(source, "Source state")
        target_id = lookup(target, "Target state")
        previous = automaton.target_of(source_id, symbol)
        if previous is not None and previous.id != target_id:
            raise AutomatonValidationError(
                f"State '{source}' already moves to '{previous.name}' on '{symbol}'."
            )
        if not automaton.add_transition(source_id, target_id, symbol):
            raise AutomatonValidationError(f"Symbol '{symbol}' is not in the alphabet.")
    logger.info(
        "Built automaton with %d state(s) and %d transition(s)",
        len(automaton),
        len(automaton.transition_edges()),
    )
    return automaton, state_ids


# ---------------------------------------------------------------
def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build a DFA, trace input strings and enumerate accepted strings."
    )
    parser.add_argument("--alphabet", help="Alphabet symbols separated by commas or spaces.")
    parser.add_argument(
        "--state",
        dest="states",
        action="append",
        default=[],
        help="Declare a state (repeatable, or comma separated).",
    )
    parser.add_argument("--start", help="Name of the start state.")
    parser.add_argument(
        "--accept",
        dest="accepts",
        action="append",
        default=[],
        help="Mark a state as accepting (repeatable, or comma separated).",
    )
    parser.add_argument(
        "--transition",
        dest="transitions",
        action="append",
        default=[],
        metavar="SRC:SYM>DST",
        help="Add a transition (repeatable).",
    )
    parser.add_argument(
        "--test",
        dest="tests",
        action="append",
        default=[],
        metavar="STRING",
        help="Simulate a string and print its trace (repeatable).",
    )
    parser.add_argument(
        "--case",
        dest="cases",
        action="append",
        default=[],
        metavar="STRING=accept|reject",
        help="Check a string against an expected verdict (repeatable).",
    )
    parser.add_argument(
        "--generate",
        metavar="N",
        help="Enumerate every string up to N symbols and report acceptance.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug).",
    )
    return parser.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    try:
        session = _build_session(args)
    except KeyboardInterrupt:
        print("\nAborted by user.", file=sys.stderr)
        return 130
    except (AutomatonValidationError, AutomatonError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _display_summary(session)
    for raw in session.test_inputs:
        _display_simulation(session.automaton, raw)
    results = _run_tests(session)
    if session.max_length is not None:
        _display_generated(session.automaton, session.max_length)

    if session.interactive:
        try:
            _interactive_loop(session)
        except KeyboardInterrupt:
            print("\nBye.")
    if any(not result.passed for result in results):
        return 1
    return 0


def _build_session(args: argparse.Namespace) -> Session:
    has_definition = bool(args.alphabet or args.states or args.transitions)
    if has_definition:
        session = _build_from_args(args)
    else:
        session = _build_interactively()
    alphabet = session.automaton.alphabet
    session.test_inputs.extend(args.tests)
    session.test_cases.extend(
        parse_case(text, alphabet, label=f"case {index}") for index, text in enumerate(args.cases, start=1)
    )
    if args.generate is not None:
        session.max_length = parse_max_length(args.generate)
    return session


def _build_from_args(args: argparse.Namespace) -> Session:
    if not args.alphabet:
        raise ValueError("--alphabet is required when defining an automaton from flags.")
    alphabet = parse_alphabet(args.alphabet)
    states = [name for value in args.states for name in _split_tokens(value)]
    if not states:
        raise ValueError("Declare at least one state with --state.")
    accepts = [name for value in args.accepts for name in _split_tokens(value)]
    transitions = [parse_transition(text) for text in args.transitions]
    automaton, _ = build_automaton(alphabet, states, args.start, accepts, transitions)
    return Session(automaton=automaton)


def _build_interactively() -> Session:
    print("Interactive DFA builder")
    alphabet = _prompt_alphabet()
    states = _prompt_symbol_list("Enter state names (separate with spaces or commas): ")
    start_state = _prompt_choice("Enter the start state: ", states)
    accept_states = _prompt_subset("Enter accepting states (press Enter for none): ", states)
    transitions = _collect_transitions(states, alphabet)
    automaton, _ = build_automaton(alphabet, states, start_state, accept_states, transitions)
    return Session(automaton=automaton, interactive=True)


# ---------------------------------------------------------------
def summary_lines(automaton: Automaton) -> List[str]:
    states = automaton.states
    lines = [f"States: {', '.join(state.name for state in states) if states else '<none>'}"]
    alphabet_text = ", ".join(automaton.alphabet) if automaton.alphabet else "<empty>"
    lines.append(f"Alphabet: {{{alphabet_text}}}")
    start = automaton.start_state
    lines.append(f"Start state: {start.name if start else '<none>'}")
    accept_text = ", ".join(state.name for state in automaton.accept_states) or "<none>"
    lines.append(f"Accept states: {accept_text}")
    lines.append("Transition function:")
    for state in states:
        parts: List[str] = []
        for symbol in automaton.alphabet:
            target = automaton.target_of(state.id, symbol)
            if target is not None:
                parts.append(f"{symbol}->{target.name}")
        lines.append(f"  {state.name}: {', '.join(parts) if parts else '<none>'}")
    report = analyze_graph(automaton)
    if report["unreachable"]:
        lines.append(f"Unreachable: {', '.join(report['unreachable'])}")
    if report["missing_symbols"]:
        formatted = ", ".join(f"{state}:{symbol}" for state, symbol in report["missing_symbols"])
        lines.append(f"Missing transitions: {formatted}")
    elif report["is_total"]:
        lines.append("Transition function is total.")
    return lines


def generated_lines(automaton: Automaton, max_length: int) -> List[str]:
    results = automaton.generate_all_strings(max_length)
    if not results:
        return ["No strings generated."]
    summary = summarize_generated(results)
    lines = [
        f"Total: {summary['total']} strings | Accepted: {summary['accepted']} | Rejected: {summary['rejected']}"
    ]
    width = max(len(item.string) for item in results)
    for item in results:
        status = "✓ Accept" if item.accepted else "✗ Reject"
        lines.append(f"  {item.string.ljust(width)}  {status}")
    return lines


def _display_summary(session: Session) -> None:
    print("\nAutomaton Summary")
    for line in summary_lines(session.automaton):
        print(f"  {line}")


def _display_simulation(automaton: Automaton, raw: str) -> None:
    tokens = tokenize_input(raw, automaton.alphabet)
    result = automaton.simulate(tokens)
    print(f"\n{format_verdict(result, ''.join(tokens))}")
    trace = format_trace(result)
    if trace:
        print("  Execution Trace:")
        for line in trace:
            print(f"    {line}")


def _display_generated(automaton: Automaton, max_length: int) -> None:
    print(f"\nAll strings up to length {max_length}")
    for line in generated_lines(automaton, max_length):
        print(f"  {line}")


def _run_tests(session: Session):
    if not session.test_cases:
        return []
    print("\nRunning test cases...")
    results = run_test_cases(session.automaton, session.test_cases)
    summary = summarize_results(results)
    print(f"  Passed {summary['passed']} of {summary['total']} test cases.")
    for result in results:
        expected_text = "accept" if result.case.expected else "reject"
        actual_text = "accept" if result.actual else "reject"
        status = "PASS" if result.passed else "FAIL"
        note = f" ({result.result.error})" if result.result.error else ""
        prefix = f"{result.case.label}: " if result.case.label else ""
        print(
            f"    [{status}] {prefix}{result.case.display} -> expected {expected_text}, got {actual_text}{note}"
        )
    return results


# ---------------------------------------------------------------
def _interactive_loop(session: Session) -> None:
    automaton = session.automaton
    print(f"\nTest strings (press Enter to stop, type {EMPTY_INPUT_LABEL} for the empty string).")
    while True:
        raw = _safe_input("Input string: ")
        if not raw.strip():
            break
        _display_simulation(automaton, raw)
    while True:
        raw = _safe_input("\nMax length for string generation (press Enter to skip): ").strip()
        if not raw:
            return
        try:
            max_length = parse_max_length(raw)
        except ValueError as exc:
            print(f"  {exc}")
            continue
        _display_generated(automaton, max_length)
        return


def _collect_transitions(states: Sequence[str], alphabet: Sequence[str]) -> List[Tuple[str, str, str]]:
    print("\nEnter DFA transitions (one destination per symbol, leave blank for none).")
    state_set = set(states)
    transitions: List[Tuple[str, str, str]] = []
    for state in states:
        for symbol in alphabet:
            prompt = f"  d({state}, {symbol}) = "
            while True:
                raw = _safe_input(prompt).strip()
                if not raw or raw in {"-", "none"}:
                    break
                destinations = _split_tokens(raw)
                if len(destinations) != 1:
                    print("    Please provide exactly one destination state.")
                    continue
                if destinations[0] not in state_set:
                    print(f"    Unknown state '{destinations[0]}'.")
                    continue
                transitions.append((state, symbol, destinations[0]))
                break
    return transitions


def _prompt_alphabet() -> List[str]:
    while True:
        raw = _safe_input("Enter alphabet symbols (separate with spaces or commas): ")
        try:
            return parse_alphabet(raw)
        except ValueError as exc:
            print(f"  {exc}")


def _prompt_symbol_list(prompt_text: str) -> List[str]:
    while True:
        tokens = _split_tokens(_safe_input(prompt_text).strip())
        if tokens and len(set(tokens)) == len(tokens):
            return tokens
        if tokens:
            print("  Names must be unique.")
        else:
            print("  Please provide at least one value.")


def _split_tokens(text: str) -> List[str]:
    if not text:
        return []
    return [token for token in TOKEN_SPLIT_RE.split(text) if token]


def _prompt_choice(prompt_text: str, options: Sequence[str]) -> str:
    options_set = set(options)
    while True:
        raw = _safe_input(prompt_text).strip()
        if raw in options_set:
            return raw
        print(f"  Value must be one of: {', '.join(options)}.")


def _prompt_subset(prompt_text: str, options: Sequence[str]) -> List[str]:
    options_set = set(options)
    while True:
        raw = _safe_input(prompt_text).strip()
        if not raw:
            return []
        values = _split_tokens(raw)
        invalid = [value for value in values if value not in options_set]
        if invalid:
            print(f"  Unknown states: {', '.join(invalid)}.")
            continue
        return values


def _safe_input(prompt_text: str) -> str:
    try:
        return input(prompt_text)
    except EOFError as exc:
        raise KeyboardInterrupt from exc
