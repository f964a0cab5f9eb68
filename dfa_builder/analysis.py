from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from .automata import (
    EMPTY_STRING_LABEL,
    START_SYMBOL,
    Automaton,
    GeneratedString,
    SimulationResult,
)


@dataclass(frozen=True)
class TestCase:
    tokens: Tuple[str, ...]
    expected: bool
    label: str = ""

    __test__ = False

    @staticmethod
    def from_raw(raw_tokens: Iterable[str] | str, expected: bool, label: str = "") -> "TestCase":
        return TestCase(tokens=tuple(raw_tokens), expected=expected, label=label)

    @property
    def display(self) -> str:
        return "".join(self.tokens) or EMPTY_STRING_LABEL


@dataclass(frozen=True)
class TestResult:
    case: TestCase
    result: SimulationResult

    __test__ = False

    @property
    def actual(self) -> bool:
        return self.result.accepted and self.result.ok

    @property
    def passed(self) -> bool:
        return self.actual == self.case.expected


def run_test_cases(automaton: Automaton, test_cases: Sequence[TestCase]) -> List[TestResult]:
    results: List[TestResult] = []
    for case in test_cases:
        results.append(TestResult(case=case, result=automaton.simulate(case.tokens)))
    return results


def summarize_results(results: Sequence[TestResult]) -> dict[str, int]:
    summary = {"total": len(results), "passed": 0, "failed": 0}
    for result in results:
        if result.passed:
            summary["passed"] += 1
        else:
            summary["failed"] += 1
    return summary


def summarize_generated(results: Sequence[GeneratedString]) -> dict[str, int]:
    """Count accepted/rejected strings; ``stuck`` is the subset of rejects that errored."""
    summary = {"total": len(results), "accepted": 0, "rejected": 0, "stuck": 0}
    for item in results:
        if item.accepted:
            summary["accepted"] += 1
        else:
            summary["rejected"] += 1
            if item.error:
                summary["stuck"] += 1
    return summary


def format_trace(result: SimulationResult) -> List[str]:
    lines: List[str] = []
    for step in result.trace:
        if step.symbol == START_SYMBOL:
            lines.append(f"Start in state {step.state}")
        elif step.error:
            lines.append(f"Read '{step.symbol}' in {step.state}: {step.error}")
        else:
            lines.append(f"Read '{step.symbol}' → {step.state}")
    return lines


def format_verdict(result: SimulationResult, input_text: str) -> str:
    shown = input_text or EMPTY_STRING_LABEL
    if result.error:
        return f"Error: {result.error}"
    if result.accepted:
        return f'✓ ACCEPTED - String "{shown}" is accepted by the DFA'
    return f'✗ REJECTED - String "{shown}" is rejected by the DFA'


def analyze_graph(automaton: Automaton) -> Dict[str, object]:
    states = automaton.states
    names = {state.id: state.name for state in states}
    start = automaton.start_state

    reachable: Set[int] = set()
    queue: deque[int] = deque([start.id] if start is not None else [])
    while queue:
        state_id = queue.popleft()
        if state_id in reachable:
            continue
        reachable.add(state_id)
        for target_id in automaton.get_state(state_id).transitions.values():
            if target_id not in reachable:
                queue.append(target_id)

    missing: List[Tuple[str, str]] = []
    for state in states:
        for symbol in automaton.alphabet:
            if symbol not in state.transitions:
                missing.append((state.name, symbol))

    report: Dict[str, object] = {
        "state_count": len(states),
        "reachable_count": len(reachable),
        "unreachable": [names[state.id] for state in states if state.id not in reachable],
        "missing_symbols": missing,
        "transition_count": len(automaton.transition_edges()),
        "is_total": bool(states) and not missing,
        "has_start": start is not None,
        "accept_count": len(automaton.accept_states),
    }
    return report
