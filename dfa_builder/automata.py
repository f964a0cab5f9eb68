from __future__ import annotations

import enum
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_ALPHABET: Tuple[str, ...] = ("0", "1")
DEFAULT_RADIUS = 30.0
START_SYMBOL = "START"
EMPTY_STRING_LABEL = "ε"
NO_TRANSITION_NOTE = "No transition defined"

InputSymbols = Union[str, Sequence[str]]
Edge = Tuple[int, str, int]


def split_symbols(text: str, alphabet: Sequence[str]) -> List[str]:
    """Split ``text`` into alphabet symbols, longest match first.

    A character that starts no symbol becomes a token of its own, so the
    simulation can report it as the offending symbol.
    """
    known = set(alphabet)
    lengths = sorted({len(symbol) for symbol in known if len(symbol) > 1}, reverse=True)
    tokens: List[str] = []
    pos = 0
    while pos < len(text):
        for length in lengths:
            chunk = text[pos:pos + length]
            if chunk in known:
                break
        else:
            chunk = text[pos]
        tokens.append(chunk)
        pos += len(chunk)
    return tokens


class AutomatonError(Exception):
    """Base class for automaton definition problems."""


class AutomatonValidationError(AutomatonError):
    """A definition handed to the builder does not hold together."""


class SimulationErrorKind(enum.Enum):
    NO_START_STATE = "no_start_state"
    SYMBOL_NOT_IN_ALPHABET = "symbol_not_in_alphabet"
    NO_TRANSITION = "no_transition"


@dataclass
class State:
    id: int
    name: str
    x: float = 0.0
    y: float = 0.0
    radius: float = DEFAULT_RADIUS
    is_start: bool = False
    is_accept: bool = False
    # symbol -> target state id
    transitions: Dict[str, int] = field(default_factory=dict)

    @property
    def default_name(self) -> str:
        return f"q{self.id}"

    def contains(self, x: float, y: float) -> bool:
        dx = x - self.x
        dy = y - self.y
        return dx * dx + dy * dy <= self.radius * self.radius


@dataclass(frozen=True)
class TraceStep:
    state: str
    symbol: str
    remaining: str
    error: Optional[str] = None


@dataclass(frozen=True)
class SimulationResult:
    accepted: bool
    trace: Tuple[TraceStep, ...] = ()
    final_state: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[SimulationErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GeneratedString:
    string: str
    accepted: bool
    symbols: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.symbols)


class Automaton:
    """Mutable partial DFA edited one state at a time.

    States live in an arena keyed by their integer id; transition tables hold
    target ids. Every mutation keeps the start flag, the alphabet and the
    transition targets consistent, so the model is valid between any two
    calls. None of the mutators raise: unknown ids and symbols outside the
    alphabet are reported with a ``False`` return value.
    """

    __slots__ = ("_states", "_alphabet", "_start_id", "_next_id")

    def __init__(self, alphabet: Iterable[str] = DEFAULT_ALPHABET) -> None:
        self._states: Dict[int, State] = {}
        self._alphabet: Tuple[str, ...] = self._normalize_alphabet(alphabet)
        self._start_id: Optional[int] = None
        self._next_id = 0

    # ---------------------------------------------------------------
    @staticmethod
    def _normalize_alphabet(symbols: Iterable[str]) -> Tuple[str, ...]:
        if isinstance(symbols, str):
            symbols = [symbols]
        cleaned = (str(symbol).strip() for symbol in symbols)
        return tuple(dict.fromkeys(symbol for symbol in cleaned if symbol))

    def _tokenize(self, input_symbols: InputSymbols) -> List[str]:
        if isinstance(input_symbols, str):
            return split_symbols(input_symbols, self._alphabet)
        return [str(symbol) for symbol in input_symbols]

    # ---------------------------------------------------------------
    @property
    def states(self) -> Tuple[State, ...]:
        return tuple(self._states.values())

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return self._alphabet

    @property
    def start_state(self) -> Optional[State]:
        if self._start_id is None:
            return None
        return self._states.get(self._start_id)

    @property
    def accept_states(self) -> Tuple[State, ...]:
        return tuple(state for state in self._states.values() if state.is_accept)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._states

    def get_state(self, state_id: int) -> Optional[State]:
        return self._states.get(state_id)

    def target_of(self, state_id: int, symbol: str) -> Optional[State]:
        state = self._states.get(state_id)
        if state is None:
            return None
        target_id = state.transitions.get(symbol)
        if target_id is None:
            return None
        return self._states.get(target_id)

    def transition_edges(self) -> List[Edge]:
        edges: List[Edge] = []
        for state in self._states.values():
            for symbol, target_id in state.transitions.items():
                edges.append((state.id, symbol, target_id))
        return edges

    # ---------------------------------------------------------------
    def add_state(self, x: float = 0.0, y: float = 0.0, name: Optional[str] = None) -> State:
        state_id = self._next_id
        self._next_id += 1
        state = State(id=state_id, name="", x=x, y=y)
        state.name = name or state.default_name
        self._states[state_id] = state
        logger.debug("Added state %s (id=%d) at (%.1f, %.1f)", state.name, state_id, x, y)
        return state

    def remove_state(self, state_id: int) -> bool:
        state = self._states.get(state_id)
        if state is None:
            return False
        if self._start_id == state_id:
            self._start_id = None
        pruned = 0
        for other in self._states.values():
            incoming = [sym for sym, target in other.transitions.items() if target == state_id]
            for symbol in incoming:
                del other.transitions[symbol]
            pruned += len(incoming)
        del self._states[state_id]
        logger.debug("Removed state %s (id=%d), dropped %d incoming transition(s)", state.name, state_id, pruned)
        return True

    def state_at(self, x: float, y: float) -> Optional[State]:
        for state in reversed(self._states.values()):
            if state.contains(x, y):
                return state
        return None

    def move_state(self, state_id: int, x: float, y: float) -> bool:
        state = self._states.get(state_id)
        if state is None:
            return False
        state.x = x
        state.y = y
        return True

    def rename_state(self, state_id: int, name: Optional[str]) -> bool:
        state = self._states.get(state_id)
        if state is None:
            return False
        state.name = name or state.default_name
        return True

    def set_start_state(self, state_id: Optional[int]) -> bool:
        if state_id is not None and state_id not in self._states:
            return False
        for state in self._states.values():
            state.is_start = state.id == state_id
        self._start_id = state_id
        return True

    def set_accept(self, state_id: int, accept: bool = True) -> bool:
        state = self._states.get(state_id)
        if state is None:
            return False
        state.is_accept = bool(accept)
        return True

    def reset(self) -> None:
        """Drop every state and restart id allocation; the alphabet is kept."""
        self._states.clear()
        self._start_id = None
        self._next_id = 0
        logger.debug("Automaton reset")

    # ---------------------------------------------------------------
    def add_transition(self, source_id: int, target_id: int, symbol: str) -> bool:
        if symbol not in self._alphabet:
            return False
        source = self._states.get(source_id)
        if source is None or target_id not in self._states:
            return False
        source.transitions[symbol] = target_id
        return True

    def remove_transition(self, source_id: int, symbol: str) -> bool:
        source = self._states.get(source_id)
        if source is None or symbol not in source.transitions:
            return False
        del source.transitions[symbol]
        return True

    def set_alphabet(self, symbols: Iterable[str]) -> List[Edge]:
        """Replace the alphabet and drop transitions on symbols no longer in it.

        Returns the ``(source_id, symbol, target_id)`` edges that were pruned.
        """
        self._alphabet = self._normalize_alphabet(symbols)
        allowed = set(self._alphabet)
        pruned: List[Edge] = []
        for state in self._states.values():
            stale = [sym for sym in state.transitions if sym not in allowed]
            for symbol in stale:
                pruned.append((state.id, symbol, state.transitions.pop(symbol)))
        if pruned:
            logger.debug("Alphabet change pruned %d transition(s)", len(pruned))
        return pruned

    # ---------------------------------------------------------------
    def simulate(self, input_symbols: InputSymbols) -> SimulationResult:
        tokens = self._tokenize(input_symbols)
        start = self.start_state
        if start is None:
            return SimulationResult(
                accepted=False,
                error="No start state defined",
                error_kind=SimulationErrorKind.NO_START_STATE,
            )

        trace: List[TraceStep] = [TraceStep(state=start.name, symbol=START_SYMBOL, remaining="".join(tokens))]
        alphabet = set(self._alphabet)
        current = start
        for idx, symbol in enumerate(tokens):
            if symbol not in alphabet:
                return SimulationResult(
                    accepted=False,
                    trace=tuple(trace),
                    error=f"Symbol '{symbol}' not in alphabet",
                    error_kind=SimulationErrorKind.SYMBOL_NOT_IN_ALPHABET,
                )
            remaining = "".join(tokens[idx + 1:])
            target_id = current.transitions.get(symbol)
            if target_id is None:
                trace.append(
                    TraceStep(state=current.name, symbol=symbol, remaining=remaining, error=NO_TRANSITION_NOTE)
                )
                return SimulationResult(
                    accepted=False,
                    trace=tuple(trace),
                    error=f"No transition from {current.name} on symbol '{symbol}'",
                    error_kind=SimulationErrorKind.NO_TRANSITION,
                )
            current = self._states[target_id]
            trace.append(TraceStep(state=current.name, symbol=symbol, remaining=remaining))

        return SimulationResult(accepted=current.is_accept, trace=tuple(trace), final_state=current.name)

    def accepts(self, input_symbols: InputSymbols) -> bool:
        result = self.simulate(input_symbols)
        return result.accepted and result.ok

    def iter_all_strings(self, max_length: int) -> Iterator[GeneratedString]:
        """Yield every string up to ``max_length`` symbols, shortest first.

        Within one length the strings follow the alphabet order, so length L
        contributes ``len(alphabet) ** L`` entries. The cost is exponential in
        ``max_length``; callers pick the bound. Each entry is simulated from
        its concatenated text, exactly as ``simulate`` would read it.
        """
        alphabet = self._alphabet
        for length in range(max_length + 1):
            for symbols in itertools.product(alphabet, repeat=length):
                text = "".join(symbols)
                result = self.simulate(text)
                yield GeneratedString(
                    string=text or EMPTY_STRING_LABEL,
                    accepted=result.accepted and result.ok,
                    symbols=symbols,
                    error=result.error,
                )

    def generate_all_strings(self, max_length: int) -> List[GeneratedString]:
        results = list(self.iter_all_strings(max_length))
        logger.debug("Generated %d string(s) up to length %d", len(results), max_length)
        return results
