from .automata import (
    Automaton,
    AutomatonError,
    AutomatonValidationError,
    GeneratedString,
    SimulationErrorKind,
    SimulationResult,
    State,
    TraceStep,
)
from .cli import build_automaton, run

__all__ = [
    "Automaton",
    "AutomatonError",
    "AutomatonValidationError",
    "GeneratedString",
    "SimulationErrorKind",
    "SimulationResult",
    "State",
    "TraceStep",
    "build_automaton",
    "run",
]
