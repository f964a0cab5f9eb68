"""Tests for dfa_builder.automata: state arena, cascades, simulation and
string enumeration."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dfa_builder.automata import (
    EMPTY_STRING_LABEL,
    START_SYMBOL,
    Automaton,
    SimulationErrorKind,
    TraceStep,
    split_symbols,
)


def _make_dfa():
    """Strings over {0,1} ending in 1: q0 start, q1 accept."""
    dfa = Automaton(["0", "1"])
    q0 = dfa.add_state(100, 100)
    q1 = dfa.add_state(250, 100)
    dfa.set_start_state(q0.id)
    dfa.set_accept(q1.id)
    dfa.add_transition(q0.id, q1.id, "1")
    dfa.add_transition(q1.id, q1.id, "1")
    dfa.add_transition(q0.id, q0.id, "0")
    dfa.add_transition(q1.id, q0.id, "0")
    return dfa, q0, q1


# ── States ─────────────────────────────────────────────────────────────────

class TestStates:
    def test_add_state_defaults(self):
        dfa = Automaton()
        state = dfa.add_state(10, 20)
        assert state.id == 0
        assert state.name == "q0"
        assert (state.x, state.y, state.radius) == (10, 20, 30)
        assert state.is_start is False
        assert state.is_accept is False
        assert state.transitions == {}
        assert dfa.states == (state,)

    def test_ids_are_never_reused(self):
        dfa = Automaton()
        first = dfa.add_state()
        second = dfa.add_state()
        dfa.remove_state(second.id)
        third = dfa.add_state()
        assert [first.id, second.id, third.id] == [0, 1, 2]
        assert third.name == "q2"

    def test_custom_name_need_not_be_unique(self):
        dfa = Automaton()
        a = dfa.add_state(name="same")
        b = dfa.add_state(name="same")
        assert a.name == b.name == "same"
        assert a.id != b.id

    def test_rename_to_empty_restores_default(self):
        dfa = Automaton()
        state = dfa.add_state(name="odd")
        assert dfa.rename_state(state.id, "") is True
        assert state.name == "q0"

    def test_reset_restarts_ids(self):
        dfa, _, _ = _make_dfa()
        dfa.reset()
        assert len(dfa) == 0
        assert dfa.start_state is None
        assert dfa.add_state().id == 0
        assert dfa.alphabet == ("0", "1")

    def test_unknown_ids_are_noops(self):
        dfa, q0, _ = _make_dfa()
        assert dfa.remove_state(99) is False
        assert dfa.set_accept(99) is False
        assert dfa.move_state(99, 0, 0) is False
        assert dfa.rename_state(99, "x") is False
        assert dfa.set_start_state(99) is False
        assert dfa.start_state is q0
        assert len(dfa) == 2


class TestStateAt:
    def test_hit_inside_radius(self):
        dfa, q0, _ = _make_dfa()
        assert dfa.state_at(100, 100) is q0
        assert dfa.state_at(130, 100) is q0

    def test_miss_returns_none(self):
        dfa, _, _ = _make_dfa()
        assert dfa.state_at(175, 100) is None

    def test_topmost_wins_on_overlap(self):
        dfa = Automaton()
        dfa.add_state(0, 0)
        top = dfa.add_state(10, 0)
        assert dfa.state_at(5, 0) is top


class TestStartFlag:
    def test_single_start_state(self):
        dfa, q0, q1 = _make_dfa()
        dfa.set_start_state(q1.id)
        assert dfa.start_state is q1
        assert q1.is_start is True
        assert q0.is_start is False
        assert sum(state.is_start for state in dfa.states) == 1

    def test_clear_start(self):
        dfa, q0, _ = _make_dfa()
        dfa.set_start_state(None)
        assert dfa.start_state is None
        assert q0.is_start is False


# ── Transitions ────────────────────────────────────────────────────────────

class TestTransitions:
    def test_add_rejects_symbol_outside_alphabet(self):
        dfa, q0, q1 = _make_dfa()
        assert dfa.add_transition(q0.id, q1.id, "2") is False
        assert "2" not in q0.transitions

    def test_add_rejects_unknown_state(self):
        dfa, q0, _ = _make_dfa()
        assert dfa.add_transition(q0.id, 42, "1") is False
        assert dfa.target_of(q0.id, "1").name == "q1"

    def test_overwrite_keeps_determinism(self):
        dfa, q0, _ = _make_dfa()
        assert dfa.add_transition(q0.id, q0.id, "1") is True
        assert q0.transitions["1"] == q0.id
        assert len([e for e in dfa.transition_edges() if e[0] == q0.id and e[1] == "1"]) == 1

    def test_remove_transition(self):
        dfa, q0, _ = _make_dfa()
        assert dfa.remove_transition(q0.id, "1") is True
        assert dfa.remove_transition(q0.id, "1") is False
        assert dfa.target_of(q0.id, "1") is None

    def test_transition_edges(self):
        dfa, q0, q1 = _make_dfa()
        assert sorted(dfa.transition_edges()) == sorted([
            (q0.id, "1", q1.id),
            (q1.id, "1", q1.id),
            (q0.id, "0", q0.id),
            (q1.id, "0", q0.id),
        ])


class TestCascades:
    def test_alphabet_change_prunes(self):
        dfa, q0, q1 = _make_dfa()
        pruned = dfa.set_alphabet(["1", "a"])
        assert sorted(pruned) == sorted([(q0.id, "0", q0.id), (q1.id, "0", q0.id)])
        for state in dfa.states:
            assert "0" not in state.transitions
        assert dfa.target_of(q0.id, "1") is q1

    def test_alphabet_normalized(self):
        dfa = Automaton()
        dfa.set_alphabet([" a", "b", "a", ""])
        assert dfa.alphabet == ("a", "b")

    def test_empty_alphabet_representable(self):
        dfa, q0, _ = _make_dfa()
        dfa.set_alphabet([])
        assert dfa.alphabet == ()
        assert dfa.transition_edges() == []
        assert dfa.simulate("").final_state == q0.name

    def test_remove_state_drops_incoming_transitions(self):
        dfa, q0, q1 = _make_dfa()
        assert dfa.remove_state(q1.id) is True
        for state in dfa.states:
            assert q1.id not in state.transitions.values()
        assert dfa.start_state is q0

    def test_remove_start_state_clears_reference(self):
        dfa, q0, q1 = _make_dfa()
        dfa.remove_state(q0.id)
        assert dfa.start_state is None
        assert q1.transitions == {"1": q1.id}


# ── Simulation ─────────────────────────────────────────────────────────────

class TestSimulation:
    def test_empty_input(self):
        dfa, _, _ = _make_dfa()
        result = dfa.simulate("")
        assert result.accepted is False
        assert result.error is None
        assert result.final_state == "q0"
        assert result.trace == (TraceStep(state="q0", symbol=START_SYMBOL, remaining=""),)

    def test_accept_single_one(self):
        dfa, _, _ = _make_dfa()
        result = dfa.simulate("1")
        assert result.accepted is True
        assert result.final_state == "q1"

    def test_accept_zero_one_trace(self):
        dfa, _, _ = _make_dfa()
        result = dfa.simulate("01")
        assert result.accepted is True
        assert result.final_state == "q1"
        assert [(s.state, s.symbol, s.remaining) for s in result.trace] == [
            ("q0", START_SYMBOL, "01"),
            ("q0", "0", "1"),
            ("q1", "1", ""),
        ]

    def test_symbol_not_in_alphabet(self):
        dfa, _, _ = _make_dfa()
        result = dfa.simulate("12")
        assert result.accepted is False
        assert result.error == "Symbol '2' not in alphabet"
        assert result.error_kind is SimulationErrorKind.SYMBOL_NOT_IN_ALPHABET
        assert len(result.trace) == 2
        assert "2" not in [step.symbol for step in result.trace]
        assert result.final_state is None

    def test_missing_transition(self):
        dfa, q0, _ = _make_dfa()
        dfa.remove_transition(q0.id, "0")
        dfa.remove_transition(q0.id, "1")
        result = dfa.simulate("0")
        assert result.accepted is False
        assert "q0" in result.error and "'0'" in result.error
        assert result.error_kind is SimulationErrorKind.NO_TRANSITION
        last = result.trace[-1]
        assert (last.state, last.symbol, last.remaining) == ("q0", "0", "")
        assert last.error == "No transition defined"

    def test_no_start_state(self):
        dfa, _, _ = _make_dfa()
        dfa.set_start_state(None)
        result = dfa.simulate("1")
        assert result.accepted is False
        assert result.error == "No start state defined"
        assert result.error_kind is SimulationErrorKind.NO_START_STATE
        assert result.trace == ()

    def test_token_sequence_input(self):
        dfa = Automaton(["ab", "c"])
        s = dfa.add_state()
        t = dfa.add_state()
        dfa.set_start_state(s.id)
        dfa.set_accept(t.id)
        dfa.add_transition(s.id, t.id, "ab")
        dfa.add_transition(t.id, s.id, "c")
        assert dfa.simulate(["ab", "c", "ab"]).accepted is True
        assert dfa.simulate(["ab", "c"]).accepted is False
        assert dfa.simulate("abcab").accepted is True
        assert dfa.simulate("abc").accepted is False

    def test_unknown_character_in_multi_character_text(self):
        dfa = Automaton(["ab", "c"])
        s = dfa.add_state()
        dfa.set_start_state(s.id)
        dfa.add_transition(s.id, s.id, "ab")
        result = dfa.simulate("abx")
        assert result.error == "Symbol 'x' not in alphabet"
        assert [step.symbol for step in result.trace] == [START_SYMBOL, "ab"]

    def test_split_symbols_longest_match(self):
        assert split_symbols("aab", ["a", "ab"]) == ["a", "ab"]
        assert split_symbols("abab", ["ab", "a", "b"]) == ["ab", "ab"]
        assert split_symbols("a b", ["a", "b"]) == ["a", " ", "b"]
        assert split_symbols("", ["a"]) == []

    def test_simulation_is_pure(self):
        dfa, _, _ = _make_dfa()
        before = dfa.transition_edges()
        assert dfa.simulate("0110") == dfa.simulate("0110")
        assert dfa.transition_edges() == before

    def test_renamed_state_shows_in_trace(self):
        dfa, _, q1 = _make_dfa()
        dfa.rename_state(q1.id, "even")
        assert dfa.simulate("1").final_state == "even"


# ── Enumeration ────────────────────────────────────────────────────────────

class TestGenerateAllStrings:
    def test_order_and_verdicts(self):
        dfa, _, _ = _make_dfa()
        results = dfa.generate_all_strings(2)
        assert [r.string for r in results] == [EMPTY_STRING_LABEL, "0", "1", "00", "01", "10", "11"]
        assert {r.string for r in results if r.accepted} == {"1", "01", "11"}

    @pytest.mark.parametrize("size,max_length", [(1, 4), (2, 3), (3, 2)])
    def test_size(self, size, max_length):
        dfa = Automaton([str(i) for i in range(size)])
        results = dfa.generate_all_strings(max_length)
        assert len(results) == sum(size ** k for k in range(max_length + 1))

    def test_alphabet_order_respected(self):
        dfa = Automaton(["b", "a"])
        strings = [r.string for r in dfa.generate_all_strings(2)]
        assert strings == [EMPTY_STRING_LABEL, "b", "a", "bb", "ba", "ab", "aa"]

    def test_zero_length_only_empty(self):
        dfa, _, _ = _make_dfa()
        results = dfa.generate_all_strings(0)
        assert len(results) == 1
        assert results[0].string == EMPTY_STRING_LABEL
        assert results[0].symbols == ()

    def test_negative_bound_is_empty(self):
        dfa, _, _ = _make_dfa()
        assert dfa.generate_all_strings(-1) == []

    def test_empty_alphabet_yields_only_empty_string(self):
        dfa = Automaton([])
        assert len(dfa.generate_all_strings(3)) == 1

    def test_stuck_strings_count_as_rejected(self):
        dfa, q0, _ = _make_dfa()
        dfa.remove_transition(q0.id, "0")
        by_string = {r.string: r for r in dfa.generate_all_strings(2)}
        assert by_string["0"].accepted is False
        assert by_string["0"].error is not None
        assert by_string["01"].accepted is False
        assert by_string["1"].accepted is True
        assert by_string["1"].error is None

    def test_matches_simulation(self):
        dfa, q0, _ = _make_dfa()
        dfa.remove_transition(q0.id, "0")
        for item in dfa.generate_all_strings(3):
            text = "" if item.string == EMPTY_STRING_LABEL else item.string
            result = dfa.simulate(text)
            assert item.accepted == (result.accepted and result.error is None)
            assert item.accepted == dfa.accepts(text)

    def test_multi_character_symbols_match_simulation(self):
        dfa = Automaton(["ab", "c"])
        q0 = dfa.add_state()
        q1 = dfa.add_state()
        dfa.set_start_state(q0.id)
        dfa.set_accept(q1.id)
        dfa.add_transition(q0.id, q1.id, "ab")
        by_string = {r.string: r for r in dfa.generate_all_strings(2)}
        assert by_string["ab"].accepted is True
        assert by_string["ab"].symbols == ("ab",)
        assert dfa.simulate("ab").accepted is True
        for item in by_string.values():
            text = "" if item.string == EMPTY_STRING_LABEL else item.string
            assert item.accepted == dfa.accepts(text)

    def test_no_start_state_rejects_everything(self):
        dfa, _, _ = _make_dfa()
        dfa.set_start_state(None)
        assert not any(r.accepted for r in dfa.generate_all_strings(2))
