from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

import tkinter as tk
from tkinter import messagebox, simpledialog

from .analysis import format_trace, format_verdict, summarize_generated
from .automata import Automaton, State
from .cli import available_symbols, parse_alphabet, parse_max_length, tokenize_input

logger = logging.getLogger(__name__)

THEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#f6f8fa",
        "surface": "#ffffff",
        "text": "#24292e",
        "muted": "#57606a",
        "border": "#d0d7de",
        "input_bg": "#ffffff",
        "input_fg": "#24292e",
        "accent": "#0d6efd",
        "accent_fg": "#ffffff",
        "accent_hover": "#0b5ed7",
        "accent_hover_fg": "#ffffff",
        "accent_disabled": "#9ec5fe",
        "accent_disabled_fg": "#1f2933",
        "canvas": "#ffffff",
        "ink": "#2c3e50",
        "selected": "#667eea",
        "selected_fill": "#e3e8ff",
        "accepted": "#1a7f37",
        "rejected": "#cf222e",
    },
    "dark": {
        "bg": "#0d1117",
        "surface": "#161b22",
        "text": "#c9d1d9",
        "muted": "#8b949e",
        "border": "#30363d",
        "input_bg": "#0d1117",
        "input_fg": "#c9d1d9",
        "accent": "#2f81f7",
        "accent_fg": "#0d1117",
        "accent_hover": "#508bff",
        "accent_hover_fg": "#0d1117",
        "accent_disabled": "#1f3b70",
        "accent_disabled_fg": "#8b949e",
        "canvas": "#0d1117",
        "ink": "#c9d1d9",
        "selected": "#8fa2ff",
        "selected_fill": "#1f2a4d",
        "accepted": "#3fb950",
        "rejected": "#f85149",
    },
}

MODES: Tuple[Tuple[str, str], ...] = (
    ("add_state", "Add State"),
    ("add_transition", "Add Transition"),
    ("select", "Select"),
    ("delete", "Delete"),
)
DEFAULT_ALPHABET_TEXT = "0, 1"
DEFAULT_MAX_LENGTH = 3
MAX_GENERATE_LENGTH = 12
CURVE_OFFSET = 20
LOOP_RADIUS = 18
ARROW_SIZE = 10


class AutomatonStudio(tk.Tk):
    def __init__(self, automaton: Optional[Automaton] = None) -> None:
        super().__init__()
        self.title("DFA Builder")
        self.geometry("1180x780")
        self.minsize(960, 640)

        self.automaton = automaton or Automaton()
        self.current_theme = "light"
        self.mode = "add_state"
        self.selected: Optional[State] = None
        self._dragged: Optional[State] = None
        self._transition_start: Optional[State] = None
        self._mouse: Tuple[float, float] = (0.0, 0.0)

        self.status_var = tk.StringVar(value="Click on the canvas to add a state.")
        self.alphabet_var = tk.StringVar(value=", ".join(self.automaton.alphabet) or DEFAULT_ALPHABET_TEXT)
        self.alphabet_display_var = tk.StringVar()
        self.start_var = tk.BooleanVar(value=False)
        self.accept_var = tk.BooleanVar(value=False)
        self.name_var = tk.StringVar()
        self.test_var = tk.StringVar()
        self.result_var = tk.StringVar(value="No string tested.")
        self.max_length_var = tk.StringVar(value=str(DEFAULT_MAX_LENGTH))

        self._button_bindings: Dict[tk.Button, bool] = {}
        self._mode_buttons: Dict[str, tk.Button] = {}
        self._current_palette: Dict[str, str] = THEMES[self.current_theme].copy()
        self._result_color_key: Optional[str] = None
        self._syncing_selection = False

        self._build_ui()
        self.apply_theme()
        self._refresh_alphabet_display()
        self._update_state_panel()
        self.draw()
    # ---------------------------------------------------------------
    def _build_ui(self) -> None:
        self.base_font = ("Segoe UI", 10)
        self.semibold_font = ("Segoe UI Semibold", 12)
        self.mono_font = ("JetBrains Mono", 10)

        self.header = tk.Frame(self, bd=0)
        self.header.pack(fill="x", padx=16, pady=(16, 8))

        self.title_label = tk.Label(self.header, text="DFA Builder & Tester", font=("Segoe UI Semibold", 16))
        self.title_label.pack(side="left")

        self.theme_button = tk.Button(
            self.header,
            text="Dark mode",
            command=self.toggle_theme,
            relief="flat",
            padx=16,
            pady=6,
        )
        self.theme_button.pack(side="right")

        self.body = tk.Frame(self, bd=0)
        self.body.pack(fill="both", expand=True, padx=16, pady=(0, 16))
        self.body.columnconfigure(0, weight=3)
        self.body.columnconfigure(1, weight=2)
        self.body.rowconfigure(0, weight=1)

        # left pane --------------------------------------------------
        self.editor_frame = tk.Frame(self.body, bd=0)
        self.editor_frame.grid(row=0, column=0, sticky="nsew", padx=(0, 12))
        self.editor_frame.rowconfigure(1, weight=1)
        self.editor_frame.columnconfigure(0, weight=1)

        self.toolbar = tk.Frame(self.editor_frame, bd=0)
        self.toolbar.grid(row=0, column=0, sticky="ew")
        for column, (mode, label) in enumerate(MODES):
            self.toolbar.columnconfigure(column, weight=1)
            button = tk.Button(
                self.toolbar,
                text=label,
                command=lambda m=mode: self.set_mode(m),
                padx=12,
                pady=6,
            )
            button.grid(row=0, column=column, sticky="ew", padx=(0, 6))
            self._mode_buttons[mode] = button
        self.clear_button = tk.Button(self.toolbar, text="Clear", command=self.clear, padx=12, pady=6)
        self.clear_button.grid(row=0, column=len(MODES), sticky="ew")

        self.canvas_container = tk.Frame(self.editor_frame, bd=1, relief="solid")
        self.canvas_container.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        self.canvas_container.rowconfigure(0, weight=1)
        self.canvas_container.columnconfigure(0, weight=1)
        self.canvas = tk.Canvas(self.canvas_container, highlightthickness=0)
        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.canvas.bind("<ButtonPress-1>", self._on_mouse_down)
        self.canvas.bind("<B1-Motion>", self._on_mouse_drag)
        self.canvas.bind("<ButtonRelease-1>", self._on_mouse_up)
        self.canvas.bind("<Motion>", self._on_mouse_move)
        self.canvas.bind("<Button-3>", self._on_right_click)
        self.canvas.bind("<Configure>", lambda event: self.draw())

        # right pane -------------------------------------------------
        self.side_frame = tk.Frame(self.body, bd=0)
        self.side_frame.grid(row=0, column=1, sticky="nsew")
        self.side_frame.columnconfigure(0, weight=1)
        self.side_frame.rowconfigure(7, weight=1)

        self.alphabet_label = tk.Label(self.side_frame, text="Alphabet", font=self.semibold_font)
        self.alphabet_label.grid(row=0, column=0, sticky="w")
        self.alphabet_frame = tk.Frame(self.side_frame, bd=0)
        self.alphabet_frame.grid(row=1, column=0, sticky="ew", pady=(6, 0))
        self.alphabet_frame.columnconfigure(0, weight=1)
        self.alphabet_entry = tk.Entry(self.alphabet_frame, textvariable=self.alphabet_var, font=self.base_font)
        self.alphabet_entry.grid(row=0, column=0, sticky="ew", padx=(0, 8))
        self.alphabet_button = tk.Button(
            self.alphabet_frame, text="Set", command=self._set_alphabet, padx=12, pady=4, width=8
        )
        self.alphabet_button.grid(row=0, column=1)
        self.alphabet_display = tk.Label(
            self.alphabet_frame, textvariable=self.alphabet_display_var, font=self.base_font
        )
        self.alphabet_display.grid(row=1, column=0, columnspan=2, sticky="w", pady=(4, 0))

        self.state_label = tk.Label(self.side_frame, text="Selected State", font=self.semibold_font)
        self.state_label.grid(row=2, column=0, sticky="w", pady=(12, 0))
        self.state_frame = tk.Frame(self.side_frame, bd=0)
        self.state_frame.grid(row=3, column=0, sticky="ew", pady=(6, 0))
        self.state_frame.columnconfigure(1, weight=1)
        self.name_label = tk.Label(self.state_frame, text="Name", font=self.base_font)
        self.name_label.grid(row=0, column=0, sticky="w")
        self.name_entry = tk.Entry(self.state_frame, textvariable=self.name_var, font=self.base_font)
        self.name_entry.grid(row=0, column=1, sticky="ew", padx=(8, 0))
        self.name_var.trace_add("write", self._on_name_change)
        self.start_check = tk.Checkbutton(
            self.state_frame, text="Start state", variable=self.start_var, command=self._on_start_toggle
        )
        self.start_check.grid(row=1, column=0, columnspan=2, sticky="w", pady=(4, 0))
        self.accept_check = tk.Checkbutton(
            self.state_frame, text="Accept state", variable=self.accept_var, command=self._on_accept_toggle
        )
        self.accept_check.grid(row=2, column=0, columnspan=2, sticky="w")

        self.test_label = tk.Label(self.side_frame, text="Test String", font=self.semibold_font)
        self.test_label.grid(row=4, column=0, sticky="w", pady=(12, 0))
        self.test_frame = tk.Frame(self.side_frame, bd=0)
        self.test_frame.grid(row=5, column=0, sticky="ew", pady=(6, 0))
        self.test_frame.columnconfigure(0, weight=1)
        self.test_entry = tk.Entry(self.test_frame, textvariable=self.test_var, font=self.base_font)
        self.test_entry.grid(row=0, column=0, sticky="ew", padx=(0, 8))
        self.test_entry.bind("<Return>", lambda event: self._test_string())
        self.test_button = tk.Button(
            self.test_frame, text="Test", command=self._test_string, padx=12, pady=4, width=8
        )
        self.test_button.grid(row=0, column=1)
        self.result_label = tk.Label(
            self.test_frame, textvariable=self.result_var, font=self.base_font, anchor="w", justify="left"
        )
        self.result_label.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(6, 0))

        self.trace_container = tk.Frame(self.side_frame, bd=1, relief="solid")
        self.trace_container.grid(row=6, column=0, sticky="ew", pady=(6, 0))
        self.trace_container.columnconfigure(0, weight=1)
        self.trace_text = tk.Text(
            self.trace_container, wrap="word", font=self.mono_font, height=7, relief="flat", state="disabled"
        )
        self.trace_text.grid(row=0, column=0, sticky="nsew")

        self.generate_frame = tk.Frame(self.side_frame, bd=0)
        self.generate_frame.grid(row=7, column=0, sticky="nsew", pady=(12, 0))
        self.generate_frame.columnconfigure(1, weight=1)
        self.generate_frame.rowconfigure(1, weight=1)
        self.generate_label = tk.Label(self.generate_frame, text="Max length", font=self.base_font)
        self.generate_label.grid(row=0, column=0, sticky="w")
        self.max_length_spin = tk.Spinbox(
            self.generate_frame,
            from_=0,
            to=MAX_GENERATE_LENGTH,
            textvariable=self.max_length_var,
            width=5,
            font=self.base_font,
        )
        self.max_length_spin.grid(row=0, column=1, sticky="w", padx=(8, 8))
        self.generate_button = tk.Button(
            self.generate_frame, text="Generate All Strings", command=self._generate, padx=12, pady=4
        )
        self.generate_button.grid(row=0, column=2, sticky="e")

        self.generated_container = tk.Frame(self.generate_frame, bd=1, relief="solid")
        self.generated_container.grid(row=1, column=0, columnspan=3, sticky="nsew", pady=(6, 0))
        self.generated_container.rowconfigure(0, weight=1)
        self.generated_container.columnconfigure(0, weight=1)
        self.generated_text = tk.Text(
            self.generated_container, wrap="none", font=self.mono_font, relief="flat", state="disabled"
        )
        self.generated_text.grid(row=0, column=0, sticky="nsew")
        self.generated_scroll = tk.Scrollbar(
            self.generated_container, orient="vertical", command=self.generated_text.yview
        )
        self.generated_scroll.grid(row=0, column=1, sticky="ns")
        self.generated_text.configure(yscrollcommand=self.generated_scroll.set)

        self.status_bar = tk.Label(self, textvariable=self.status_var, anchor="w", font=self.base_font, padx=16, pady=8)
        self.status_bar.pack(fill="x", side="bottom")

        self._surface_frames = [
            self,
            self.header,
            self.body,
            self.editor_frame,
            self.toolbar,
            self.side_frame,
            self.alphabet_frame,
            self.state_frame,
            self.test_frame,
            self.generate_frame,
        ]
        self._bordered = [self.canvas_container, self.trace_container, self.generated_container]
        self._labels = [
            self.title_label,
            self.alphabet_label,
            self.alphabet_display,
            self.state_label,
            self.name_label,
            self.test_label,
            self.result_label,
            self.generate_label,
            self.status_bar,
        ]
        self._checks = [self.start_check, self.accept_check]
        self._buttons = [
            self.theme_button,
            self.clear_button,
            self.alphabet_button,
            self.test_button,
            self.generate_button,
            *self._mode_buttons.values(),
        ]
        self._text_widgets = [self.trace_text, self.generated_text]
        self._entries = [self.alphabet_entry, self.name_entry, self.test_entry, self.max_length_spin]
    # ---------------------------------------------------------------
    def apply_theme(self) -> None:
        palette = THEMES[self.current_theme]
        self._current_palette = palette
        self.configure(bg=palette["bg"])
        for frame in self._surface_frames:
            frame_bg = palette["bg"] if frame is self else palette["surface"]
            frame.configure(bg=frame_bg)
        for container in self._bordered:
            container.configure(bg=palette["border"])
        self.canvas.configure(bg=palette["canvas"])
        for label in self._labels:
            label.configure(bg=palette["surface"], fg=palette["text"])
        for check in self._checks:
            check.configure(
                bg=palette["surface"],
                fg=palette["text"],
                activebackground=palette["surface"],
                activeforeground=palette["text"],
                selectcolor=palette["input_bg"],
            )
        for entry in self._entries:
            entry.configure(
                bg=palette["input_bg"],
                fg=palette["input_fg"],
                insertbackground=palette["text"],
                highlightthickness=1,
                highlightcolor=palette["border"],
                highlightbackground=palette["border"],
                relief="flat",
                borderwidth=1,
            )
        for text_widget in self._text_widgets:
            state = text_widget.cget("state")
            if state == "disabled":
                text_widget.configure(state="normal")
            text_widget.configure(bg=palette["input_bg"], fg=palette["input_fg"], insertbackground=palette["text"])
            if state == "disabled":
                text_widget.configure(state="disabled")
        for button in self._buttons:
            button.configure(relief="flat", borderwidth=0, highlightthickness=0)
        self._style_buttons(palette)
        self.status_bar.configure(bg=palette["surface"], fg=palette["muted"])
        self._apply_result_color()
        self.theme_button.configure(text="Dark mode" if self.current_theme == "light" else "Light mode")
        self.draw()

    def toggle_theme(self) -> None:
        self.current_theme = "dark" if self.current_theme == "light" else "light"
        self.apply_theme()

    def _style_buttons(self, palette: Dict[str, str]) -> None:
        self._current_palette = palette
        for button in self._buttons:
            button.configure(
                activebackground=palette["accent_hover"],
                activeforeground=palette["accent_hover_fg"],
                disabledforeground=palette["accent_disabled_fg"],
            )
            if button not in self._button_bindings:
                button.bind("<Enter>", lambda event, b=button: self._on_button_hover(b, True))
                button.bind("<Leave>", lambda event, b=button: self._on_button_hover(b, False))
                self._button_bindings[button] = True
        self._refresh_button_colors()

    def _refresh_button_colors(self) -> None:
        palette = self._current_palette
        for button in self._buttons:
            if button is self._mode_buttons.get(self.mode):
                button.configure(bg=palette["accent_hover"], fg=palette["accent_hover_fg"])
            else:
                button.configure(bg=palette["accent"], fg=palette["accent_fg"])

    def _on_button_hover(self, button: tk.Button, entering: bool) -> None:
        palette = self._current_palette
        if entering or button is self._mode_buttons.get(self.mode):
            button.configure(bg=palette["accent_hover"], fg=palette["accent_hover_fg"])
        else:
            button.configure(bg=palette["accent"], fg=palette["accent_fg"])

    def _apply_result_color(self) -> None:
        palette = self._current_palette
        color = palette[self._result_color_key] if self._result_color_key else palette["text"]
        self.result_label.configure(fg=color)
    # ---------------------------------------------------------------
    def set_mode(self, mode: str) -> None:
        self.mode = mode
        self._transition_start = None
        hints = {
            "add_state": "Click on the canvas to add a state.",
            "add_transition": "Click a source state, then a target state.",
            "select": "Click a state to edit it, drag to move it.",
            "delete": "Click a state to delete it.",
        }
        self.status_var.set(hints[mode])
        self._refresh_button_colors()
        self.draw()

    def _on_mouse_down(self, event: tk.Event) -> None:
        x, y = float(event.x), float(event.y)
        clicked = self.automaton.state_at(x, y)

        if self.mode == "add_state":
            if clicked is None:
                state = self.automaton.add_state(x, y)
                if len(self.automaton) == 1:
                    self.automaton.set_start_state(state.id)
                self.status_var.set(f"Added {state.name}.")
        elif self.mode == "select":
            self._select(clicked)
            self._dragged = clicked
        elif self.mode == "add_transition":
            if clicked is not None:
                if self._transition_start is None:
                    self._transition_start = clicked
                    self.status_var.set(f"Transition from {clicked.name}: pick a target state.")
                else:
                    source = self._transition_start
                    self._transition_start = None
                    self._prompt_transition_symbol(source, clicked)
        elif self.mode == "delete":
            if clicked is not None:
                self.automaton.remove_state(clicked.id)
                if self.selected is clicked:
                    self._select(None)
                self.status_var.set(f"Deleted {clicked.name}.")
        self.draw()

    def _on_mouse_drag(self, event: tk.Event) -> None:
        self._mouse = (float(event.x), float(event.y))
        if self.mode == "select" and self._dragged is not None:
            self.automaton.move_state(self._dragged.id, *self._mouse)
            self.draw()

    def _on_mouse_move(self, event: tk.Event) -> None:
        self._mouse = (float(event.x), float(event.y))
        if self.mode == "add_transition" and self._transition_start is not None:
            self.draw()

    def _on_mouse_up(self, event: tk.Event) -> None:
        self._dragged = None

    def _on_right_click(self, event: tk.Event) -> None:
        clicked = self.automaton.state_at(float(event.x), float(event.y))
        if clicked is not None:
            self._select(clicked)
            self.draw()

    def _prompt_transition_symbol(self, source: State, target: State) -> None:
        symbols = available_symbols(self.automaton, source, target)
        if not symbols:
            messagebox.showinfo("DFA Builder", "All transitions from this state are already defined!", parent=self)
            return
        symbol = simpledialog.askstring(
            "DFA Builder",
            f"Enter transition symbol:\nAvailable: {', '.join(symbols)}",
            parent=self,
        )
        if not symbol:
            return
        symbol = symbol.strip()
        if symbol not in self.automaton.alphabet:
            messagebox.showerror("DFA Builder", f"Symbol '{symbol}' is not in the alphabet!", parent=self)
            return
        if symbol not in symbols:
            messagebox.showerror(
                "DFA Builder", f"{source.name} already has a transition on '{symbol}'.", parent=self
            )
            return
        self.automaton.add_transition(source.id, target.id, symbol)
        self.status_var.set(f"δ({source.name}, {symbol}) = {target.name}")
    # ---------------------------------------------------------------
    def _select(self, state: Optional[State]) -> None:
        self.selected = state
        self._update_state_panel()

    def _update_state_panel(self) -> None:
        state = self.selected
        self._syncing_selection = True
        try:
            if state is None:
                self.name_var.set("")
                self.start_var.set(False)
                self.accept_var.set(False)
            else:
                self.name_var.set(state.name)
                self.start_var.set(state.is_start)
                self.accept_var.set(state.is_accept)
        finally:
            self._syncing_selection = False
        widget_state = "normal" if state is not None else "disabled"
        for widget in (self.name_entry, self.start_check, self.accept_check):
            widget.configure(state=widget_state)

    def _on_name_change(self, *_args: object) -> None:
        if self._syncing_selection or self.selected is None:
            return
        self.automaton.rename_state(self.selected.id, self.name_var.get().strip())
        self.draw()

    def _on_start_toggle(self) -> None:
        if self.selected is None:
            return
        if self.start_var.get():
            self.automaton.set_start_state(self.selected.id)
        elif self.selected.is_start:
            self.automaton.set_start_state(None)
        self.draw()

    def _on_accept_toggle(self) -> None:
        if self.selected is None:
            return
        self.automaton.set_accept(self.selected.id, self.accept_var.get())
        self.draw()

    def _set_alphabet(self) -> None:
        try:
            symbols = parse_alphabet(self.alphabet_var.get())
        except ValueError as exc:
            messagebox.showwarning("DFA Builder", str(exc), parent=self)
            return
        pruned = self.automaton.set_alphabet(symbols)
        logger.info("Alphabet set to %s", ", ".join(symbols))
        self._refresh_alphabet_display()
        if pruned:
            self.status_var.set(f"Alphabet updated; removed {len(pruned)} transition(s) on dropped symbols.")
        else:
            self.status_var.set("Alphabet updated.")
        self.draw()

    def _refresh_alphabet_display(self) -> None:
        self.alphabet_display_var.set(f"Current: {{{', '.join(self.automaton.alphabet)}}}")

    def clear(self) -> None:
        if not messagebox.askyesno(
            "DFA Builder", "Are you sure you want to clear all states and transitions?", parent=self
        ):
            return
        self.automaton.reset()
        logger.info("Editor cleared")
        self._transition_start = None
        self._dragged = None
        self._select(None)
        self.result_var.set("No string tested.")
        self._result_color_key = None
        self._apply_result_color()
        self._write_text(self.trace_text, [])
        self._write_text(self.generated_text, [])
        self.status_var.set("Cleared.")
        self.draw()
    # ---------------------------------------------------------------
    def _test_string(self) -> None:
        tokens = tokenize_input(self.test_var.get(), self.automaton.alphabet)
        result = self.automaton.simulate(tokens)
        self.result_var.set(format_verdict(result, "".join(tokens)))
        if result.error:
            self._result_color_key = "rejected"
        else:
            self._result_color_key = "accepted" if result.accepted else "rejected"
        self._apply_result_color()
        trace = format_trace(result)
        self._write_text(self.trace_text, ["Execution Trace:", *trace] if trace else [])
        self.status_var.set("String tested.")

    def _generate(self) -> None:
        try:
            max_length = parse_max_length(self.max_length_var.get())
        except ValueError as exc:
            messagebox.showerror("DFA Builder", str(exc), parent=self)
            return
        if max_length > MAX_GENERATE_LENGTH:
            messagebox.showwarning(
                "DFA Builder", f"Max length is capped at {MAX_GENERATE_LENGTH}.", parent=self
            )
            return
        results = self.automaton.generate_all_strings(max_length)
        if not results:
            self._write_text(self.generated_text, ["No strings generated"])
            return
        summary = summarize_generated(results)
        lines = [
            f"Total: {summary['total']} strings | Accepted: {summary['accepted']} | Rejected: {summary['rejected']}",
            "",
        ]
        width = max(len(item.string) for item in results)
        for item in results:
            lines.append(f"{item.string.ljust(width)}  {'✓ Accept' if item.accepted else '✗ Reject'}")
        self._write_text(self.generated_text, lines)
        self.status_var.set(f"Generated {summary['total']} string(s).")

    def _write_text(self, widget: tk.Text, lines: Sequence[str]) -> None:
        widget.configure(state="normal")
        widget.delete("1.0", "end")
        widget.insert("1.0", "\n".join(lines))
        widget.configure(state="disabled")
        widget.see("1.0")
    # ---------------------------------------------------------------
    def draw(self) -> None:
        canvas = self.canvas
        canvas.delete("all")
        palette = self._current_palette

        groups: Dict[Tuple[int, int], List[str]] = {}
        for source_id, symbol, target_id in self.automaton.transition_edges():
            groups.setdefault((source_id, target_id), []).append(symbol)
        for (source_id, target_id), symbols in groups.items():
            source = self.automaton.get_state(source_id)
            target = self.automaton.get_state(target_id)
            label = ",".join(symbols)
            if source_id == target_id:
                self._draw_self_loop(source, label, palette)
            else:
                self._draw_transition(source, target, label, (target_id, source_id) in groups, palette)

        if self.mode == "add_transition" and self._transition_start is not None:
            start = self._transition_start
            canvas.create_line(
                start.x, start.y, *self._mouse, fill=palette["selected"], dash=(5, 5), width=2
            )

        for state in self.automaton.states:
            self._draw_state(state, palette)

    def _draw_state(self, state: State, palette: Dict[str, str]) -> None:
        canvas = self.canvas
        is_selected = self.selected is state
        outline = palette["selected"] if is_selected else palette["ink"]
        width = 3 if is_selected else 2
        r = state.radius
        if state.is_accept:
            canvas.create_oval(
                state.x - r - 5, state.y - r - 5, state.x + r + 5, state.y + r + 5, outline=outline, width=width
            )
        canvas.create_oval(
            state.x - r,
            state.y - r,
            state.x + r,
            state.y + r,
            fill=palette["selected_fill"] if is_selected else palette["canvas"],
            outline=outline,
            width=width,
        )
        if state.is_start:
            canvas.create_line(
                state.x - r - 30, state.y, state.x - r - 2, state.y, fill=palette["ink"], width=2, arrow="last"
            )
        canvas.create_text(state.x, state.y, text=state.name, fill=palette["ink"], font=("Arial", 12, "bold"))

    def _draw_transition(
        self, source: State, target: State, label: str, has_reverse: bool, palette: Dict[str, str]
    ) -> None:
        angle = math.atan2(target.y - source.y, target.x - source.x)
        start_x = source.x + source.radius * math.cos(angle)
        start_y = source.y + source.radius * math.sin(angle)
        end_x = target.x - target.radius * math.cos(angle)
        end_y = target.y - target.radius * math.sin(angle)
        mid_x = (start_x + end_x) / 2
        mid_y = (start_y + end_y) / 2

        if has_reverse:
            perp = angle + math.pi / 2
            control_x = mid_x + CURVE_OFFSET * math.cos(perp)
            control_y = mid_y + CURVE_OFFSET * math.sin(perp)
            self.canvas.create_line(
                start_x,
                start_y,
                control_x,
                control_y,
                end_x,
                end_y,
                smooth=True,
                fill=palette["ink"],
                width=2,
                arrow="last",
                arrowshape=(ARROW_SIZE, ARROW_SIZE + 2, ARROW_SIZE // 2),
            )
            label_x = mid_x + (CURVE_OFFSET / 2) * math.cos(perp)
            label_y = mid_y + (CURVE_OFFSET / 2) * math.sin(perp)
        else:
            self.canvas.create_line(
                start_x,
                start_y,
                end_x,
                end_y,
                fill=palette["ink"],
                width=2,
                arrow="last",
                arrowshape=(ARROW_SIZE, ARROW_SIZE + 2, ARROW_SIZE // 2),
            )
            label_x, label_y = mid_x, mid_y
        self._draw_label(label_x, label_y, label, palette)

    def _draw_self_loop(self, state: State, label: str, palette: Dict[str, str]) -> None:
        loop_y = state.y - state.radius - 12
        self.canvas.create_arc(
            state.x - LOOP_RADIUS,
            loop_y - LOOP_RADIUS,
            state.x + LOOP_RADIUS,
            loop_y + LOOP_RADIUS,
            start=-30,
            extent=240,
            style="arc",
            outline=palette["ink"],
            width=2,
        )
        # arrowhead where the arc meets the circle on the right
        end_angle = math.radians(-30)
        tip_x = state.x + LOOP_RADIUS * math.cos(end_angle)
        tip_y = loop_y - LOOP_RADIUS * math.sin(end_angle)
        self.canvas.create_line(
            tip_x + 2, tip_y - 6, tip_x, tip_y, fill=palette["ink"], width=2, arrow="last",
            arrowshape=(ARROW_SIZE, ARROW_SIZE + 2, ARROW_SIZE // 2),
        )
        self._draw_label(state.x, loop_y - LOOP_RADIUS - 5, label, palette)

    def _draw_label(self, x: float, y: float, text: str, palette: Dict[str, str]) -> None:
        item = self.canvas.create_text(x, y, text=text, fill=palette["ink"], font=("Arial", 11, "bold"))
        x0, y0, x1, y1 = self.canvas.bbox(item)
        pad = 4
        background = self.canvas.create_rectangle(
            x0 - pad, y0 - 1, x1 + pad, y1 + 1, fill=palette["canvas"], outline=palette["ink"], width=2
        )
        self.canvas.tag_lower(background, item)


def run_gui() -> int:
    app = AutomatonStudio()
    app.mainloop()
    return 0
