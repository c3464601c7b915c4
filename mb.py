"""GUI front-end for Morseboard (Tkinter application).

This module defines the App class which builds the keyboard window and maps
key presses to the MorseController. The design keeps UI wiring separate from
the timing logic in mb_engine and the audio code in mb_audio/mb_tone.
"""
import logging
import tkinter as tk
from tkinter import ttk
from typing import Optional

from mb_config import MorseConfig, load_config, save_config
from mb_controller import MorseController
from mb_decoder import Symbol, morse_for_character
from mb_scheduler import TkScheduler
from mb_synth import ToneFrequency

logger = logging.getLogger(__name__)

# Tk repeats KeyRelease/KeyPress pairs while a key is held; a release that is
# followed by a press within this window is auto-repeat, not a real release.
RELEASE_DEBOUNCE_MS = 30
REFRESH_MS = 100
CHEAT_SHEET_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


class App(tk.Tk):
    """Main window: text area, key, dot/dash buttons and settings."""

    def __init__(self, config: Optional[MorseConfig] = None):
        super().__init__()
        self.title("Morseboard")
        self.geometry("760x560")
        self.resizable(True, True)

        self.protocol("WM_DELETE_WINDOW", self._on_closing)

        self.config_ = config if config is not None else load_config()
        self.scheduler = TkScheduler(self)
        self.controller: Optional[MorseController] = None

        # Settings mirrored into Tk variables
        self.wpm = tk.IntVar(value=self.config_.wpm)
        self.sounds = tk.BooleanVar(value=self.config_.sounds_enabled)
        self.auto_space = tk.BooleanVar(value=self.config_.auto_space)
        self.error_glyph = tk.StringVar(value=self.config_.error_glyph)
        self.tone = tk.StringVar(value=self.config_.tone_frequency.description)
        self.pending = tk.StringVar(value="")
        self.status = tk.StringVar(value="")

        self._space_down = False
        self._release_job = None

        self._build_ui()
        self._build_controller()
        self._refresh()

    # ---- CharacterSink ----
    def insert_character(self, text: str) -> None:
        """Insert decoded text at the cursor of the text area."""
        self.text.insert("insert", text)
        self.text.see("insert")

    def _build_ui(self):
        """Construct the window."""
        text_frame = ttk.LabelFrame(self, text="Text")
        text_frame.pack(fill="both", expand=True, padx=8, pady=8)
        self.text = tk.Text(text_frame, height=8, wrap="word", font=("TkFixedFont", 14))
        self.text.pack(fill="both", expand=True, padx=4, pady=4)
        self.text.bind("<KeyPress-space>", self._on_space_press)
        self.text.bind("<KeyRelease-space>", self._on_space_release)

        key_frame = ttk.LabelFrame(self, text="Key")
        key_frame.pack(fill="x", padx=8, pady=4)

        self.key_button = ttk.Button(key_frame, text="KEY (hold, or hold Space)")
        self.key_button.grid(row=0, column=0, rowspan=2, sticky="nsew", padx=4, pady=4, ipadx=40, ipady=20)
        self.key_button.bind("<ButtonPress-1>", lambda e: self._begin())
        self.key_button.bind("<ButtonRelease-1>", lambda e: self._end())
        self.key_button.bind("<KeyPress-space>", self._on_space_press)
        self.key_button.bind("<KeyRelease-space>", self._on_space_release)

        ttk.Button(key_frame, text="·  Dot", command=lambda: self._manual(Symbol.DOT)).grid(row=0, column=1, padx=4, pady=4, sticky="ew")
        ttk.Button(key_frame, text="-  Dash", command=lambda: self._manual(Symbol.DASH)).grid(row=1, column=1, padx=4, pady=4, sticky="ew")
        ttk.Button(key_frame, text="Clear", command=self._clear).grid(row=0, column=2, rowspan=2, padx=4, pady=4)

        ttk.Label(key_frame, text="Pending:").grid(row=0, column=3, sticky="e", padx=4)
        ttk.Label(key_frame, textvariable=self.pending, width=10, font=("TkFixedFont", 14)).grid(row=0, column=4, sticky="w", padx=4)
        key_frame.columnconfigure(0, weight=1)

        settings = ttk.LabelFrame(self, text="Settings")
        settings.pack(fill="x", padx=8, pady=4)

        ttk.Label(settings, text="WPM:").grid(row=0, column=0, sticky="e", padx=4, pady=4)
        ttk.Spinbox(settings, from_=1, to=60, increment=1, textvariable=self.wpm, width=5).grid(row=0, column=1, padx=4, pady=4)

        ttk.Label(settings, text="Tone:").grid(row=0, column=2, sticky="e", padx=4, pady=4)
        tone_box = ttk.Combobox(settings, textvariable=self.tone, state="readonly", width=11,
                                values=[f.description for f in ToneFrequency])
        tone_box.grid(row=0, column=3, padx=4, pady=4)
        tone_box.bind("<<ComboboxSelected>>", lambda e: self._on_tone_changed())

        ttk.Checkbutton(settings, text="Sounds", variable=self.sounds).grid(row=0, column=4, padx=8, pady=4)
        ttk.Checkbutton(settings, text="Auto space", variable=self.auto_space).grid(row=0, column=5, padx=8, pady=4)

        ttk.Label(settings, text="Error symbol:").grid(row=0, column=6, sticky="e", padx=4, pady=4)
        ttk.Entry(settings, textvariable=self.error_glyph, width=4).grid(row=0, column=7, padx=4, pady=4)

        # Plain field writes; the engine reads them on the next event
        self.wpm.trace_add("write", lambda *_: self._on_wpm_changed())
        self.sounds.trace_add("write", lambda *_: setattr(self.config_, 'sounds_enabled', self.sounds.get()))
        self.auto_space.trace_add("write", lambda *_: setattr(self.config_, 'auto_space', self.auto_space.get()))
        self.error_glyph.trace_add("write", lambda *_: setattr(self.config_, 'error_glyph', self.error_glyph.get()))

        sheet = ttk.LabelFrame(self, text="Cheat sheet")
        sheet.pack(fill="x", padx=8, pady=4)
        for i, ch in enumerate(CHEAT_SHEET_CHARS):
            ttk.Label(sheet, text=f"{ch} {morse_for_character(ch)}", width=9,
                      font=("TkFixedFont", 10)).grid(row=i // 9, column=i % 9, sticky="w", padx=2)

        ttk.Label(self, textvariable=self.status, foreground="gray").pack(fill="x", padx=8, pady=(0, 6))

    def _build_controller(self):
        """Create (or re-create) the controller for the current tone frequency."""
        if self.controller is not None:
            self.controller.close()
        self.controller = MorseController(self, self.scheduler, config=self.config_)
        if self.controller.tone_gate.available:
            self.status.set(f"Side-tone {self.config_.tone_frequency.hz} Hz")
        else:
            self.status.set("Side-tone unavailable (no audio output)")

    # ---- key handling ----
    def _begin(self):
        self.controller.begin_press()
        self._refresh_pending()

    def _end(self):
        self.controller.end_press()
        self._refresh_pending()

    def _manual(self, symbol: Symbol):
        self.controller.manual_symbol(symbol)
        self._refresh_pending()

    def _on_space_press(self, event):
        if self._release_job is not None:
            # auto-repeat: the key never went up
            self.after_cancel(self._release_job)
            self._release_job = None
            return "break"
        if not self._space_down:
            self._space_down = True
            self._begin()
        return "break"

    def _on_space_release(self, event):
        if self._release_job is None:
            self._release_job = self.after(RELEASE_DEBOUNCE_MS, self._space_released)
        return "break"

    def _space_released(self):
        self._release_job = None
        if self._space_down:
            self._space_down = False
            self._end()

    # ---- settings ----
    def _on_wpm_changed(self):
        try:
            self.config_.wpm = self.wpm.get()
        except (tk.TclError, ValueError):
            # Half typed or invalid value; keep the previous speed
            return

    def _on_tone_changed(self):
        try:
            freq = ToneFrequency.from_name(self.tone.get())
        except ValueError as e:
            logger.warning("%s", e)
            return
        if freq is self.config_.tone_frequency:
            return
        self.config_.tone_frequency = freq
        # The tone sample is fixed per controller
        self._build_controller()

    def _clear(self):
        self.controller.engine.reset()
        self.text.delete("1.0", "end")
        self._refresh_pending()

    def _refresh_pending(self):
        self.pending.set(self.controller.engine.pending_morse)

    def _refresh(self):
        """Keep the pending-symbol display in step with ticks."""
        self._refresh_pending()
        self.after(REFRESH_MS, self._refresh)

    def _on_closing(self):
        """Save settings, release audio and close."""
        save_config(self.config_)
        if self.controller is not None:
            self.controller.close()
            self.controller = None
        self.destroy()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app = App()
    app.mainloop()


if __name__ == '__main__':
    main()
