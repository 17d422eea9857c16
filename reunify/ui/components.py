"""
Editor Components
=================

Reusable CustomTkinter widgets used by the editor screen:

- ImageUploader: click-to-pick photo slot with preview.
- StyleSelector: segmented button over the style presets.
- LetterPanel: context entry and generated letter display.
- AudioPanel: record / stop / retake controls around ``AudioRecorder``.
- SharePanel: builds a locket link and copies it to the clipboard.

All slow work is handed to the controller's ``BackgroundWorker``; callbacks
are marshalled back to the Tk thread with ``after(0, ...)``.
"""

import logging
import os
from tkinter import filedialog
from typing import Callable, Optional

import customtkinter as ctk

from reunify.core import config
from reunify.core.errors import ReunifyError
from reunify.core.locket import build_share_url
from reunify.core.media import data_url_to_image, file_to_data_url
from reunify.core.session import LetterState
from reunify.integrations.audio_recorder import AudioRecorder, RecordingStatus, is_audio_available

logger = logging.getLogger(__name__)

PREVIEW_SIZE = (260, 260)


def make_preview(data_url: str, size=PREVIEW_SIZE) -> Optional[ctk.CTkImage]:
    """Build a CTkImage thumbnail from a data URL, or None if it cannot be decoded."""
    try:
        img = data_url_to_image(data_url)
    except ReunifyError as e:
        logger.warning(f"Could not build preview: {e}")
        return None
    img.thumbnail(size)
    return ctk.CTkImage(light_image=img, dark_image=img, size=img.size)


class ImageUploader(ctk.CTkFrame):
    """A labelled photo slot. Clicking it opens a file dialog."""

    def __init__(self, parent, controller, label: str, on_loaded: Callable[[str], None]):
        super().__init__(parent)
        self.controller = controller
        self.on_loaded = on_loaded
        self._preview_src: Optional[str] = None
        self._image = None

        ctk.CTkLabel(self, text=label, font=("Roboto", 18, "bold")).pack(pady=(10, 5))

        self.btn = ctk.CTkButton(
            self, text="Click to upload", width=PREVIEW_SIZE[0], height=PREVIEW_SIZE[1],
            fg_color="gray25", hover_color="gray30", command=self.pick_file
        )
        self.btn.pack(padx=10, pady=5)

        self.lbl_error = ctk.CTkLabel(self, text="", text_color="red")
        self.lbl_error.pack(pady=(0, 10))

    def pick_file(self):
        app_config = self.controller.app_config
        path = filedialog.askopenfilename(
            initialdir=app_config.last_directory or None,
            filetypes=config.IMAGE_FILETYPES,
        )
        if not path:
            return
        app_config.last_directory = os.path.dirname(path)
        self.lbl_error.configure(text="")
        self.btn.configure(text="Loading...")

        self.controller.worker.submit(
            file_to_data_url, path,
            on_done=lambda url: self.after(0, lambda: self.on_loaded(url)),
            on_error=lambda e: self.after(0, lambda: self._show_error(e)),
        )

    def _show_error(self, error: Exception):
        self.lbl_error.configure(text=str(error))
        self.set_preview(self._preview_src, force=True)

    def set_preview(self, data_url: Optional[str], force: bool = False):
        if data_url == self._preview_src and not force:
            return
        self._preview_src = data_url
        self._image = make_preview(data_url) if data_url else None
        if self._image is not None:
            self.btn.configure(image=self._image, text="")
        else:
            self.btn.configure(image=None, text="Click to upload")


class StyleSelector(ctk.CTkSegmentedButton):
    """Segmented button over ``config.STYLE_PRESETS``; reports the style key."""

    def __init__(self, parent, on_change: Callable[[str], None]):
        self._key_by_name = {p["name"]: p["key"] for p in config.STYLE_PRESETS}
        self._name_by_key = {p["key"]: p["name"] for p in config.STYLE_PRESETS}
        super().__init__(
            parent,
            values=list(self._key_by_name),
            command=lambda name: on_change(self._key_by_name[name]),
        )
        self.select_style(config.DEFAULT_STYLE)

    def select_style(self, style_key: str):
        self.set(self._name_by_key.get(style_key, self._name_by_key[config.DEFAULT_STYLE]))


class LetterPanel(ctk.CTkFrame):
    """Collects the letter context and shows the generated letter."""

    def __init__(self, parent, controller):
        super().__init__(parent)
        self.controller = controller

        ctk.CTkLabel(self, text="Accompanying Letter", font=("Roboto", 18, "bold")).pack(pady=(10, 5))

        self.input_frame = ctk.CTkFrame(self, fg_color="transparent")
        ctk.CTkLabel(
            self.input_frame, text="Describe the relationship or context for a custom letter."
        ).pack(anchor="w")
        self.txt_context = ctk.CTkTextbox(self.input_frame, height=60)
        self.txt_context.pack(fill="x", pady=5)
        self.btn_generate = ctk.CTkButton(self.input_frame, text="Generate Letter", command=self.generate)
        self.btn_generate.pack(pady=5)

        self.lbl_error = ctk.CTkLabel(self, text="", text_color="red", wraplength=420)
        self.txt_letter = ctk.CTkTextbox(self, height=200, wrap="word")

        self.input_frame.pack(fill="x", padx=10)

    def generate(self):
        context = self.txt_context.get("0.0", "end").strip()
        self.controller.worker.submit(self.controller.session.compose_letter, context)

    def refresh(self, session):
        state = session.letter_state

        if state == LetterState.SUCCESS:
            self.input_frame.pack_forget()
            self.txt_letter.configure(state="normal")
            self.txt_letter.delete("0.0", "end")
            self.txt_letter.insert("0.0", session.letter)
            self.txt_letter.configure(state="disabled")
            self.txt_letter.pack(fill="both", expand=True, padx=10, pady=10)
        else:
            self.txt_letter.pack_forget()
            self.input_frame.pack(fill="x", padx=10)

        loading = state == LetterState.LOADING
        self.btn_generate.configure(
            text="Generating..." if loading else "Generate Letter",
            state="disabled" if loading else "normal",
        )

        if state == LetterState.ERROR:
            self.lbl_error.configure(text=session.letter_error)
            self.lbl_error.pack(pady=5)
        else:
            self.lbl_error.pack_forget()

    def reset(self):
        self.txt_context.delete("0.0", "end")


class AudioPanel(ctk.CTkFrame):
    """Record / Stop / Retake controls for the voice message."""

    def __init__(self, parent, controller):
        super().__init__(parent)
        self.controller = controller
        self.recorder = AudioRecorder(on_recording_complete=self._on_recording)
        self.audio_available = is_audio_available()

        ctk.CTkLabel(self, text="Voice Message", font=("Roboto", 18, "bold")).pack(pady=(10, 5))

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.pack(pady=5)
        self.btn_record = ctk.CTkButton(buttons, text="Record", fg_color="red", command=self.start)
        self.btn_stop = ctk.CTkButton(buttons, text="Stop", command=self.stop)
        self.btn_retake = ctk.CTkButton(buttons, text="Retake", fg_color="gray", command=self.retake)
        self.lbl_status = ctk.CTkLabel(self, text="")
        self.lbl_status.pack(pady=(0, 10))

        self.render()

    def _on_recording(self, data_url: str):
        self.controller.session.set_recording(data_url)

    def start(self):
        self.recorder.start()
        self.render()

    def stop(self):
        self.recorder.stop()
        self.render()

    def retake(self):
        self.recorder.retake()
        self.render()

    def render(self):
        status = self.recorder.status
        for btn in (self.btn_record, self.btn_stop, self.btn_retake):
            btn.pack_forget()

        if not self.audio_available:
            self.btn_record.configure(state="disabled")
            self.btn_record.pack(side="left", padx=5)
            self.lbl_status.configure(text=config.MSG_AUDIO_UNAVAILABLE, text_color="gray60")
            return

        if status in (RecordingStatus.IDLE, RecordingStatus.ERROR):
            self.btn_record.pack(side="left", padx=5)
        elif status == RecordingStatus.RECORDING:
            self.btn_stop.pack(side="left", padx=5)
        elif status == RecordingStatus.RECORDED:
            self.btn_retake.pack(side="left", padx=5)

        text = {
            RecordingStatus.IDLE: "",
            RecordingStatus.RECORDING: "Recording...",
            RecordingStatus.RECORDED: "Voice message recorded.",
            RecordingStatus.ERROR: self.recorder.error,
        }[status]
        self.lbl_status.configure(
            text=text, text_color="red" if status == RecordingStatus.ERROR else ("gray90", "gray90")
        )

    def reset(self):
        self.recorder.close()
        if self.recorder.status != RecordingStatus.IDLE:
            self.recorder.retake()
        self.render()

    def shutdown(self):
        self.recorder.close()


class SharePanel(ctk.CTkFrame):
    """Builds a locket link from the session and copies it to the clipboard."""

    def __init__(self, parent, controller):
        super().__init__(parent)
        self.controller = controller

        ctk.CTkLabel(self, text="Share Locket", font=("Roboto", 18, "bold")).pack(pady=(10, 5))
        ctk.CTkButton(self, text="Copy Locket Link", command=self.copy_link).pack(pady=5)
        self.lbl_status = ctk.CTkLabel(self, text="", wraplength=420)
        self.lbl_status.pack(pady=(0, 10))

    def copy_link(self):
        try:
            payload = self.controller.session.build_locket()
        except ReunifyError as e:
            self.lbl_status.configure(text=str(e), text_color="red")
            return

        url = build_share_url(payload, self.controller.app_config.share_base_url)
        self.clipboard_clear()
        self.clipboard_append(url)
        logger.info(f"Locket link copied to clipboard ({len(url)} chars)")
        self.lbl_status.configure(text="Link copied to clipboard.", text_color="green")

    def reset(self):
        self.lbl_status.configure(text="")
