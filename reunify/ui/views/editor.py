"""
Editor View
===========

The main working screen. It renders one of three layouts depending on the
session state:

- idle / error: two photo slots, style selector, Reunify button, error text.
- loading: indeterminate progress bar and the progress message.
- success: the generated image, download / start-over actions, letter,
  voice message, share link and a style selector that regenerates.

This view never changes session state directly except through the
controller's background worker; it redraws in ``refresh()``, which the app
schedules on the Tk thread after every session change.
"""

import logging
from tkinter import filedialog

import customtkinter as ctk

from reunify.core import config
from reunify.core.errors import ReunifyError
from reunify.core.session import AppState
from reunify.ui.components import (
    AudioPanel,
    ImageUploader,
    LetterPanel,
    SharePanel,
    StyleSelector,
    make_preview,
)

logger = logging.getLogger(__name__)

RESULT_SIZE = (480, 480)


class EditorView(ctk.CTkFrame):
    def __init__(self, parent, controller):
        super().__init__(parent)
        self.controller = controller
        self._result_src = None
        self._result_image = None

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self.upload_frame = self._build_upload(self)
        self.loading_frame = self._build_loading(self)
        self.result_frame = self._build_result(self)

        self.refresh()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_upload(self, parent):
        frame = ctk.CTkFrame(parent, fg_color="transparent")
        frame.grid_columnconfigure((0, 1), weight=1)

        session = self.controller.session
        self.uploader_one = ImageUploader(
            frame, self.controller, "Person A", on_loaded=lambda url: session.set_photo(1, url)
        )
        self.uploader_one.grid(row=0, column=0, padx=20, pady=10)
        self.uploader_two = ImageUploader(
            frame, self.controller, "Person B", on_loaded=lambda url: session.set_photo(2, url)
        )
        self.uploader_two.grid(row=0, column=1, padx=20, pady=10)

        ctk.CTkLabel(frame, text="Reunification Style", font=("Roboto", 18, "bold")).grid(
            row=1, column=0, columnspan=2, pady=(20, 5)
        )
        self.style_selector = StyleSelector(frame, on_change=self.on_style_change)
        self.style_selector.grid(row=2, column=0, columnspan=2, pady=5)

        self.btn_generate = ctk.CTkButton(
            frame, text="Reunify", width=260, height=50, font=("Roboto", 20, "bold"),
            command=self.generate
        )
        self.btn_generate.grid(row=3, column=0, columnspan=2, pady=25)

        self.lbl_error = ctk.CTkLabel(frame, text="", text_color="red", wraplength=700)
        self.lbl_error.grid(row=4, column=0, columnspan=2, pady=5)
        return frame

    def _build_loading(self, parent):
        frame = ctk.CTkFrame(parent, fg_color="transparent")
        self.progress = ctk.CTkProgressBar(frame, mode="indeterminate", width=400)
        self.progress.pack(pady=(150, 20))
        self.lbl_loading = ctk.CTkLabel(frame, text="", font=("Roboto", 18))
        self.lbl_loading.pack()
        return frame

    def _build_result(self, parent):
        frame = ctk.CTkFrame(parent, fg_color="transparent")
        frame.grid_columnconfigure((0, 1), weight=1)

        left = ctk.CTkFrame(frame, fg_color="transparent")
        left.grid(row=0, column=0, sticky="n", padx=10)
        ctk.CTkLabel(left, text="Reunification Success", font=("Roboto", 22, "bold")).pack(pady=(10, 10))
        self.lbl_result = ctk.CTkLabel(left, text="")
        self.lbl_result.pack()

        actions = ctk.CTkFrame(left, fg_color="transparent")
        actions.pack(pady=10)
        ctk.CTkButton(actions, text="Start Over", fg_color="gray", command=self.start_over).pack(side="left", padx=10)
        ctk.CTkButton(actions, text="Download", command=self.download).pack(side="left", padx=10)
        self.lbl_result_status = ctk.CTkLabel(left, text="")
        self.lbl_result_status.pack()

        right = ctk.CTkScrollableFrame(frame, width=460, height=560)
        right.grid(row=0, column=1, sticky="nsew", padx=10)
        self.letter_panel = LetterPanel(right, self.controller)
        self.letter_panel.pack(fill="x", pady=5)
        self.audio_panel = AudioPanel(right, self.controller)
        self.share_panel = SharePanel(right, self.controller)

        ctk.CTkLabel(frame, text="Change Style", font=("Roboto", 16, "bold")).grid(
            row=1, column=0, columnspan=2, pady=(15, 5)
        )
        self.result_style_selector = StyleSelector(frame, on_change=self.on_style_change)
        self.result_style_selector.grid(row=2, column=0, columnspan=2, pady=(0, 10))
        return frame

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def generate(self):
        if self.controller.session.is_loading:
            return
        self.btn_generate.configure(state="disabled")
        self.controller.worker.submit_replacing("generate", self.controller.session.generate)

    def on_style_change(self, style_key: str):
        session = self.controller.session
        if not session.has_generated_once:
            # No regeneration follows, so the pending Reunify click sees the new style
            session.set_style(style_key)
            return
        self.controller.worker.submit_replacing("generate", session.set_style, style_key)

    def download(self):
        path = filedialog.asksaveasfilename(
            defaultextension=".png",
            initialfile=config.DEFAULT_DOWNLOAD_NAME,
            filetypes=[("PNG Image", "*.png"), ("All Files", "*.*")],
        )
        if not path:
            return
        try:
            self.controller.session.save_result(path)
            self.lbl_result_status.configure(text=f"Saved to {path}", text_color="green")
        except (ReunifyError, OSError) as e:
            logger.error(f"Failed to save result: {e}")
            self.lbl_result_status.configure(text=f"Save failed: {e}", text_color="red")

    def start_over(self):
        self.letter_panel.reset()
        self.audio_panel.reset()
        self.share_panel.reset()
        self.lbl_result_status.configure(text="")
        self.controller.session.reset()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _show(self, frame):
        for f in (self.upload_frame, self.loading_frame, self.result_frame):
            if f is not frame:
                f.grid_remove()
        frame.grid(row=0, column=0, sticky="nsew", padx=20, pady=20)

    def refresh(self):
        session = self.controller.session
        state = session.state

        self.style_selector.select_style(session.style)
        self.result_style_selector.select_style(session.style)

        if state == AppState.LOADING:
            self.lbl_loading.configure(text=session.loading_message or "Processing images...")
            self.progress.start()
            self._show(self.loading_frame)
            return

        self.progress.stop()

        if state == AppState.SUCCESS and session.generated_image:
            if session.generated_image != self._result_src:
                self._result_src = session.generated_image
                self._result_image = make_preview(session.generated_image, RESULT_SIZE)
                self.lbl_result.configure(image=self._result_image)

            self.letter_panel.refresh(session)
            if session.letter:
                self.audio_panel.pack(fill="x", pady=5)
                self.share_panel.pack(fill="x", pady=5)
            else:
                self.audio_panel.pack_forget()
                self.share_panel.pack_forget()
            self._show(self.result_frame)
            return

        self.uploader_one.set_preview(session.photo_one)
        self.uploader_two.set_preview(session.photo_two)
        self.btn_generate.configure(state="normal" if session.has_both_photos else "disabled")

        if state == AppState.ERROR and session.error_message:
            self.lbl_error.configure(text=f"Error: {session.error_message}")
        else:
            self.lbl_error.configure(text="")
        self._show(self.upload_frame)

    def shutdown(self):
        self.progress.stop()
        self.audio_panel.shutdown()
