"""
Locket View
===========

Read-only screen for a shared locket: the image, the letter and, when
present, the voice message. If the link could not be decoded the view shows
an explicit error instead of an empty page.
"""

import logging
from typing import Optional

import customtkinter as ctk

from reunify.core import config
from reunify.core.errors import AudioDeviceError
from reunify.core.locket import LocketPayload
from reunify.ui.components import make_preview

logger = logging.getLogger(__name__)

LOCKET_IMAGE_SIZE = (520, 520)


class LocketView(ctk.CTkFrame):
    def __init__(self, parent, controller, payload: Optional[LocketPayload]):
        super().__init__(parent)
        self.controller = controller
        self.payload = payload
        self._image = None

        self.grid_columnconfigure((0, 1), weight=1)

        if payload is None:
            self._build_error()
        else:
            self._build_locket(payload)

    def _build_error(self):
        ctk.CTkLabel(self, text="Locket Not Found", font=("Roboto", 26, "bold"), text_color="red").grid(
            row=0, column=0, columnspan=2, pady=(120, 10)
        )
        ctk.CTkLabel(self, text=config.MSG_LOCKET_UNREADABLE, font=("Roboto", 16)).grid(
            row=1, column=0, columnspan=2
        )

    def _build_locket(self, payload: LocketPayload):
        ctk.CTkLabel(self, text="A Shared Memory", font=("Roboto", 26, "bold")).grid(
            row=0, column=0, columnspan=2, pady=(20, 15)
        )

        self._image = make_preview(payload.media_url, LOCKET_IMAGE_SIZE)
        ctk.CTkLabel(self, image=self._image, text="" if self._image else "Image unavailable").grid(
            row=1, column=0, padx=20, sticky="n"
        )

        right = ctk.CTkFrame(self)
        right.grid(row=1, column=1, padx=20, sticky="nsew")
        letter = ctk.CTkTextbox(right, wrap="word", height=420, font=("Georgia", 15))
        letter.insert("0.0", payload.letter)
        letter.configure(state="disabled")
        letter.pack(fill="both", expand=True, padx=10, pady=10)

        if payload.audio_url:
            self.btn_play = ctk.CTkButton(right, text="Play Voice Message", command=self.play)
            self.btn_play.pack(pady=(0, 5))
            self.lbl_audio = ctk.CTkLabel(right, text="")
            self.lbl_audio.pack(pady=(0, 10))

    def play(self):
        from reunify.integrations.audio_recorder import play_audio

        self.btn_play.configure(state="disabled")
        self.controller.worker.submit(
            play_audio, self.payload.audio_url,
            on_done=lambda _: self.after(0, self._playback_finished),
            on_error=lambda e: self.after(0, lambda: self._playback_finished(e)),
        )

    def _playback_finished(self, error: Optional[Exception] = None):
        self.btn_play.configure(state="normal")
        if error is not None:
            logger.error(f"Playback failed: {error}")
            text = str(error) if isinstance(error, AudioDeviceError) else "Could not play the voice message."
            self.lbl_audio.configure(text=text, text_color="red")
