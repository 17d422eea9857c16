"""
Reunify Main Application Window
===============================

This module defines the root CustomTkinter window. It owns the editor
Session, the Gemini client and the background worker, and swaps between
screens in a single central container.

Architecture:
-------------
- HomeView: Landing page with a "Begin Reunification" button.
- EditorView: Upload, generation, letter, voice message and sharing.
- LocketView: Read-only view shown instead of the other screens when the
  app was started with a locket link.

Key Responsibilities:
---------------------
- Root window and theme setup.
- Session lifecycle, with session changes marshalled onto the Tk thread.
- Navigation (tkraise) between screens.
- Orderly shutdown: microphone release, worker join, preference persistence.

Usage:
------
    >>> from reunify.ui.app import App
    >>> app = App()
    >>> app.mainloop()
"""

import logging
from typing import Optional

import customtkinter as ctk

from reunify.core import config
from reunify.core.locket import LocketLoad
from reunify.core.session import Session
from reunify.integrations.google_ai_client import GoogleAIClient
from reunify.utils.background_worker import BackgroundWorker
from reunify.utils.config_manager import AppConfig, load_config, save_config


class App(ctk.CTk):
    """
    Main application window and screen coordinator.

    Args:
        shared: Result of reading the startup locket link. When a link was
            given, only the read-only LocketView is shown.
        app_config: Preferences; loaded from disk when omitted.

    Attributes:
        session: The editor Session shared by all editor widgets.
        worker: Single background thread for file reads and Gemini calls.
        views (dict): Screen name -> frame.
    """

    def __init__(self, shared: Optional[LocketLoad] = None, app_config: Optional[AppConfig] = None):
        super().__init__()

        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing main application window")

        self.title(config.APP_NAME)
        self.geometry(config.GEOMETRY)

        ctk.set_appearance_mode("Dark")
        ctk.set_default_color_theme("blue")

        self.grid_rowconfigure(1, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self.app_config = app_config or load_config()
        self.client = GoogleAIClient(
            image_model=self.app_config.image_model,
            text_model=self.app_config.text_model,
        )
        if not self.client.is_available():
            self.logger.warning("No Gemini API key in the environment; generation will fail until one is set")

        self.worker = BackgroundWorker(name="GenerationWorker")
        self.session = Session(self.client, listener=self._on_session_changed)

        self.protocol("WM_DELETE_WINDOW", self.on_close)

        self._build_header()

        self.container = ctk.CTkFrame(self)
        self.container.grid(row=1, column=0, sticky="nsew", padx=20, pady=(0, 20))
        self.container.grid_rowconfigure(0, weight=1)
        self.container.grid_columnconfigure(0, weight=1)

        self.views = {}
        self.current_view = None

        from reunify.ui.views import EditorView, HomeView, LocketView

        if shared is not None and shared.requested:
            self.logger.info("Opening shared locket in read-only mode")
            self._add_view(LocketView(parent=self.container, controller=self, payload=shared.payload))
            self.show_view("LocketView")
        else:
            for F in (HomeView, EditorView):
                self._add_view(F(parent=self.container, controller=self))
            self.show_view("HomeView")

    def _build_header(self):
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.grid(row=0, column=0, sticky="ew", padx=20, pady=(15, 10))
        header.grid_columnconfigure(1, weight=1)

        self.btn_home = ctk.CTkButton(header, text="← Back Home", width=120, fg_color="transparent",
                                      command=lambda: self.show_view("HomeView"))
        self.btn_home.grid(row=0, column=0, sticky="w")

        ctk.CTkLabel(header, text=config.APP_NAME, font=("Roboto", 40, "bold")).grid(row=0, column=1)
        ctk.CTkLabel(header, text=config.APP_TAGLINE, font=("Roboto", 14)).grid(row=1, column=1)

    def _add_view(self, frame):
        name = type(frame).__name__
        self.logger.debug(f"Creating view: {name}")
        self.views[name] = frame
        frame.grid(row=0, column=0, sticky="nsew")

    def show_view(self, name: str):
        """Raise the named screen and update the header's Back Home button."""
        self.logger.info(f"Navigating to view: {name}")
        self.current_view = name
        self.views[name].tkraise()
        self._update_home_button()

    def _update_home_button(self):
        # Hidden while a generation is in flight
        if self.current_view == "EditorView" and not self.session.is_loading:
            self.btn_home.grid()
        else:
            self.btn_home.grid_remove()

    def start_editor(self):
        """Open the editor with a fresh session."""
        editor = self.views["EditorView"]
        editor.start_over()
        self.show_view("EditorView")

    def _on_session_changed(self, session: Session):
        # Session changes may come from the worker thread
        if "EditorView" in self.views:
            self.after(0, self._refresh_editor)

    def _refresh_editor(self):
        self.views["EditorView"].refresh()
        self._update_home_button()

    def on_close(self):
        """
        Shut down in order: release the microphone, stop the worker, close the
        HTTP session, persist preferences, destroy the window.
        """
        self.logger.info("Application close requested - starting shutdown sequence")

        for name, view in self.views.items():
            if hasattr(view, 'shutdown'):
                try:
                    view.shutdown()
                except Exception as e:
                    self.logger.error(f"Error shutting down view {name}: {e}")

        self.logger.info(f"Stopping worker ({self.worker.pending_count} task(s) pending)")
        self.worker.shutdown()
        self.client.close()
        save_config(self.app_config)

        self.logger.info("Destroying window and exiting")
        self.destroy()
