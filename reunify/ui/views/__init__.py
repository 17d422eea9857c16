"""
Reunify Screens
===============

- HomeView: Landing page.
- EditorView: Upload, generate, letter, voice message and sharing.
- LocketView: Read-only view of a shared locket.
"""

from .editor import EditorView
from .home import HomeView
from .locket_view import LocketView
