"""
Unit tests for editor actions that do not need a live window.
"""

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

from reunify.core import config
from reunify.core.session import Session

try:
    from reunify.ui.views.editor import EditorView
except ImportError:  # Tk is not available on every CI image
    EditorView = None

PHOTO_A = "data:image/png;base64,QUFBQQ=="
PHOTO_B = "data:image/png;base64,QkJCQg=="


@unittest.skipIf(EditorView is None, "customtkinter/tkinter not available")
class TestStyleChange(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.reunify_images.return_value = "data:image/png;base64,UkVTVUxU"
        self.session = Session(self.client)
        self.worker = MagicMock()
        self.view = SimpleNamespace(controller=SimpleNamespace(session=self.session, worker=self.worker))

    def test_style_applied_immediately_before_first_result(self):
        EditorView.on_style_change(self.view, "anime")

        self.assertEqual(self.session.style, "anime")
        self.worker.submit_replacing.assert_not_called()

    def test_style_after_result_regenerates_on_worker(self):
        self.session.set_photo(1, PHOTO_A)
        self.session.set_photo(2, PHOTO_B)
        self.session.generate()

        EditorView.on_style_change(self.view, "sketch")

        self.assertEqual(self.session.style, config.DEFAULT_STYLE)
        self.worker.submit_replacing.assert_called_once_with("generate", self.session.set_style, "sketch")


if __name__ == "__main__":
    unittest.main()
