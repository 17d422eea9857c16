"""
Unit tests for the editor session state machine.
"""

import os
import tempfile
import unittest
from unittest.mock import MagicMock

from reunify.core import config
from reunify.core.errors import GenerationError, LetterGenerationError, ValidationError
from reunify.core.session import AppState, LetterState, Session

PHOTO_A = "data:image/png;base64,QUFBQQ=="
PHOTO_B = "data:image/png;base64,QkJCQg=="
RESULT = "data:image/png;base64,UkVTVUxU"


class TestSessionGeneration(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.reunify_images.return_value = RESULT
        self.session = Session(self.client)

    def _ready(self):
        self.session.set_photo(1, PHOTO_A)
        self.session.set_photo(2, PHOTO_B)

    def test_initial_state(self):
        self.assertEqual(self.session.state, AppState.IDLE)
        self.assertEqual(self.session.style, config.DEFAULT_STYLE)
        self.assertIsNone(self.session.generated_image)

    def test_missing_photos_is_validation_error_without_call(self):
        self.session.set_photo(1, PHOTO_A)
        self.session.generate()

        self.assertEqual(self.session.state, AppState.ERROR)
        self.assertEqual(self.session.error_message, config.MSG_MISSING_PHOTOS)
        self.client.reunify_images.assert_not_called()

    def test_success(self):
        self._ready()
        self.session.generate()

        self.assertEqual(self.session.state, AppState.SUCCESS)
        self.assertEqual(self.session.generated_image, RESULT)
        self.assertEqual(self.session.loading_message, "")
        self.assertTrue(self.session.has_generated_once)
        self.client.reunify_images.assert_called_once_with(PHOTO_A, PHOTO_B, config.DEFAULT_STYLE)

    def test_error_text_surfaced_verbatim(self):
        self.client.reunify_images.side_effect = GenerationError("Reunification Error: quota exceeded")
        self._ready()
        self.session.generate()

        self.assertEqual(self.session.state, AppState.ERROR)
        self.assertEqual(self.session.error_message, "Reunification Error: quota exceeded")
        self.assertEqual(self.session.loading_message, "")
        self.assertFalse(self.session.has_generated_once)

    def test_unexpected_exception_uses_fallback_message(self):
        self.client.reunify_images.side_effect = KeyError("boom")
        self._ready()
        self.session.generate()

        self.assertEqual(self.session.state, AppState.ERROR)
        self.assertEqual(self.session.error_message, config.MSG_GENERATION_FALLBACK)

    def test_loading_state_and_message_while_in_flight(self):
        seen = {}

        def fake_reunify(a, b, style):
            seen["state"] = self.session.state
            seen["message"] = self.session.loading_message
            seen["error"] = self.session.error_message
            return RESULT

        self.client.reunify_images.side_effect = fake_reunify
        self._ready()
        self.session.error_message = "old error"
        self.session.generate()

        self.assertEqual(seen["state"], AppState.LOADING)
        self.assertEqual(seen["message"], config.MSG_LOADING)
        self.assertEqual(seen["error"], "")
        self.assertEqual(self.session.loading_message, "")

    def test_generate_ignored_while_loading(self):
        self._ready()
        self.session.state = AppState.LOADING
        self.session.generate()
        self.client.reunify_images.assert_not_called()

    def test_style_change_before_success_does_not_generate(self):
        self._ready()
        self.session.set_style("anime")

        self.assertEqual(self.session.style, "anime")
        self.client.reunify_images.assert_not_called()

    def test_style_change_after_success_regenerates_once(self):
        self._ready()
        self.session.generate()
        self.client.reunify_images.reset_mock()

        self.session.set_style("ghibli")

        self.client.reunify_images.assert_called_once_with(PHOTO_A, PHOTO_B, "ghibli")
        self.assertEqual(self.session.state, AppState.SUCCESS)

    def test_same_style_is_noop(self):
        self._ready()
        self.session.generate()
        self.client.reunify_images.reset_mock()

        self.session.set_style(config.DEFAULT_STYLE)
        self.client.reunify_images.assert_not_called()

    def test_regenerate_before_success_is_noop(self):
        self._ready()
        self.session.regenerate()
        self.client.reunify_images.assert_not_called()

    def test_listener_sees_transitions(self):
        states = []
        session = Session(self.client, listener=lambda s: states.append(s.state))
        session.set_photo(1, PHOTO_A)
        session.set_photo(2, PHOTO_B)
        session.generate()

        self.assertIn(AppState.LOADING, states)
        self.assertEqual(states[-1], AppState.SUCCESS)

    def test_invalid_slot(self):
        with self.assertRaises(ValueError):
            self.session.set_photo(3, PHOTO_A)


class TestSessionReset(unittest.TestCase):
    def test_reset_clears_everything(self):
        client = MagicMock()
        client.reunify_images.return_value = RESULT
        client.generate_letter.return_value = "Dear friend"
        session = Session(client)

        session.set_photo(1, PHOTO_A)
        session.set_photo(2, PHOTO_B)
        session.generate()
        session.set_style("sketch")
        session.compose_letter("old friends")
        session.set_recording("data:audio/wav;base64,UklGRg==")

        session.reset()

        self.assertEqual(session.state, AppState.IDLE)
        self.assertIsNone(session.photo_one)
        self.assertIsNone(session.photo_two)
        self.assertIsNone(session.generated_image)
        self.assertEqual(session.letter, "")
        self.assertEqual(session.letter_state, LetterState.IDLE)
        self.assertIsNone(session.recording)
        self.assertEqual(session.style, config.DEFAULT_STYLE)
        self.assertEqual(session.error_message, "")
        self.assertFalse(session.has_generated_once)

        # style change after reset must not regenerate
        client.reunify_images.reset_mock()
        session.set_style("anime")
        client.reunify_images.assert_not_called()

    def test_reset_during_generation_discards_result(self):
        client = MagicMock()
        session = Session(client)
        states = []
        session.listener = lambda s: states.append(s.state)

        def reunify_then_reset(a, b, style):
            session.reset()
            return "data:image/png;base64,U1RBTEU="

        client.reunify_images.side_effect = reunify_then_reset
        session.set_photo(1, PHOTO_A)
        session.set_photo(2, PHOTO_B)
        session.generate()

        self.assertEqual(session.state, AppState.IDLE)
        self.assertIsNone(session.generated_image)
        self.assertIsNone(session.photo_one)
        self.assertIsNone(session.photo_two)
        self.assertFalse(session.has_generated_once)
        self.assertEqual(session.loading_message, "")
        self.assertEqual(states[-1], AppState.IDLE)

    def test_reset_during_failed_generation_keeps_idle(self):
        client = MagicMock()
        session = Session(client)

        def fail_after_reset(a, b, style):
            session.reset()
            raise GenerationError("Reunification Error: timeout")

        client.reunify_images.side_effect = fail_after_reset
        session.set_photo(1, PHOTO_A)
        session.set_photo(2, PHOTO_B)
        session.generate()

        self.assertEqual(session.state, AppState.IDLE)
        self.assertEqual(session.error_message, "")

    def test_reset_during_letter_discards_letter(self):
        client = MagicMock()
        session = Session(client)

        def letter_then_reset(context):
            session.reset()
            return "Dear stale"

        client.generate_letter.side_effect = letter_then_reset
        session.compose_letter("old friends")

        self.assertEqual(session.letter, "")
        self.assertEqual(session.letter_state, LetterState.IDLE)
        self.assertEqual(session.letter_error, "")

    def test_generation_after_reset_is_kept(self):
        client = MagicMock()
        client.reunify_images.return_value = RESULT
        session = Session(client)
        session.reset()
        session.set_photo(1, PHOTO_A)
        session.set_photo(2, PHOTO_B)
        session.generate()

        self.assertEqual(session.state, AppState.SUCCESS)
        self.assertEqual(session.generated_image, RESULT)


class TestSessionLetter(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.session = Session(self.client)

    def test_empty_context(self):
        self.session.compose_letter("   ")
        self.assertEqual(self.session.letter_state, LetterState.ERROR)
        self.assertEqual(self.session.letter_error, config.MSG_MISSING_CONTEXT)
        self.client.generate_letter.assert_not_called()

    def test_success(self):
        self.client.generate_letter.return_value = "Dear..."
        self.session.compose_letter("old friends")
        self.assertEqual(self.session.letter_state, LetterState.SUCCESS)
        self.assertEqual(self.session.letter, "Dear...")

    def test_failure(self):
        self.client.generate_letter.side_effect = LetterGenerationError(config.MSG_LETTER_FAILED)
        self.session.compose_letter("old friends")
        self.assertEqual(self.session.letter_state, LetterState.ERROR)
        self.assertEqual(self.session.letter_error, config.MSG_LETTER_FAILED)
        self.assertEqual(self.session.letter, "")

    def test_empty_recording_clears(self):
        self.session.set_recording("data:audio/wav;base64,UklGRg==")
        self.session.set_recording("")
        self.assertIsNone(self.session.recording)


class TestSessionResults(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.reunify_images.return_value = RESULT
        self.client.generate_letter.return_value = "Dear friend"
        self.session = Session(self.client)
        self.session.set_photo(1, PHOTO_A)
        self.session.set_photo(2, PHOTO_B)

    def test_build_locket_requires_image_and_letter(self):
        with self.assertRaises(ValidationError):
            self.session.build_locket()
        self.session.generate()
        with self.assertRaises(ValidationError):
            self.session.build_locket()

    def test_build_locket(self):
        self.session.generate()
        self.session.compose_letter("old friends")
        self.session.set_recording("data:audio/wav;base64,UklGRg==")

        payload = self.session.build_locket()
        self.assertEqual(payload.media_url, RESULT)
        self.assertEqual(payload.letter, "Dear friend")
        self.assertEqual(payload.audio_url, "data:audio/wav;base64,UklGRg==")
        self.assertEqual(payload.media_type, "image")

    def test_save_result(self):
        self.session.generate()
        with tempfile.TemporaryDirectory() as tmp:
            path = self.session.save_result(os.path.join(tmp, "out.png"))
            self.assertEqual(path.read_bytes(), b"RESULT")

    def test_save_without_result(self):
        with self.assertRaises(GenerationError):
            self.session.save_result("unused.png")


if __name__ == "__main__":
    unittest.main()
