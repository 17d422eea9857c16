"""
Session Management Module
==========================

This module defines the editor session for the Reunify application. The
Session class is the state machine behind the editor screen and holds
everything the user produces in one sitting:

- The two source photos (Person A and Person B) as data URLs
- The selected style preset
- The generated image, the accompanying letter and the voice recording
- The current editor state and any error or progress message

Editor states::

    idle ──generate()──> loading ──> success
      ^                     │           │
      │                     └──> error  │ set_style() -> regenerate()
      └──────── reset() (from any state)┘

The Session is UI-agnostic. Slow calls block, so the UI runs ``generate()``
and ``compose_letter()`` on a background worker and redraws from the
listener callback.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from reunify.core import config
from reunify.core.errors import GenerationError, ReunifyError, ValidationError
from reunify.core.locket import LocketPayload
from reunify.core.media import save_data_url

logger = logging.getLogger(__name__)


class AppState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class LetterState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Session:
    """
    Editor state machine.

    Args:
        client: Generation client exposing ``reunify_images(a, b, style)`` and
            ``generate_letter(context)``, normally a ``GoogleAIClient``.
        listener: Optional callable invoked with the session after every
            state change.

    Attributes:
        state: Current ``AppState``.
        photo_one / photo_two: Source photo data URLs, or None.
        style: Selected style preset key.
        generated_image: Result data URL, or None.
        error_message: Text shown in the ``error`` state.
        loading_message: Progress text, only non-empty while ``loading``.
        letter / letter_state / letter_error: The letter sub-machine.
        recording: Voice recording data URL, or None.
    """

    def __init__(self, client, listener: Optional[Callable[["Session"], None]] = None):
        self.client = client
        self.listener = listener

        self.state = AppState.IDLE
        self.photo_one: Optional[str] = None
        self.photo_two: Optional[str] = None
        self.style = config.DEFAULT_STYLE
        self.generated_image: Optional[str] = None
        self.error_message = ""
        self.loading_message = ""

        self.letter = ""
        self.letter_state = LetterState.IDLE
        self.letter_error = ""

        self.recording: Optional[str] = None

        self._has_generated_once = False
        # Bumped by reset(); results from calls started under an older value are dropped
        self._epoch = 0
        logger.info("Initializing new session")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self):
        if self.listener:
            try:
                self.listener(self)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)

    def _set_state(self, state: AppState):
        logger.debug(f"Editor state: {self.state.value} -> {state.value}")
        self.state = state
        self._notify()

    @property
    def has_both_photos(self) -> bool:
        return bool(self.photo_one and self.photo_two)

    @property
    def has_generated_once(self) -> bool:
        return self._has_generated_once

    @property
    def is_loading(self) -> bool:
        return self.state == AppState.LOADING

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_photo(self, slot: int, data_url: Optional[str]):
        """Store a source photo in slot 1 (Person A) or 2 (Person B)."""
        if slot == 1:
            self.photo_one = data_url
        elif slot == 2:
            self.photo_two = data_url
        else:
            raise ValueError(f"Photo slot must be 1 or 2, got {slot}")
        logger.info(f"Photo {slot} {'set' if data_url else 'cleared'}")
        self._notify()

    def set_style(self, style: str):
        """Select a style; after a first success this regenerates exactly once."""
        if style == self.style:
            return
        logger.info(f"Style changed: {self.style} -> {style}")
        self.style = style
        self._notify()
        if self._has_generated_once:
            self.regenerate()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self):
        """
        Run one generation with the current photos and style.

        Missing photos put the session in ``error`` without calling the
        client. Calls made while already ``loading`` are ignored.
        """
        if self.is_loading:
            logger.warning("Generation already in progress; ignoring request")
            return

        if not self.has_both_photos:
            self.error_message = config.MSG_MISSING_PHOTOS
            self._set_state(AppState.ERROR)
            return

        self.error_message = ""
        self.generated_image = None
        self.loading_message = config.MSG_LOADING
        self._set_state(AppState.LOADING)
        epoch = self._epoch

        result = None
        try:
            result = self.client.reunify_images(self.photo_one, self.photo_two, self.style)
            next_state = AppState.SUCCESS
        except ReunifyError as e:
            logger.error(f"Error generating: {e}")
            error_message = str(e)
            next_state = AppState.ERROR
        except Exception as e:
            logger.error(f"Unexpected error generating: {e}", exc_info=True)
            error_message = config.MSG_GENERATION_FALLBACK
            next_state = AppState.ERROR

        if epoch != self._epoch:
            logger.info("Session was reset during generation; discarding result")
            return

        self.loading_message = ""
        if next_state == AppState.SUCCESS:
            self.generated_image = result
            self._has_generated_once = True
            logger.info(f"Generation succeeded (style: {self.style})")
        else:
            self.error_message = error_message
        self._set_state(next_state)

    def regenerate(self):
        """Re-run generation with the stored photos; no-op before the first success."""
        if not self._has_generated_once:
            return
        logger.info("Regenerating with new style")
        self.generate()

    # ------------------------------------------------------------------
    # Letter and recording
    # ------------------------------------------------------------------

    def compose_letter(self, context: str):
        """Generate the accompanying letter from a short context string."""
        if not context or not context.strip():
            self.letter_error = config.MSG_MISSING_CONTEXT
            self.letter_state = LetterState.ERROR
            self._notify()
            return

        self.letter_state = LetterState.LOADING
        self.letter_error = ""
        self._notify()
        epoch = self._epoch

        letter, error = "", ""
        try:
            letter = self.client.generate_letter(context)
        except ReunifyError as e:
            error = str(e)
        except Exception as e:
            logger.error(f"Unexpected error generating letter: {e}", exc_info=True)
            error = "Failed to generate text."

        if epoch != self._epoch:
            logger.info("Session was reset during letter generation; discarding letter")
            return

        if error:
            self.letter_error = error
            self.letter_state = LetterState.ERROR
        else:
            self.letter = letter
            self.letter_state = LetterState.SUCCESS
        self._notify()

    def set_recording(self, data_url: Optional[str]):
        """Store a voice recording; an empty value clears it (retake)."""
        self.recording = data_url or None
        self._notify()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def build_locket(self) -> LocketPayload:
        """Bundle the result, letter and recording into a shareable payload."""
        if not self.generated_image:
            raise ValidationError("Generate an image before sharing a locket.")
        if not self.letter:
            raise ValidationError("Generate a letter before sharing a locket.")
        return LocketPayload(
            media_url=self.generated_image,
            letter=self.letter,
            audio_url=self.recording,
        )

    def save_result(self, path: Union[str, Path]) -> Path:
        """Write the generated image to ``path``."""
        if not self.generated_image:
            raise GenerationError("There is no generated image to save.")
        return save_data_url(self.generated_image, path)

    def reset(self):
        """Return to ``idle`` and clear everything the user produced."""
        logger.info("Resetting session")
        self.photo_one = None
        self.photo_two = None
        self.generated_image = None
        self.error_message = ""
        self.loading_message = ""
        self.style = config.DEFAULT_STYLE
        self.letter = ""
        self.letter_state = LetterState.IDLE
        self.letter_error = ""
        self.recording = None
        self._has_generated_once = False
        self._epoch += 1
        self._set_state(AppState.IDLE)
