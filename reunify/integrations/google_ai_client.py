"""
Google AI Studio Client
========================

REST client for the Google Gemini API (generativelanguage.googleapis.com).
Provides the two generation calls the editor needs:

- ``reunify_images``: two photos + a style preset -> one composited image.
- ``generate_letter``: a short context string -> a two-paragraph letter.

Authentication is via the ``x-goog-api-key`` HTTP header. The key is read
from the environment (``GEMINI_API_KEY`` or ``API_KEY``) at call time, so a
missing key only surfaces when a generation is attempted.

Neither call retries; the user re-invokes from the UI.
"""

import logging
import os
from typing import Dict, List, Optional

import requests

from reunify.core import config
from reunify.core.errors import (
    ConfigurationError,
    GenerationError,
    LetterGenerationError,
    ValidationError,
)
from reunify.core.media import bytes_to_data_url, parse_data_url
from reunify.utils.logger import log_api_call

logger = logging.getLogger(__name__)


def resolve_style_prompt(style: str) -> str:
    """Return the prompt modifier for ``style``, falling back to the default style."""
    prompt = config.STYLE_PROMPTS.get(style)
    if prompt is None:
        logger.warning(f"Unknown style '{style}', falling back to '{config.DEFAULT_STYLE}'")
        prompt = config.STYLE_PROMPTS[config.DEFAULT_STYLE]
    return prompt


def build_reunify_prompt(style: str) -> str:
    return config.REUNIFY_PROMPT_TEMPLATE.format(style_prompt=resolve_style_prompt(style))


def data_url_to_part(data_url: str) -> Dict:
    """Convert a data URL into a Gemini ``inline_data`` content part."""
    try:
        mime_type, data = parse_data_url(data_url)
    except ValidationError as exc:
        raise ValidationError("Invalid data URL") from exc
    return {"inline_data": {"mime_type": mime_type, "data": data}}


def _first_candidate_parts(data: Dict) -> Optional[List[Dict]]:
    """Return the parts of the first candidate, or None when the response has none."""
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    content = candidates[0].get("content")
    if not content or content.get("parts") is None:
        return None
    return content["parts"]


class GoogleAIClient:
    """Client for Google AI Studio (Gemini API).

    Args:
        api_key: Explicit key. When empty, the key is looked up in the
            environment on every call.
        image_model: Model used for ``reunify_images``.
        text_model: Model used for ``generate_letter``.
        base_url: API root, overridable for tests.
    """

    def __init__(
        self,
        api_key: str = "",
        image_model: str = config.IMAGE_MODEL,
        text_model: str = config.TEXT_MODEL,
        base_url: str = config.GEMINI_BASE_URL,
    ):
        self.api_key = (api_key or "").strip()
        self.image_model = image_model
        self.text_model = text_model
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
        })

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def _resolve_api_key(self) -> str:
        if self.api_key:
            return self.api_key
        for var in config.API_KEY_ENV_VARS:
            value = os.environ.get(var, "").strip()
            if value:
                return value
        raise ConfigurationError(config.MSG_MISSING_API_KEY)

    def is_available(self) -> bool:
        """Return True when an API key is configured or present in the environment."""
        try:
            self._resolve_api_key()
            return True
        except ConfigurationError:
            return False

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _generate_content(self, model_name: str, payload: Dict, timeout: int) -> Dict:
        """POST ``payload`` to ``models/<model_name>:generateContent`` and return the JSON body.

        Raises:
            ConfigurationError: When no API key is available (no request is sent).
            GenerationError: On any HTTP or network error.
        """
        api_key = self._resolve_api_key()
        url = f"{self.base_url}/models/{model_name}:generateContent"

        try:
            resp = self.session.post(
                url,
                json=payload,
                headers={"x-goog-api-key": api_key},
                timeout=timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            resp.close()
        except requests.exceptions.HTTPError as exc:
            detail = ""
            try:
                detail = exc.response.json().get("error", {}).get("message", "")
            except Exception:
                pass
            raise GenerationError(
                f"Google AI API error ({exc.response.status_code}): {detail or exc}"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise GenerationError(f"Google AI API request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationError(f"Google AI returned invalid JSON: {exc}") from exc

        return data

    # ------------------------------------------------------------------
    # Image generation
    # ------------------------------------------------------------------

    @log_api_call(api_name="Gemini")
    def reunify_images(self, photo_one: str, photo_two: str, style: str) -> str:
        """Composite the people from two photos into one image.

        Args:
            photo_one: Data URL of the first photo (Person A).
            photo_two: Data URL of the second photo (Person B).
            style: Style preset key; unknown keys use the default style.

        Returns:
            The generated image as a data URL.

        Raises:
            GenerationError: With a "Reunification Error: ..." message for
                every failure, including invalid input and a missing API key.
        """
        try:
            part_one = data_url_to_part(photo_one)
            part_two = data_url_to_part(photo_two)

            payload = {
                "contents": [
                    {
                        "parts": [
                            part_one,
                            part_two,
                            {"text": build_reunify_prompt(style)},
                        ]
                    }
                ],
                "generationConfig": {
                    "responseModalities": ["IMAGE"],
                },
            }

            data = self._generate_content(self.image_model, payload, config.IMAGE_TIMEOUT_SECONDS)
            del payload

            parts = _first_candidate_parts(data)
            if parts is None:
                raise GenerationError("Failed to generate the reunified image.")

            for part in parts:
                inline = part.get("inline_data") or part.get("inlineData")
                if inline and inline.get("data"):
                    mime_type = inline.get("mime_type") or inline.get("mimeType") or "image/png"
                    return f"data:{mime_type};base64,{inline['data']}"

            raise GenerationError("No image data found in the response.")

        except Exception as exc:
            logger.error(f"Gemini API Error: {exc}", exc_info=True)
            raise GenerationError(f"Reunification Error: {exc}") from exc

    # ------------------------------------------------------------------
    # Text generation
    # ------------------------------------------------------------------

    @log_api_call(api_name="Gemini")
    def generate_letter(self, context: str) -> str:
        """Write a warm two-paragraph letter from a short context string.

        Raises:
            ValidationError: If ``context`` is empty (no request is sent).
            LetterGenerationError: On any other failure.
        """
        if not context or not context.strip():
            raise ValidationError(config.MSG_MISSING_CONTEXT)

        payload = {
            "contents": [
                {"parts": [{"text": config.LETTER_PROMPT_TEMPLATE.format(context=context)}]}
            ]
        }

        try:
            data = self._generate_content(self.text_model, payload, config.TEXT_TIMEOUT_SECONDS)
            parts = _first_candidate_parts(data)
            if not parts:
                raise GenerationError("Google AI returned no candidates")
            text = "".join(part.get("text", "") for part in parts)
            if not text:
                raise GenerationError("Google AI returned no text")
            return text
        except Exception as exc:
            logger.error(f"Gemini API Error (Text Generation): {exc}", exc_info=True)
            raise LetterGenerationError(config.MSG_LETTER_FAILED) from exc

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def close(self):
        """Release the underlying HTTP session and connection pool."""
        try:
            self.session.close()
        except Exception:
            pass
