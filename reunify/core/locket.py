"""
Shareable Locket Links
======================

A "locket" bundles the generated image, the letter and an optional voice
recording into a single link a recipient can open read-only::

    <page-url>#locket-<urlsafe-base64(JSON(payload))>

The JSON keys are camelCase (``mediaUrl``, ``mediaType``, ``letter``,
``audioUrl``) and the ``locket-`` marker is fixed, so links produced by any
version of the app keep resolving.

Decoding never raises: a link that cannot be read yields ``None`` and the
shell shows the "could not be retrieved" screen instead.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional
from urllib.parse import urldefrag

from reunify.core import config
from reunify.core.errors import LocketDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocketPayload:
    """The unit shared through a locket link. Never mutated after creation."""
    media_url: str
    letter: str
    media_type: str = config.LOCKET_MEDIA_TYPE
    audio_url: Optional[str] = None

    def __post_init__(self):
        # An empty recording means "no audio"
        if not self.audio_url:
            object.__setattr__(self, "audio_url", None)

    def to_dict(self) -> dict:
        data = {
            "mediaUrl": self.media_url,
            "mediaType": self.media_type,
            "letter": self.letter,
        }
        if self.audio_url:
            data["audioUrl"] = self.audio_url
        return data

    @classmethod
    def from_dict(cls, data) -> "LocketPayload":
        """Build a payload from parsed JSON, enforcing the required fields."""
        if not isinstance(data, dict):
            raise LocketDecodeError("Locket data is not an object")

        media_url = data.get("mediaUrl")
        letter = data.get("letter")
        if not isinstance(media_url, str) or not media_url:
            raise LocketDecodeError("Locket data is missing 'mediaUrl'")
        if not isinstance(letter, str) or not letter:
            raise LocketDecodeError("Locket data is missing 'letter'")

        media_type = data.get("mediaType", config.LOCKET_MEDIA_TYPE)
        if media_type != config.LOCKET_MEDIA_TYPE:
            raise LocketDecodeError(f"Unsupported locket media type: {media_type!r}")

        audio_url = data.get("audioUrl") or None
        if audio_url is not None and not isinstance(audio_url, str):
            raise LocketDecodeError("Locket 'audioUrl' must be a string")

        return cls(media_url=media_url, letter=letter, media_type=media_type, audio_url=audio_url)


class LocketLoad(NamedTuple):
    """Result of reading a locket link at startup."""
    payload: Optional[LocketPayload]
    requested: bool  # a locket marker was present, whether or not it decoded

    @property
    def failed(self) -> bool:
        return self.requested and self.payload is None


def encode_locket(payload: LocketPayload) -> str:
    """Serialize ``payload`` into a ``locket-...`` fragment (without the leading '#')."""
    text = json.dumps(payload.to_dict(), separators=(",", ":"), ensure_ascii=False)
    encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
    return f"{config.LOCKET_MARKER}{encoded}"


def build_share_url(payload: LocketPayload, page_url: str = config.DEFAULT_SHARE_URL) -> str:
    """Return ``<page_url>#locket-...``, replacing any fragment already on ``page_url``."""
    base, _ = urldefrag(page_url)
    return f"{base}#{encode_locket(payload)}"


def _fragment_of(location: str) -> str:
    """Extract the fragment from a full URL, a '#fragment' or a bare fragment."""
    location = location.strip()
    if "#" in location:
        return location.split("#", 1)[1]
    return location


def _b64decode_lenient(encoded: str) -> bytes:
    # Accept both alphabets, with or without padding
    encoded = encoded.strip().replace("-", "+").replace("_", "/")
    encoded += "=" * (-len(encoded) % 4)
    return base64.b64decode(encoded, validate=True)


def _decode_fragment(fragment: str) -> LocketPayload:
    encoded = fragment[len(config.LOCKET_MARKER):]
    if not encoded:
        raise LocketDecodeError("Locket link carries no data")
    try:
        text = _b64decode_lenient(encoded).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise LocketDecodeError(f"Locket data is not valid base64: {exc}") from exc
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise LocketDecodeError(f"Locket data is not valid JSON: {exc}") from exc
    return LocketPayload.from_dict(data)


def decode_locket(location: Optional[str]) -> Optional[LocketPayload]:
    """
    Decode a locket link.

    Args:
        location: A full URL, a ``#fragment`` or a bare fragment.

    Returns:
        The payload, or ``None`` when there is no locket marker or the data
        cannot be decoded. Never raises.
    """
    return load_shared_locket(location).payload


def load_shared_locket(location: Optional[str]) -> LocketLoad:
    """
    Read the locket link the application was started with.

    This is the single startup step that inspects the link; the result is
    passed to the UI shell.
    """
    if not location:
        return LocketLoad(None, False)

    fragment = _fragment_of(location)
    if not fragment.startswith(config.LOCKET_MARKER):
        return LocketLoad(None, False)

    try:
        payload = _decode_fragment(fragment)
    except LocketDecodeError as e:
        logger.error(f"Failed to parse locket data from link: {e}")
        return LocketLoad(None, True)
    except Exception as e:
        logger.error(f"Unexpected error reading locket link: {e}", exc_info=True)
        return LocketLoad(None, True)

    logger.info(f"Loaded shared locket (audio: {'yes' if payload.audio_url else 'no'})")
    return LocketLoad(payload, True)
