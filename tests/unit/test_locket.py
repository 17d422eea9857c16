"""
Unit tests for the shareable locket link codec.
"""

import base64
import json
import unittest

from reunify.core.locket import (
    LocketPayload,
    build_share_url,
    decode_locket,
    encode_locket,
    load_shared_locket,
)

IMAGE = "data:image/png;base64,iVBORw0KGgo+/AAA="
AUDIO = "data:audio/wav;base64,UklGRiQAAABXQVZF"


def _fragment(obj, encoder=base64.urlsafe_b64encode) -> str:
    return "locket-" + encoder(json.dumps(obj).encode("utf-8")).decode("ascii")


class TestLocketRoundTrip(unittest.TestCase):
    def test_round_trip_without_audio(self):
        payload = LocketPayload(media_url=IMAGE, letter="Dear friend,\n\nWe meet again.")
        self.assertEqual(decode_locket(build_share_url(payload)), payload)

    def test_round_trip_with_audio_and_unicode(self):
        payload = LocketPayload(media_url=IMAGE, letter="Cher ami, à bientôt ❤", audio_url=AUDIO)
        self.assertEqual(decode_locket(encode_locket(payload)), payload)

    def test_fragment_is_url_safe(self):
        payload = LocketPayload(media_url=IMAGE, letter="?>>?" * 50)
        fragment = encode_locket(payload)
        self.assertTrue(fragment.startswith("locket-"))
        self.assertNotIn("+", fragment)
        self.assertNotIn("/", fragment)

    def test_wire_keys(self):
        payload = LocketPayload(media_url=IMAGE, letter="hi", audio_url=AUDIO)
        encoded = encode_locket(payload)[len("locket-"):]
        data = json.loads(base64.urlsafe_b64decode(encoded))
        self.assertEqual(data, {"mediaUrl": IMAGE, "mediaType": "image", "letter": "hi", "audioUrl": AUDIO})

    def test_empty_audio_url_is_no_audio(self):
        payload = LocketPayload(media_url=IMAGE, letter="hi", audio_url="")
        self.assertIsNone(payload.audio_url)
        self.assertEqual(decode_locket(encode_locket(payload)), payload)

    def test_audio_key_omitted_when_absent(self):
        encoded = encode_locket(LocketPayload(media_url=IMAGE, letter="hi"))[len("locket-"):]
        self.assertNotIn("audioUrl", json.loads(base64.urlsafe_b64decode(encoded)))


class TestShareUrl(unittest.TestCase):
    def test_share_url_format(self):
        payload = LocketPayload(media_url=IMAGE, letter="hi")
        url = build_share_url(payload, "https://example.com/app")
        self.assertTrue(url.startswith("https://example.com/app#locket-"))

    def test_existing_fragment_replaced(self):
        payload = LocketPayload(media_url=IMAGE, letter="hi")
        url = build_share_url(payload, "https://example.com/#old")
        self.assertEqual(url.count("#"), 1)
        self.assertNotIn("old", url)


class TestDecodeLocket(unittest.TestCase):
    def test_standard_base64_links_still_resolve(self):
        obj = {"mediaUrl": IMAGE, "mediaType": "image", "letter": "hi"}
        payload = decode_locket("#" + _fragment(obj, base64.b64encode))
        self.assertEqual(payload, LocketPayload(media_url=IMAGE, letter="hi"))

    def test_unpadded_data(self):
        obj = {"mediaUrl": IMAGE, "mediaType": "image", "letter": "hey"}
        fragment = _fragment(obj).rstrip("=")
        self.assertIsNotNone(decode_locket(fragment))

    def test_missing_marker(self):
        obj = {"mediaUrl": IMAGE, "mediaType": "image", "letter": "hi"}
        fragment = _fragment(obj)[len("locket-"):]
        result = load_shared_locket("https://reunify.app/#" + fragment)
        self.assertIsNone(result.payload)
        self.assertFalse(result.requested)
        self.assertFalse(result.failed)

    def test_no_location(self):
        for location in (None, "", "https://reunify.app/"):
            result = load_shared_locket(location)
            self.assertIsNone(result.payload)
            self.assertFalse(result.requested)

    def test_malformed_inputs_never_raise(self):
        cases = [
            "#locket-",
            "#locket-!!!not base64!!!",
            "#locket-" + base64.urlsafe_b64encode(b"\xff\xfe\xfd").decode(),
            "#locket-" + base64.urlsafe_b64encode(b"not json").decode(),
            "#" + _fragment(["a", "list"]),
            "#" + _fragment({"mediaType": "image", "letter": "hi"}),
            "#" + _fragment({"mediaUrl": IMAGE, "mediaType": "image"}),
            "#" + _fragment({"mediaUrl": IMAGE, "mediaType": "image", "letter": ""}),
            "#" + _fragment({"mediaUrl": IMAGE, "mediaType": "video", "letter": "hi"}),
            "#" + _fragment({"mediaUrl": 42, "mediaType": "image", "letter": "hi"}),
            "#" + _fragment({"mediaUrl": IMAGE, "letter": "hi", "audioUrl": 7}),
        ]
        for location in cases:
            with self.subTest(location=location[:40]):
                self.assertIsNone(decode_locket(location))
                result = load_shared_locket(location)
                self.assertTrue(result.requested)
                self.assertTrue(result.failed)

    def test_media_type_defaults_to_image(self):
        payload = decode_locket(_fragment({"mediaUrl": IMAGE, "letter": "hi"}))
        self.assertEqual(payload.media_type, "image")


if __name__ == "__main__":
    unittest.main()
