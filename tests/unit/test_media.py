import os
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from reunify.core.errors import ValidationError
from reunify.core.media import (
    bytes_to_data_url,
    data_url_to_bytes,
    data_url_to_image,
    file_to_data_url,
    is_data_url,
    parse_data_url,
    save_data_url,
)


class TestDataUrls(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(parse_data_url("data:image/png;base64,AAAA"), ("image/png", "AAAA"))

    def test_parse_rejects_malformed(self):
        for value in ("", "AAAA", "data:image/png,AAAA", "data:;base64,AAAA", "data:image/png;base64,", None, 42):
            with self.subTest(value=value):
                self.assertFalse(is_data_url(value))
                with self.assertRaises(ValidationError):
                    parse_data_url(value)

    def test_bytes_round_trip(self):
        url = bytes_to_data_url(b"\x00\x01hello", "application/octet-stream")
        self.assertTrue(url.startswith("data:application/octet-stream;base64,"))
        self.assertEqual(data_url_to_bytes(url), b"\x00\x01hello")

    def test_invalid_base64_payload(self):
        with self.assertRaises(ValidationError):
            data_url_to_bytes("data:image/png;base64,@@@@")


class TestImageFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write_image(self, name, fmt):
        path = self.tmp / name
        Image.new("RGB", (8, 8), color=(200, 30, 30)).save(path, format=fmt)
        return path

    def test_png_file(self):
        url = file_to_data_url(self._write_image("a.png", "PNG"))
        self.assertTrue(url.startswith("data:image/png;base64,"))
        self.assertEqual(data_url_to_image(url).size, (8, 8))

    def test_mime_type_from_content_not_extension(self):
        url = file_to_data_url(self._write_image("mislabelled.png", "JPEG"))
        self.assertTrue(url.startswith("data:image/jpeg;base64,"))

    def test_unsupported_format(self):
        with self.assertRaises(ValidationError):
            file_to_data_url(self._write_image("a.gif", "GIF"))

    def test_not_an_image(self):
        path = self.tmp / "notes.png"
        path.write_text("just text")
        with self.assertRaises(ValidationError):
            file_to_data_url(path)

    def test_missing_file(self):
        with self.assertRaises(ValidationError):
            file_to_data_url(self.tmp / "missing.png")

    def test_save_data_url(self):
        out = save_data_url(bytes_to_data_url(b"PNGDATA", "image/png"), os.path.join(self._tmp.name, "out.png"))
        self.assertEqual(out.read_bytes(), b"PNGDATA")


if __name__ == "__main__":
    unittest.main()
