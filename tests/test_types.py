from unittest import TestCase

from wiki.errors import BadRequestError
from wiki.types import Page, PageIndex, is_valid_identifier, validate_identifier


class TestIdentifier(TestCase):
    def test_valid(self):
        for identifier in ["Alpha", "page1", "X", "ABCdef123"]:
            self.assertTrue(is_valid_identifier(identifier), identifier)
            self.assertEqual(validate_identifier(identifier), identifier)

    def test_invalid(self):
        for identifier in ["", "a.b", "a/b", "..", "a b", "a-b", "a_b", "é", "abc\n"]:
            self.assertFalse(is_valid_identifier(identifier), repr(identifier))
            with self.assertRaises(BadRequestError):
                validate_identifier(identifier)


class TestPage(TestCase):
    def test_defaults_to_empty_content(self):
        page = Page(identifier="Empty")
        self.assertEqual(page.content, b"")
        self.assertEqual(page.text, "")

    def test_text_content_is_encoded(self):
        page = Page(identifier="Hello", content="héllo")
        self.assertEqual(page.content, "héllo".encode("utf-8"))
        self.assertEqual(page.text, "héllo")

    def test_none_content_is_empty(self):
        self.assertEqual(Page(identifier="Nothing", content=None).content, b"")

    def test_rejects_bad_identifier(self):
        with self.assertRaises(BadRequestError):
            Page(identifier="")
        with self.assertRaises(BadRequestError):
            Page(identifier="../secret")

    def test_dict(self):
        page = Page(identifier="Home", content=b"Welcome")
        self.assertEqual(page.to_dict(), {"identifier": "Home", "content": "Welcome"})


class TestPageIndex(TestCase):
    def test_to_dict(self):
        index = PageIndex(entries=["Alpha", "Beta"])
        self.assertEqual(len(index), 2)
        self.assertEqual(list(index), ["Alpha", "Beta"])
        self.assertEqual(index.to_dict(), {"count": 2, "results": ["Alpha", "Beta"]})
