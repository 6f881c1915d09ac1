from unittest import mock

from tests.base import TestCase
from wiki.errors import BadRequestError, NotFoundError, RenderError, StorageError
from wiki.ports import PageRenderer
from wiki.services import PageService, Redirect, Rendered
from wiki.types import Page, PageIndex


class RecordingRenderer(PageRenderer):
    """
    Keeps what it was asked to render instead of producing HTML.
    """

    def __init__(self):
        self.calls = []

    def render(self, intent, data):
        self.calls.append((intent, data))
        return f"{intent}:{data}"


class TestPageService(TestCase):
    def setUp(self):
        super().setUp()
        self.repository = self.get_repository()
        self.renderer = RecordingRenderer()
        self.service = PageService(self.repository, self.renderer)

    def test_view_existing(self):
        self.repository.save(Page(identifier="Home", content=b"Welcome"))
        outcome = self.service.view("Home")
        self.assertIsInstance(outcome, Rendered)
        self.assertEqual(outcome.intent, "view")
        self.assertEqual(
            self.renderer.calls, [("view", Page(identifier="Home", content=b"Welcome"))]
        )

    def test_view_missing_redirects_to_edit(self):
        self.assertEqual(self.service.view("Missing"), Redirect("/edit/Missing"))
        self.assertEqual(self.renderer.calls, [])

    def test_view_storage_error(self):
        with mock.patch.object(self.repository, "load", side_effect=StorageError("boom")):
            with self.assertRaises(StorageError):
                self.service.view("Home")

    def test_edit_new_page(self):
        outcome = self.service.edit("NewPage")
        self.assertEqual(outcome.intent, "edit")
        self.assertEqual(self.renderer.calls, [("edit", Page(identifier="NewPage", content=b""))])

    def test_edit_existing(self):
        self.repository.save(Page(identifier="Home", content=b"Welcome"))
        self.service.edit("Home")
        self.assertEqual(
            self.renderer.calls, [("edit", Page(identifier="Home", content=b"Welcome"))]
        )

    def test_edit_storage_error(self):
        with mock.patch.object(self.repository, "load", side_effect=StorageError("boom")):
            with self.assertRaises(StorageError):
                self.service.edit("Home")

    def test_save(self):
        self.assertEqual(self.service.save("X", "hello"), Redirect("/view/X"))
        self.assertEqual(self.repository.load("X").content, b"hello")

    def test_save_overwrites(self):
        self.repository.save(Page(identifier="X", content=b"old content"))
        self.service.save("X", "new")
        self.assertEqual(self.repository.load("X").content, b"new")

    def test_save_twice(self):
        self.service.save("X", "hello")
        self.service.save("X", "hello")
        self.assertEqual(self.repository.list(), ["X"])
        self.assertEqual(self.repository.load("X").content, b"hello")

    def test_save_missing_body_is_empty_page(self):
        self.service.save("Blank", None)
        self.assertEqual(self.repository.load("Blank").content, b"")

    def test_save_empty_identifier(self):
        with self.assertRaises(BadRequestError):
            self.service.save("", "hello")
        self.assertEqual(self.repository.list(), [])

    def test_save_storage_error(self):
        with mock.patch.object(self.repository, "save", side_effect=StorageError("boom")):
            with self.assertRaises(StorageError):
                self.service.save("X", "hello")

    def test_index(self):
        self.repository.save(Page(identifier="Beta"))
        self.repository.save(Page(identifier="Alpha"))
        outcome = self.service.index()
        self.assertEqual(outcome.intent, "listing")
        self.assertEqual(self.renderer.calls, [("listing", PageIndex(entries=["Alpha", "Beta"]))])

    def test_render_error(self):
        self.repository.save(Page(identifier="Home"))
        with mock.patch.object(self.renderer, "render", side_effect=RenderError("bad")):
            with self.assertRaises(StorageError):
                self.service.view("Home")

    def test_deleted_after_listing(self):
        self.repository.save(Page(identifier="Gone"))
        self.assertEqual(self.service.get_index().entries, ["Gone"])
        (self.storage_path / "Gone.txt").unlink()
        self.assertEqual(self.service.view("Gone"), Redirect("/edit/Gone"))
        with self.assertRaises(NotFoundError):
            self.service.get_page("Gone")

    def test_get_page_validates(self):
        with self.assertRaises(BadRequestError):
            self.service.get_page("../x")


class TestRendered(TestCase):
    def test_etag(self):
        a = Rendered("view", "<p>a</p>")
        self.assertEqual(a.etag, Rendered("view", "<p>a</p>").etag)
        self.assertNotEqual(a.etag, Rendered("view", "<p>b</p>").etag)
        self.assertTrue(a.etag.startswith('"') and a.etag.endswith('"'))
