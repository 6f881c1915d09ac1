import tempfile
from pathlib import Path
from unittest import TestCase as BaseTestCase

from wiki.adapters import FileSystemPageRepository, Jinja2PageRenderer
from wiki.config import Config, StorageConfig
from wiki.services import PageService
from wiki.setup import setup_logging

setup_logging()


class TestCase(BaseTestCase):
    """
    Test case with an empty storage directory per test.
    """

    def setUp(self):
        super().setUp()
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.storage_path = Path(self._tmpdir.name) / "pages"

    def get_config(self) -> Config:
        return Config(storage=StorageConfig(path=self.storage_path))

    def get_repository(self, **kwargs) -> FileSystemPageRepository:
        return FileSystemPageRepository(self.storage_path, **kwargs)

    def get_service(self) -> PageService:
        return PageService(self.get_repository(), Jinja2PageRenderer())
