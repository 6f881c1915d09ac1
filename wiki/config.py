import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

import yaml

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


def parse_mode(value: int | str) -> int:
    """
    Parse a file permission mode for page files.

    Strings are read as octal, "600" or "0o600". An unquoted `600` in YAML
    arrives as the decimal int 600 and is read by its digits, the same as the
    string. Ints that already are an owner-only mode (YAML's `0600`) are kept.

    Raises ValueError for modes giving any access to group or others.
    """
    if isinstance(value, int):
        if 0 <= value <= 0o777 and not value & 0o077:
            mode = value
        else:
            mode = int(str(value), 8)
    else:
        value = value.strip().lower()
        if value.startswith("0o"):
            value = value[2:]
        mode = int(value, 8)
    if not 0 <= mode <= 0o777 or mode & 0o077:
        raise ValueError(
            f"Invalid storage mode {value!r}, must be an owner-only mode like 600"
        )
    return mode


@dataclass
class StorageConfig:
    """
    Where and how pages are stored.
    """

    path: Path = field(default_factory=lambda: Path("pages"))
    suffix: str = ".txt"
    mode: int = 0o600
    sort: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        return cls(
            path=Path(data.get("path", "pages")),
            suffix=data.get("suffix", ".txt"),
            mode=parse_mode(data.get("mode", 0o600)),
            sort=data.get("sort", True),
        )


@dataclass
class RendererConfig:
    templates: Path | None = None
    markdown: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        templates = data.get("templates", None)
        return cls(
            templates=Path(templates) if templates else None,
            markdown=data.get("markdown", False),
        )


@dataclass
class ServerConfig:
    """
    The server configuration.
    """

    port: int = 8080
    host: str = "0.0.0.0"
    reload: bool = False
    log_level: str = "info"

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """
        Load the server configuration from a dictionary.
        """
        return cls(**data)


@dataclass
class Config:
    """
    The configuration for the wiki.
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    debug: bool = False

    @classmethod
    def read(cls, path: str | Path | None) -> Self:
        """
        Read the configuration from a file, then apply environment overrides.

        A missing file gives the default configuration.
        """
        data = {}
        if path and Path(path).exists():
            with open(path, "r", encoding="utf-8") as file:
                data = yaml.safe_load(file) or {}
        elif path:
            logger.warning("Config file=%s not found, using defaults", path)
        config = cls.from_dict(data)
        config.apply_env()
        return config

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """
        Load the configuration from a dictionary.
        """
        return cls(
            debug=data.get("debug", False),
            storage=StorageConfig.from_dict(data.get("storage", None) or {}),
            renderer=RendererConfig.from_dict(data.get("renderer", None) or {}),
            server=ServerConfig.from_dict(data.get("server", None) or {}),
        )

    def apply_env(self, environ: dict[str, str] | None = None) -> None:
        """
        Override settings from WIKI_* environment variables.
        """
        environ = os.environ if environ is None else environ
        if environ.get("WIKI_STORAGE_ROOT"):
            self.storage.path = Path(environ["WIKI_STORAGE_ROOT"])
        if environ.get("WIKI_HOST"):
            self.server.host = environ["WIKI_HOST"]
        if environ.get("WIKI_PORT"):
            self.server.port = int(environ["WIKI_PORT"])
        if environ.get("WIKI_LOG_LEVEL"):
            self.server.log_level = environ["WIKI_LOG_LEVEL"]
        if environ.get("WIKI_DEBUG"):
            self.debug = environ["WIKI_DEBUG"].strip().lower() in TRUE_VALUES
