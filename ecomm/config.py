"""Module to configure services."""

import ecomm.sqlite
import logging
import os

from collections.abc import Mapping
from dataclasses import dataclass
from ecomm.memory import MemoryStore
from ecomm.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ecomm.store import Store


_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """
    Service settings.

    Attributes:
    • database: path to SQLite database file, or None to keep records in memory
    • default_page_size: page size if none or a non-positive size is requested
    • max_page_size: maximum page size
    • query_timeout: seconds to wait for a page to be retrieved  [unlimited]
    """

    database: str | None = None
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    query_timeout: float | None = None

    def __post_init__(self):
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be positive")
        if self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must not be less than default_page_size")
        if self.query_timeout is not None and self.query_timeout <= 0:
            raise ValueError("query_timeout must be positive")

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Return settings read from environment variables:

        • ECOMM_DATABASE
        • ECOMM_DEFAULT_PAGE_SIZE
        • ECOMM_MAX_PAGE_SIZE
        • ECOMM_QUERY_TIMEOUT

        Unset variables take their default values.
        """
        environ = os.environ if environ is None else environ
        kwargs = {}
        if database := environ.get("ECOMM_DATABASE"):
            kwargs["database"] = database
        if value := environ.get("ECOMM_DEFAULT_PAGE_SIZE"):
            kwargs["default_page_size"] = int(value)
        if value := environ.get("ECOMM_MAX_PAGE_SIZE"):
            kwargs["max_page_size"] = int(value)
        if value := environ.get("ECOMM_QUERY_TIMEOUT"):
            kwargs["query_timeout"] = float(value)
        settings = cls(**kwargs)
        _logger.debug("settings: %s", settings)
        return settings

    def create_store(self) -> Store:
        """Return a new store, as configured by the database setting."""
        if self.database is None:
            return MemoryStore()
        return ecomm.sqlite.Store(self.database)
