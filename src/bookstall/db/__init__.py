# ABOUTME: Public API for the bookstall store catalog database layer.
# ABOUTME: Exports connection management, catalog operations, and data types.

from bookstall.db.catalog import CatalogApi, StoreCatalog, TermError
from bookstall.db.connection import DEFAULT_DB_PATH, open_store
from bookstall.db.mapping import Attachment, Product, ProductDownload, ProductRecord

__all__ = [
    "DEFAULT_DB_PATH",
    "Attachment",
    "CatalogApi",
    "Product",
    "ProductDownload",
    "ProductRecord",
    "StoreCatalog",
    "TermError",
    "open_store",
]
