"""
File Storage Infrastructure Module

Blob storage backends and spreadsheet processing with openpyxl.

Exports:
    - LocalStorage / S3Storage: StorageClientProtocol implementations
    - create_storage: Backend selection from settings
    - ExcelImporter: Header-validating streaming reader
    - ExcelExporter: Export sheet builder
"""

from .excel_exporter import ExcelExporter
from .excel_importer import ExcelImporter
from .local_storage import LocalStorage
from .s3_storage import S3Storage, create_s3_client
from .storage_factory import create_storage

__all__ = [
    "ExcelExporter",
    "ExcelImporter",
    "LocalStorage",
    "S3Storage",
    "create_s3_client",
    "create_storage",
]
