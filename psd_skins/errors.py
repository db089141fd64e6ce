"""Error taxonomy shared by the exporter components."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    INVALID_INPUT = 'invalid_input'
    ASSET_FAILURE = 'asset_failure'
    STORE_FAILURE = 'store_failure'


class SkinExportError(Exception):
    """Base error for the exporter. Carries the failure kind."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class InvalidDocumentError(SkinExportError):
    """Raised when the input document cannot be converted at all."""

    kind = ErrorKind.INVALID_INPUT


class AssetError(SkinExportError):
    """Failure to encode or write a single raster asset."""

    kind = ErrorKind.ASSET_FAILURE


class FontStoreError(SkinExportError):
    """Failure to read the font-file store."""

    kind = ErrorKind.STORE_FAILURE
