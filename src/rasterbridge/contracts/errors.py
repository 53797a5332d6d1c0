# src/rasterbridge/contracts/errors.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    OPEN_FAILED = "open_failed"
    UNSUPPORTED_TYPE = "unsupported_type"
    READ_FAILED = "read_failed"
    DRIVER_NOT_FOUND = "driver_not_found"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    CREATE_FAILED = "create_failed"
    SET_TRANSFORM_FAILED = "set_transform_failed"
    SET_PROJECTION_FAILED = "set_projection_failed"
    WRITE_FAILED = "write_failed"
    HANDLE_CLOSED = "handle_closed"


class RasterError(Exception):
    """Base de errores del paquete. Todos son fatales para la operación que los lanza."""
    kind: ErrorKind

    def __init__(self, message: str, *, path: Optional[str] = None, driver: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.driver = driver


class OpenFailedError(RasterError):
    kind = ErrorKind.OPEN_FAILED


class UnsupportedTypeError(RasterError, ValueError):
    kind = ErrorKind.UNSUPPORTED_TYPE


class ReadFailedError(RasterError):
    kind = ErrorKind.READ_FAILED


class DriverNotFoundError(RasterError, LookupError):
    kind = ErrorKind.DRIVER_NOT_FOUND


class UnsupportedOperationError(RasterError):
    kind = ErrorKind.UNSUPPORTED_OPERATION


class CreateFailedError(RasterError):
    kind = ErrorKind.CREATE_FAILED


class SetTransformFailedError(RasterError):
    kind = ErrorKind.SET_TRANSFORM_FAILED


class SetProjectionFailedError(RasterError):
    kind = ErrorKind.SET_PROJECTION_FAILED


class WriteFailedError(RasterError):
    kind = ErrorKind.WRITE_FAILED


class HandleClosedError(RasterError):
    kind = ErrorKind.HANDLE_CLOSED


__all__ = [
    "ErrorKind", "RasterError", "OpenFailedError", "UnsupportedTypeError",
    "ReadFailedError", "DriverNotFoundError", "UnsupportedOperationError",
    "CreateFailedError", "SetTransformFailedError", "SetProjectionFailedError",
    "WriteFailedError", "HandleClosedError",
]
