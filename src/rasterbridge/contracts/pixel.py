# src/rasterbridge/contracts/pixel.py
from __future__ import annotations

from enum import IntEnum
from typing import Optional

import numpy as np

from .errors import UnsupportedTypeError


class PixelType(IntEnum):
    """Tipos de pixel soportados (códigos GDALDataType 0..7)."""
    UNKNOWN = 0
    BYTE = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    FLOAT64 = 7

    @property
    def dtype(self) -> Optional[np.dtype]:
        """numpy.dtype asociado; None para UNKNOWN (sin tipo concreto)."""
        return _PIXEL_TO_DTYPE.get(self)

    @property
    def is_concrete(self) -> bool:
        return self is not PixelType.UNKNOWN

    @classmethod
    def from_dtype(cls, dt) -> "PixelType":
        try:
            return _DTYPE_TO_PIXEL[np.dtype(dt)]
        except (KeyError, TypeError) as e:
            raise UnsupportedTypeError(f"dtype {dt} no soportado") from e


_PIXEL_TO_DTYPE = {
    PixelType.BYTE: np.dtype("uint8"),
    PixelType.UINT16: np.dtype("uint16"),
    PixelType.INT16: np.dtype("int16"),
    PixelType.UINT32: np.dtype("uint32"),
    PixelType.INT32: np.dtype("int32"),
    PixelType.FLOAT32: np.dtype("float32"),
    PixelType.FLOAT64: np.dtype("float64"),
}
_DTYPE_TO_PIXEL = {v: k for k, v in _PIXEL_TO_DTYPE.items()}


def resolve_pixel_type(code: int) -> PixelType:
    """Mapea el código de tipo que reporta el motor a PixelType.

    0 -> UNKNOWN (placeholder sin tipo), 1..7 -> tipo concreto.
    Cualquier otro código (Int8, UInt64, complejos, negativos) es error.
    """
    try:
        return PixelType(int(code))
    except ValueError as e:
        raise UnsupportedTypeError(f"Tipo de raster no soportado: código {code}") from e


__all__ = ["PixelType", "resolve_pixel_type"]
