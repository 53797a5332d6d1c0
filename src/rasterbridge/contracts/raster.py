# src/rasterbridge/contracts/raster.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, NamedTuple, Tuple

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, field_validator

from .handle import DatasetHandle
from .pixel import PixelType

GeoTransform = Tuple[float, float, float, float, float, float]

# GDAL devuelve esta geotransformación cuando el dataset no tiene una explícita
DEFAULT_GEOTRANSFORM: GeoTransform = (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

# ---------- Raster (dataset abierto + grilla en memoria) ----------
@dataclass(frozen=True, eq=False)
class Raster:
    """
    Dataset abierto + copia en memoria de una banda.

    Convención de orientación: `data` tiene forma (width, height) y se indexa
    `data[x, y]` (columna, fila). Es la traspuesta del buffer nativo de GDAL
    (filas, columnas); la escritura aplica la traspuesta inversa.

    `data` es una copia independiente: cerrar el handle no la invalida y
    modificarla no toca el dataset.
    """
    handle: DatasetHandle
    width: int
    height: int
    geotransform: GeoTransform
    spatial_reference: str
    data: "npt.NDArray[Any]"  # type: ignore[valid-type]
    pixel_type: PixelType

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Dimensiones inválidas: {self.width}x{self.height}")
        if len(self.geotransform) != 6:
            raise ValueError("geotransform debe tener 6 coeficientes")
        if self.data.shape != (self.width, self.height):
            raise ValueError(
                f"data.shape={self.data.shape} no coincide con (width, height)=({self.width}, {self.height})"
            )
        if not self.pixel_type.is_concrete:
            raise ValueError("Raster requiere un PixelType concreto (no UNKNOWN)")
        if self.data.dtype != self.pixel_type.dtype:
            raise ValueError(f"dtype no coincide: {self.data.dtype} vs {self.pixel_type.dtype}")

    # --- ciclo de vida ---
    @property
    def closed(self) -> bool:
        return self.handle.closed

    def close(self) -> None:
        self.handle.close()

    def __enter__(self) -> "Raster":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- geometría ---
    @property
    def shape(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def bounds(self) -> Bounds:
        return geotransform_bounds(self.geotransform, self.width, self.height)

    def pixel_size(self) -> Tuple[float, float]:
        _, px, _, _, _, py = self.geotransform
        return (px, py)

    def pixel_to_world(self, x: float, y: float) -> Tuple[float, float]:
        return pixel_to_world(x, y, self.geotransform)

    def world_to_pixel(self, wx: float, wy: float) -> Tuple[float, float]:
        return world_to_pixel(wx, wy, self.geotransform)

    def same_spatial_reference(self, wkt: str) -> bool:
        return normalize_wkt(self.spatial_reference) == normalize_wkt(wkt)

# ---------- Drivers ----------
class DriverDescriptor(BaseModel):
    """Capacidades de un driver, calculadas al vuelo desde su metadata."""
    model_config = ConfigDict(frozen=True)
    name: str
    create: bool = False
    create_copy: bool = False

    @field_validator("name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name no puede ser vacío")
        return v2

    @property
    def writable(self) -> bool:
        return self.create or self.create_copy

# ---------- GeoTransform helpers ----------
def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

def pixel_to_world(col: float, row: float, gt: GeoTransform) -> Tuple[float, float]:
    x0, px, rx, y0, ry, py = gt
    x = x0 + col * px + row * rx
    y = y0 + col * ry + row * py
    return x, y

def world_to_pixel(x: float, y: float, gt: GeoTransform) -> Tuple[float, float]:
    x0, px, rx, y0, ry, py = gt
    det = px * py - rx * ry
    if abs(det) < 1e-18:
        raise ValueError("GeoTransform no invertible (det≈0).")
    inv00 =  py / det; inv01 = -rx / det
    inv10 = -ry / det; inv11 =  px / det
    dx = x - x0; dy = y - y0
    col = inv00 * dx + inv01 * dy
    row = inv10 * dx + inv11 * dy
    return col, row

def normalize_wkt(wkt: str) -> str:
    """
    Normalización determinista para comparar WKT sin GDAL:
    strip, upper, colapsa espacios y elimina espacios junto a comas y corchetes.
    No reordena nodos.
    """
    s = " ".join((wkt or "").strip().upper().split())
    s = s.replace(" ,", ",").replace(", ", ",")
    s = s.replace("[ ", "[").replace(" ]", "]")
    return s

def to_engine_grid(data: np.ndarray) -> np.ndarray:
    """(width, height) -> buffer nativo del motor (height, width), contiguo."""
    return np.ascontiguousarray(data.T)

def from_engine_grid(buffer: np.ndarray) -> np.ndarray:
    """Buffer nativo (height, width) -> grilla expuesta (width, height), copia propia."""
    return np.ascontiguousarray(buffer.T)

__all__ = [
    "GeoTransform", "DEFAULT_GEOTRANSFORM", "Bounds", "Raster", "DriverDescriptor",
    "geotransform_bounds", "pixel_to_world", "world_to_pixel", "normalize_wkt",
    "to_engine_grid", "from_engine_grid",
]
