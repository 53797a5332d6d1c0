# src/rasterbridge/ports/engine.py
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from ..contracts.handle import AccessMode, RWFlag
from ..contracts.raster import GeoTransform

URI = str
Dataset = Any   # handle opaco del motor
Band = Any
Driver = Any

@runtime_checkable
class RasterEnginePort(Protocol):
    """
    Motor raster externo (GDAL). Contrato "nulo/estado":
      - las aperturas/creaciones devuelven None si fallan,
      - las escrituras devuelven un código CPLErr (>= FAILURE es error).
    Ningún método debe lanzar por fallas del motor; los services deciden.
    """
    # datasets
    def open_dataset(self, path: URI, access: AccessMode) -> Optional[Dataset]: ...
    def get_band(self, dataset: Dataset, index: int) -> Optional[Band]: ...
    def raster_size(self, dataset: Dataset) -> tuple[int, int]: ...  # (width, height)
    def band_data_type(self, band: Band) -> int: ...
    def raster_io(self, band: Band, rw_flag: RWFlag, buffer: np.ndarray) -> int: ...
    def get_geotransform(self, dataset: Dataset) -> GeoTransform: ...
    def set_geotransform(self, dataset: Dataset, gt: GeoTransform) -> int: ...
    def get_projection(self, dataset: Dataset) -> str: ...
    def set_projection(self, dataset: Dataset, wkt: str) -> int: ...
    def close(self, dataset: Dataset) -> None: ...

    # drivers
    def driver_count(self) -> int: ...
    def get_driver(self, index: int) -> Optional[Driver]: ...
    def driver_by_name(self, name: str) -> Optional[Driver]: ...
    def driver_short_name(self, driver: Driver) -> str: ...
    def metadata_item(self, driver: Driver, key: str, domain: str = "") -> Optional[str]: ...
    def create(self, driver: Driver, path: URI, width: int, height: int, bands: int,
               pixel_type: int, options: Sequence[str] = ()) -> Optional[Dataset]: ...
    def create_copy(self, driver: Driver, path: URI, source: Dataset, strict: bool = False,
                    options: Sequence[str] = ()) -> Optional[Dataset]: ...

    # diagnóstico
    def last_error_message(self) -> str: ...

__all__ = ["RasterEnginePort", "URI", "Dataset", "Band", "Driver"]
