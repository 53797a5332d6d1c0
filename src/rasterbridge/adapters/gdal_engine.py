# src/rasterbridge/adapters/gdal_engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

try:  # GDAL path
    from osgeo import gdal  # type: ignore
    _HAS_GDAL = True
except Exception:  # pragma: no cover
    _HAS_GDAL = False

from ..contracts.handle import AccessMode, CPLErr, RWFlag
from ..contracts.raster import GeoTransform
from ..ports.engine import RasterEnginePort

log = logging.getLogger(__name__)

_INITIALIZED = False


def _require_gdal() -> None:
    if not _HAS_GDAL:
        raise RuntimeError("GDAL no disponible (instala el paquete GDAL / osgeo)")


def engine_init(config_options: Optional[Mapping[str, str]] = None) -> None:
    """
    Inicialización única de GDAL: modo excepciones + registro de drivers.
    Idempotente; la llama la raíz de composición, nunca los services.
    Las opciones de configuración se aplican en cada llamada.
    """
    global _INITIALIZED
    _require_gdal()
    if not _INITIALIZED:
        gdal.UseExceptions()
        gdal.AllRegister()
        _INITIALIZED = True
        log.debug(f"GDAL {gdal.__version__} inicializado ({gdal.GetDriverCount()} drivers)")
    for key, value in (config_options or {}).items():
        gdal.SetConfigOption(str(key), str(value))


def _guarded(fn: Callable[..., Any], *args, default: Any = None, **kwargs) -> Any:
    """Ejecuta una llamada GDAL devolviendo `default` si GDAL lanza (modo excepciones)."""
    try:
        return fn(*args, **kwargs)
    except RuntimeError as e:
        log.debug(f"GDAL error en {getattr(fn, '__name__', fn)}: {e}")
        return default


@dataclass(frozen=True)
class GdalEngine(RasterEnginePort):
    """Adapter del motor raster sobre `osgeo.gdal`.

    Traduce las excepciones de GDAL al contrato nulo/estado del puerto, de modo
    que los services ven lo mismo con `UseExceptions()` o sin él.
    """

    def __post_init__(self):
        _require_gdal()

    # --------------- datasets ---------------
    def open_dataset(self, path: str, access: AccessMode) -> Optional[Any]:
        return _guarded(gdal.Open, str(path), int(access))

    def get_band(self, dataset: Any, index: int) -> Optional[Any]:
        return _guarded(dataset.GetRasterBand, int(index))

    def raster_size(self, dataset: Any) -> tuple[int, int]:
        return int(dataset.RasterXSize), int(dataset.RasterYSize)

    def band_data_type(self, band: Any) -> int:
        return int(band.DataType)

    def raster_io(self, band: Any, rw_flag: RWFlag, buffer: np.ndarray) -> int:
        # ventana completa; buffer del mismo tamaño que la ventana (sin decimación)
        ysize, xsize = buffer.shape
        if rw_flag == RWFlag.READ:
            out = _guarded(band.ReadAsArray, 0, 0, xsize, ysize, xsize, ysize, buf_obj=buffer)
            return int(CPLErr.NONE) if out is not None else int(CPLErr.FAILURE)
        status = _guarded(band.WriteArray, buffer, 0, 0, default=CPLErr.FAILURE)
        return int(status if status is not None else CPLErr.NONE)

    def get_geotransform(self, dataset: Any) -> GeoTransform:
        gt = dataset.GetGeoTransform()
        return (float(gt[0]), float(gt[1]), float(gt[2]), float(gt[3]), float(gt[4]), float(gt[5]))

    def set_geotransform(self, dataset: Any, gt: GeoTransform) -> int:
        return int(_guarded(dataset.SetGeoTransform, [float(v) for v in gt], default=CPLErr.FAILURE))

    def get_projection(self, dataset: Any) -> str:
        return dataset.GetProjectionRef() or ""

    def set_projection(self, dataset: Any, wkt: str) -> int:
        return int(_guarded(dataset.SetProjection, wkt or "", default=CPLErr.FAILURE))

    def close(self, dataset: Any) -> None:
        dataset.FlushCache()
        close = getattr(dataset, "Close", None)  # GDAL >= 3.8
        if close is not None:
            close()

    # --------------- drivers ---------------
    def driver_count(self) -> int:
        return int(gdal.GetDriverCount())

    def get_driver(self, index: int) -> Optional[Any]:
        return _guarded(gdal.GetDriver, int(index))

    def driver_by_name(self, name: str) -> Optional[Any]:
        return _guarded(gdal.GetDriverByName, str(name))

    def driver_short_name(self, driver: Any) -> str:
        return str(driver.ShortName)

    def metadata_item(self, driver: Any, key: str, domain: str = "") -> Optional[str]:
        if driver is None:
            return None
        return _guarded(driver.GetMetadataItem, key, domain)

    def create(self, driver: Any, path: str, width: int, height: int, bands: int,
               pixel_type: int, options: Sequence[str] = ()) -> Optional[Any]:
        return _guarded(driver.Create, str(path), int(width), int(height), int(bands),
                        int(pixel_type), options=list(options))

    def create_copy(self, driver: Any, path: str, source: Any, strict: bool = False,
                    options: Sequence[str] = ()) -> Optional[Any]:
        return _guarded(driver.CreateCopy, str(path), source, strict=1 if strict else 0,
                        options=list(options))

    # --------------- diagnóstico ---------------
    def last_error_message(self) -> str:
        return gdal.GetLastErrorMsg() or ""


__all__ = ["GdalEngine", "engine_init"]
