# src/rasterbridge/services/raster_service.py
from __future__ import annotations

"""
Servicio de E/S raster sobre un RasterEnginePort.

Casos cubiertos:
  • open_raster: abre un dataset, lee una banda completa y devuelve un Raster
  • write_raster: crea un dataset de 1 banda (requiere DCAP_CREATE)
  • copy_raster: clona el dataset fuente con CreateCopy (requiere DCAP_CREATECOPY)
  • translate: open_raster + copy_raster, liberando la fuente al terminar

Reglas de recursos:
  - Todo handle adquirido aquí (open, create, create_copy) se libera una sola
    vez en toda salida, incluidas las fallas.
  - El handle del Raster que recibe write/copy es prestado: nunca se cierra.
  - Un destino a medio escribir no se borra del disco.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..config import Settings, get_settings
from ..contracts.errors import (
    CreateFailedError, DriverNotFoundError, OpenFailedError, ReadFailedError,
    SetProjectionFailedError, SetTransformFailedError, UnsupportedOperationError,
    UnsupportedTypeError, WriteFailedError,
)
from ..contracts.handle import AccessMode, CPLErr, DatasetHandle, RWFlag
from ..contracts.pixel import PixelType, resolve_pixel_type
from ..contracts.raster import Raster, from_engine_grid, to_engine_grid
from ..ports.engine import RasterEnginePort
from .driver_registry import DriverRegistry

log = logging.getLogger(__name__)


@dataclass
class RasterIOService:
    engine: RasterEnginePort
    registry: Optional[DriverRegistry] = None
    settings: Settings = field(default_factory=get_settings)

    def __post_init__(self):
        if self.registry is None:
            self.registry = DriverRegistry(self.engine)

    # ---------- Helpers ----------
    def _engine_msg(self) -> str:
        msg = self.engine.last_error_message()
        return f": {msg}" if msg else ""

    def _acquire(self, dataset, name: str) -> DatasetHandle:
        return DatasetHandle(dataset, self.engine.close, name=name)

    def _resolve_driver(self, driver_name: Optional[str]) -> str:
        return driver_name or self.settings.default_driver

    def _require_capability(self, driver_name: str, want_copy: bool) -> None:
        """Precondiciones comunes de write/copy; no toca el destino."""
        if not self.registry.supports_driver(driver_name):
            log.error(f"Driver no presente: {driver_name}")
            raise DriverNotFoundError(f"Driver solicitado no presente: {driver_name}", driver=driver_name)
        if not self.registry.check_create(driver_name, want_copy=want_copy):
            if want_copy:
                msg = f"El driver {driver_name} no soporta CreateCopy."
            else:
                msg = f"El driver {driver_name} no soporta Create. Prueba con copy_raster."
            log.error(msg)
            raise UnsupportedOperationError(msg, driver=driver_name)

    # ---------- Lectura ----------
    def open_raster(self, path: str, band_index: int = 1,
                    access: AccessMode = AccessMode.READ_ONLY) -> Raster:
        """
        Abre `path`, lee la banda `band_index` (1-based) completa y devuelve un Raster
        dueño del handle. Si algo falla después de abrir, el handle se libera antes
        de propagar el error.
        """
        path = str(path)
        dataset = self.engine.open_dataset(path, AccessMode(access))
        if dataset is None:
            log.error(f"No se pudo abrir {path}")
            raise OpenFailedError(f"No se pudo abrir el dataset {path}{self._engine_msg()}", path=path)

        handle = self._acquire(dataset, path)
        try:
            band = self.engine.get_band(dataset, band_index)
            if band is None:
                raise ReadFailedError(f"Banda {band_index} inexistente en {path}{self._engine_msg()}", path=path)
            width, height = self.engine.raster_size(dataset)

            pixel_type = resolve_pixel_type(self.engine.band_data_type(band))
            if not pixel_type.is_concrete:
                raise UnsupportedTypeError(f"Banda {band_index} de {path} sin tipo de pixel definido", path=path)

            # buffer nativo del motor: (filas, columnas)
            buffer = np.zeros((height, width), dtype=pixel_type.dtype)
            status = self.engine.raster_io(band, RWFlag.READ, buffer)
            if CPLErr.failed(status):
                raise ReadFailedError(f"Falló la lectura de la banda {band_index} de {path}{self._engine_msg()}", path=path)

            gt = self.engine.get_geotransform(dataset)
            wkt = self.engine.get_projection(dataset)
            raster = Raster(
                handle=handle,
                width=width,
                height=height,
                geotransform=gt,
                spatial_reference=wkt,
                data=from_engine_grid(buffer),
                pixel_type=pixel_type,
            )
        except BaseException:
            handle.close()
            raise

        log.info(f"Raster abierto {path}: {width}x{height} {pixel_type.name} (banda {band_index})")
        return raster

    # ---------- Escritura ----------
    def write_raster(self, raster: Raster, destination: str, driver_name: Optional[str] = None,
                     pixel_type: Optional[PixelType | int] = None) -> None:
        """
        Crea `destination` con 1 banda y escribe geotransform, SRS y pixeles.
        `pixel_type` se declara tal cual (sin coerción); por defecto el del raster.
        """
        destination = str(destination)
        driver_name = self._resolve_driver(driver_name)
        self._require_capability(driver_name, want_copy=False)
        ptype = raster.pixel_type if pixel_type is None else resolve_pixel_type(pixel_type)

        driver = self.engine.driver_by_name(driver_name)
        dst = self.engine.create(
            driver, destination, raster.width, raster.height, 1, int(ptype),
            self.settings.creation_options,
        )
        if dst is None:
            log.error(f"No se pudo crear {destination} con {driver_name}")
            raise CreateFailedError(
                f"No se pudo crear el dataset {destination}{self._engine_msg()}",
                path=destination, driver=driver_name,
            )

        with self._acquire(dst, destination):
            if CPLErr.failed(self.engine.set_geotransform(dst, raster.geotransform)):
                raise SetTransformFailedError(
                    f"No se pudo fijar la geotransformación de {destination}{self._engine_msg()}",
                    path=destination, driver=driver_name,
                )
            if CPLErr.failed(self.engine.set_projection(dst, raster.spatial_reference)):
                raise SetProjectionFailedError(
                    f"No se pudo fijar la proyección de {destination}{self._engine_msg()}",
                    path=destination, driver=driver_name,
                )
            band = self.engine.get_band(dst, 1)
            status = CPLErr.FAILURE if band is None else self.engine.raster_io(
                band, RWFlag.WRITE, to_engine_grid(raster.data)
            )
            if CPLErr.failed(status):
                raise WriteFailedError(
                    f"Falló la escritura de la banda 1 de {destination}{self._engine_msg()}",
                    path=destination, driver=driver_name,
                )
        log.info(f"Raster escrito {destination} ({driver_name}, {ptype.name}, {raster.width}x{raster.height})")

    # ---------- Copia ----------
    def copy_raster(self, raster: Raster, destination: str, driver_name: Optional[str] = None) -> None:
        """CreateCopy desde el dataset abierto del raster; el motor clona metadata y pixeles."""
        destination = str(destination)
        driver_name = self._resolve_driver(driver_name)
        self._require_capability(driver_name, want_copy=True)

        source = raster.handle.get()
        driver = self.engine.driver_by_name(driver_name)
        dst = self.engine.create_copy(
            driver, destination, source, self.settings.strict_copy, self.settings.creation_options,
        )
        if dst is None:
            log.error(f"CreateCopy falló hacia {destination} con {driver_name}")
            raise CreateFailedError(
                f"No se pudo copiar a {destination}{self._engine_msg()}",
                path=destination, driver=driver_name,
            )
        self._acquire(dst, destination).close()
        log.info(f"Raster copiado {raster.handle.name} → {destination} ({driver_name})")

    def translate(self, source: str, destination: str, driver_name: Optional[str] = None) -> None:
        with self.open_raster(source, 1, AccessMode.READ_ONLY) as raster:
            self.copy_raster(raster, destination, driver_name)


__all__ = ["RasterIOService"]
