# src/rasterbridge/services/driver_registry.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from ..contracts.raster import DriverDescriptor
from ..ports.engine import RasterEnginePort

log = logging.getLogger(__name__)

DCAP_CREATE = "DCAP_CREATE"
DCAP_CREATECOPY = "DCAP_CREATECOPY"


@dataclass(frozen=True)
class DriverRegistry:
    """
    Consultas de drivers sobre el registro global del motor.
    Sin caché: el registro puede cambiar durante la vida del proceso.
    """
    engine: RasterEnginePort

    def list_drivers(self) -> List[str]:
        """Nombres cortos en el orden del motor (sin ordenar ni deduplicar)."""
        names: List[str] = []
        for i in range(self.engine.driver_count()):
            driver = self.engine.get_driver(i)
            if driver is not None:
                names.append(self.engine.driver_short_name(driver))
        return names

    def supports_driver(self, name: str) -> bool:
        return name in self.list_drivers()

    def check_create(self, name: str, want_copy: bool = False) -> bool:
        """True si el driver anuncia DCAP_CREATE (o DCAP_CREATECOPY con want_copy).

        Un driver desconocido devuelve False; nunca lanza.
        """
        key = DCAP_CREATECOPY if want_copy else DCAP_CREATE
        driver = self.engine.driver_by_name(name)
        if driver is None:
            log.debug(f"Driver {name!r} no registrado; {key} = False")
            return False
        ok = self.engine.metadata_item(driver, key, "") is not None
        log.debug(f"Driver {name!r}: {key} = {ok}")
        return ok

    def describe(self, name: str) -> DriverDescriptor:
        return DriverDescriptor(
            name=name,
            create=self.check_create(name, want_copy=False),
            create_copy=self.check_create(name, want_copy=True),
        )

    def descriptors(self) -> List[DriverDescriptor]:
        return [self.describe(n) for n in self.list_drivers()]


__all__ = ["DriverRegistry", "DCAP_CREATE", "DCAP_CREATECOPY"]
