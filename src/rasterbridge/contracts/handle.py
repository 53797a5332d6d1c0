# src/rasterbridge/contracts/handle.py
from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Optional

from .errors import HandleClosedError


class AccessMode(IntEnum):
    """Modo de apertura (GA_ReadOnly / GA_Update)."""
    READ_ONLY = 0
    UPDATE = 1


class RWFlag(IntEnum):
    """Dirección de la transferencia de pixeles (GF_Read / GF_Write)."""
    READ = 0
    WRITE = 1


class CPLErr(IntEnum):
    NONE = 0
    DEBUG = 1
    WARNING = 2
    FAILURE = 3
    FATAL = 4

    @classmethod
    def failed(cls, status: int) -> bool:
        return int(status) >= cls.FAILURE


class DatasetHandle:
    """Referencia propia a un dataset abierto en el motor.

    Se libera una sola vez: `close()` repetido no vuelve a llamar al motor.
    Usable como context manager para garantizar la liberación en toda salida.
    """

    def __init__(self, dataset: Any, release: Callable[[Any], None], name: str = ""):
        if dataset is None:
            raise ValueError("DatasetHandle requiere un dataset no nulo")
        self._dataset: Optional[Any] = dataset
        self._release = release
        self.name = name

    @property
    def closed(self) -> bool:
        return self._dataset is None

    def get(self) -> Any:
        if self._dataset is None:
            raise HandleClosedError(f"Dataset ya liberado: {self.name}", path=self.name or None)
        return self._dataset

    def close(self) -> None:
        ds, self._dataset = self._dataset, None
        if ds is not None:
            self._release(ds)

    def __enter__(self) -> "DatasetHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"DatasetHandle({self.name!r}, {state})"


__all__ = ["AccessMode", "RWFlag", "CPLErr", "DatasetHandle"]
