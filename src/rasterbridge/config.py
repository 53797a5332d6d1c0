# src/rasterbridge/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Dict, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")

class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco ni inicializa GDAL.
    La construye composition/di.py (o los tests) y se inyecta a los services.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RASTERBRIDGE_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    # --- drivers / escritura ---
    default_driver: str = "GTiff"
    creation_options: Annotated[Tuple[str, ...], NoDecode] = ()   # p.ej. ("COMPRESS=DEFLATE", "TILED=YES")
    strict_copy: bool = False

    # --- motor ---
    gdal_config: Dict[str, str] = Field(default_factory=dict)  # GDAL_CACHEMAX, CPL_DEBUG, ...

    # --- logging ---
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Optional[Path] = None

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("default_driver", mode="before")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v2 = str(v).strip()
        if not v2:
            raise ValueError("default_driver no puede ser vacío")
        return v2

    @field_validator("creation_options", mode="before")
    @classmethod
    def _split_options(cls, v):
        # desde env llega como "COMPRESS=DEFLATE,TILED=YES"
        if isinstance(v, str):
            v = [p for p in v.split(",") if p.strip()]
        return v

    @field_validator("creation_options")
    @classmethod
    def _key_value(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        out = []
        for opt in v:
            k, sep, _ = opt.strip().partition("=")
            if not sep or not k.strip():
                raise ValueError(f"creation_options inválida (se espera KEY=VALUE): {opt!r}")
            out.append(opt.strip())
        return tuple(out)

    @field_validator("log_level", mode="before")
    @classmethod
    def _level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in _LOG_LEVELS:
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("log_file", mode="after")
    @classmethod
    def _abs_log_file(cls, p: Optional[Path]) -> Optional[Path]:
        return None if p is None else p.expanduser().resolve()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada (lee entorno y .env). Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
