from __future__ import annotations
from pathlib import Path
from typing import Optional

import yaml

from ..adapters.gdal_engine import GdalEngine, engine_init
from ..config import Settings, get_settings
from ..logging_config import configure_logging, get_logger
from ..services.driver_registry import DriverRegistry
from ..services.raster_service import RasterIOService

log = get_logger(__name__)

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return Settings(**data)

def build_service(settings: Optional[Settings] = None, *, configure_logs: bool = True) -> RasterIOService:
    """Raíz de composición: logging + init de GDAL + wiring del servicio."""
    st = settings or get_settings()
    if configure_logs:
        configure_logging(level=st.log_level, json_logs=st.json_logs, log_file=st.log_file)
    engine_init(st.gdal_config)
    engine = GdalEngine()
    service = RasterIOService(engine=engine, registry=DriverRegistry(engine), settings=st)
    log.debug(f"RasterIOService listo (driver por defecto {st.default_driver})")
    return service

def build_service_from_yaml(path: Path) -> RasterIOService:
    return build_service(load_settings_from_yaml(path))
