import os
import pytest
from rasterbridge.config import Settings, get_settings
from tests.factories import FakeEngine

def pytest_configure():
    os.environ.setdefault("RASTERBRIDGE_DEFAULT_DRIVER", "GTiff")

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def engine():
    return FakeEngine()

@pytest.fixture
def settings():
    return Settings(default_driver="GTiff", creation_options=("COMPRESS=DEFLATE",))

@pytest.fixture
def service(engine, settings):
    from rasterbridge.services.raster_service import RasterIOService
    return RasterIOService(engine=engine, settings=settings)

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.keywords and os.environ.get("CI") == "true":
            item.add_marker(pytest.mark.slow)
