# tests/integration/adapters/test_gdal_engine.py
import numpy as np
import pytest
from pathlib import Path

gdal = pytest.importorskip("osgeo.gdal", reason="GDAL no instalado")
osr = pytest.importorskip("osgeo.osr")

from rasterbridge.adapters.gdal_engine import GdalEngine, engine_init
from rasterbridge.composition.di import build_service
from rasterbridge.config import Settings
from rasterbridge.contracts.errors import (
    OpenFailedError, ReadFailedError, UnsupportedOperationError,
)
from rasterbridge.contracts.handle import AccessMode, CPLErr, RWFlag
from rasterbridge.contracts.pixel import PixelType
from rasterbridge.services.driver_registry import DriverRegistry

pytestmark = [pytest.mark.gdal, pytest.mark.integration]

GT = (500000.0, 30.0, 0.0, 4100000.0, 0.0, -30.0)


def _wkt_32633() -> str:
    srs = osr.SpatialReference()
    srs.ImportFromEPSG(32633)
    return srs.ExportToWkt()


def _make_tif(path: Path, width=4, height=3, dtype=gdal.GDT_Byte, georef=True) -> np.ndarray:
    """GeoTIFF de 1 banda; devuelve el buffer nativo (filas, columnas) escrito."""
    native = (np.arange(width)[None, :] + 10 * np.arange(height)[:, None]).astype(np.uint8)
    drv = gdal.GetDriverByName("GTiff")
    ds = drv.Create(str(path), width, height, 1, dtype)
    if georef:
        ds.SetGeoTransform(GT)
        ds.SetProjection(_wkt_32633())
    ds.GetRasterBand(1).WriteArray(native)
    ds.FlushCache()
    ds = None
    return native


@pytest.fixture(scope="module")
def service():
    return build_service(Settings(), configure_logs=False)


@pytest.fixture
def tiny(tmp_path: Path) -> Path:
    p = tmp_path / "tiny.tif"
    _make_tif(p)
    return p


def _first_driver_without(registry: DriverRegistry, want_copy: bool):
    for name in registry.list_drivers():
        if not registry.check_create(name, want_copy=want_copy) and not registry.check_create(name):
            return name
    return None


def test_engine_init_is_idempotent():
    engine_init()
    n = gdal.GetDriverCount()
    engine_init({"GDAL_CACHEMAX": "64"})
    assert gdal.GetDriverCount() == n
    assert gdal.GetConfigOption("GDAL_CACHEMAX") == "64"


def test_open_4x3_byte(service, tiny: Path):
    with service.open_raster(str(tiny)) as r:
        assert (r.width, r.height) == (4, 3)
        assert r.pixel_type is PixelType.BYTE
        assert r.data.shape == (4, 3)
        assert r.data[3, 2] == 23
        assert r.geotransform == pytest.approx(GT)
        assert "32633" in r.spatial_reference
    assert r.closed


def test_open_without_georeference(service, tmp_path: Path):
    p = tmp_path / "plain.tif"
    _make_tif(p, georef=False)
    with service.open_raster(str(p)) as r:
        assert len(r.geotransform) == 6
        assert r.spatial_reference == ""


def test_open_missing_file(service, tmp_path: Path):
    with pytest.raises(OpenFailedError):
        service.open_raster(str(tmp_path / "nope.tif"))


def test_open_bad_band(service, tiny: Path):
    with pytest.raises(ReadFailedError):
        service.open_raster(str(tiny), band_index=5)


def test_roundtrip_gtiff(service, tiny: Path, tmp_path: Path):
    out = tmp_path / "rt.tif"
    with service.open_raster(str(tiny)) as src:
        src.data[0, 0] = 77
        service.write_raster(src, str(out), "GTiff", PixelType.BYTE)
        with service.open_raster(str(out), access=AccessMode.READ_ONLY) as back:
            np.testing.assert_array_equal(back.data, src.data)
            assert back.geotransform == pytest.approx(src.geotransform)
            assert back.same_spatial_reference(src.spatial_reference) or \
                osr.SpatialReference(wkt=back.spatial_reference).IsSame(
                    osr.SpatialReference(wkt=src.spatial_reference))


def test_roundtrip_float64(service, tmp_path: Path):
    p = tmp_path / "f.tif"
    _make_tif(p, width=5, height=2, dtype=gdal.GDT_Float64)
    out = tmp_path / "f2.tif"
    with service.open_raster(str(p)) as src:
        assert src.pixel_type is PixelType.FLOAT64
        src.data[4, 1] = 0.5
        service.write_raster(src, str(out), "GTiff")
        with service.open_raster(str(out)) as back:
            np.testing.assert_array_equal(back.data, src.data)


def test_write_png_is_unsupported_and_creates_nothing(service, tiny: Path, tmp_path: Path):
    if not service.registry.supports_driver("PNG"):
        pytest.skip("driver PNG no disponible")
    out = tmp_path / "x.png"
    with service.open_raster(str(tiny)) as r:
        with pytest.raises(UnsupportedOperationError):
            service.write_raster(r, str(out), "PNG")
    assert not out.exists()


def test_copy_to_png(service, tiny: Path, tmp_path: Path):
    if not service.registry.check_create("PNG", want_copy=True):
        pytest.skip("driver PNG sin CreateCopy")
    out = tmp_path / "x.png"
    with service.open_raster(str(tiny)) as r:
        service.copy_raster(r, str(out), "PNG")
        assert not r.closed
        with service.open_raster(str(out)) as back:
            np.testing.assert_array_equal(back.data, r.data)


def test_translate_to_readonly_driver(service, tiny: Path, tmp_path: Path):
    name = _first_driver_without(service.registry, want_copy=True)
    if name is None:
        pytest.skip("todos los drivers soportan Create/CreateCopy")
    out = tmp_path / "never.out"
    with pytest.raises(UnsupportedOperationError):
        service.translate(str(tiny), str(out), name)
    assert not out.exists()


def test_translate_gtiff(service, tiny: Path, tmp_path: Path):
    out = tmp_path / "t.tif"
    service.translate(str(tiny), str(out), "GTiff")
    with service.open_raster(str(out)) as back:
        assert back.data.shape == (4, 3)
        assert back.geotransform == pytest.approx(GT)


def test_registry_matches_gdal(service):
    reg = service.registry
    names = reg.list_drivers()
    assert "GTiff" in names
    assert reg.supports_driver("GTiff")
    assert reg.check_create("GTiff") and reg.check_create("GTiff", want_copy=True)
    assert reg.check_create("NoSuchDriver") is False
    assert len(names) == sum(1 for i in range(gdal.GetDriverCount()) if gdal.GetDriver(i) is not None)


def test_engine_status_contract(tmp_path: Path):
    engine_init()
    eng = GdalEngine()
    assert eng.open_dataset(str(tmp_path / "nope.tif"), AccessMode.READ_ONLY) is None
    drv = eng.driver_by_name("MEM")
    ds = eng.create(drv, "", 3, 2, 1, int(PixelType.INT16))
    assert ds is not None
    band = eng.get_band(ds, 1)
    assert eng.get_band(ds, 9) is None
    buf = np.arange(6, dtype=np.int16).reshape(2, 3)
    assert eng.raster_io(band, RWFlag.WRITE, buf) == CPLErr.NONE
    out = np.zeros((2, 3), dtype=np.int16)
    assert eng.raster_io(band, RWFlag.READ, out) == CPLErr.NONE
    np.testing.assert_array_equal(out, buf)
    assert eng.set_geotransform(ds, GT) == CPLErr.NONE
    assert eng.get_geotransform(ds) == pytest.approx(GT)
    eng.close(ds)
