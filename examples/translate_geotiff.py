# =============================
# FILE: examples/translate_geotiff.py
# =============================
"""
Uso mínimo: abrir una banda, revisar capacidades del driver y escribir o copiar.
Si el driver no soporta Create, cae a CreateCopy (translate).
"""
import sys

from rasterbridge.composition.di import build_service
from rasterbridge.contracts.errors import UnsupportedOperationError


if __name__ == "__main__":
    src, dst, driver = sys.argv[1], sys.argv[2], (sys.argv[3] if len(sys.argv) > 3 else "GTiff")
    svc = build_service()

    print("Drivers con Create/CreateCopy:")
    for d in svc.registry.descriptors():
        if d.writable:
            print(" -", d.name, "create" if d.create else "", "createcopy" if d.create_copy else "")

    with svc.open_raster(src) as r:
        print(f"{src}: {r.width}x{r.height} {r.pixel_type.name} bounds={r.bounds}")
        try:
            svc.write_raster(r, dst, driver)
        except UnsupportedOperationError:
            svc.copy_raster(r, dst, driver)
    print("OK ->", dst)
