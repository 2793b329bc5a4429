"""Shared pytest fixtures for the cable ingestion test suite."""

from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


# ---------------------------------------------------------------------------
# Sample KML fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def routes_kml(data_dir: Path) -> Path:
    """Namespaced survey export: styled routes, a marker and skip cases."""
    return data_dir / "01_cable_routes_styled.kml"


@pytest.fixture()
def polygons_kml(data_dir: Path) -> Path:
    """Namespace-free KML with a holed polygon, a MultiGeometry and a bad ring."""
    return data_dir / "02_work_areas_polygons.kml"


@pytest.fixture()
def malformed_kml(data_dir: Path) -> Path:
    """KML with unclosed tags."""
    return data_dir / "03_malformed_unclosed_tags.kml"


@pytest.fixture()
def routes_text(routes_kml: Path) -> str:
    return routes_kml.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Sample BOQ rows
# ---------------------------------------------------------------------------


@pytest.fixture()
def indonesian_boq_rows() -> list[list[object]]:
    """BOQ sheet with a title block, Indonesian headers and explicit totals."""
    return [
        ["Proyek", "Jaringan FO Bekasi", None],
        [],
        ["No", "Uraian", "Satuan", "Volume", "Harga Satuan", "Jumlah Harga"],
        [1, "Kabel FO 48 core", "m", 1000, "Rp 25.000", "Rp 25.000.000"],
        [2, "Upah pekerja galian", "m", 1000, "Rp 15.000", "Rp 15.000.000"],
        [None, None, None, None, None, None],
        [3, "Bahan pipa HDPE", "m", "500", "Rp 12.500", "Rp 6.250.000"],
    ]


@pytest.fixture()
def english_boq_rows() -> list[list[object]]:
    """BOQ sheet with English headers and no total column."""
    return [
        ["No", "Description", "Unit", "Qty", "Unit Price", "Category"],
        [1, "Fiber optic cable 24 core", "m", 250, 12.5, "Cable"],
        [2, "Splice closure", "unit", 4, 350.0, "Accessory"],
        [3, "Labor trenching", "m", 250, 8.0, None],
    ]
