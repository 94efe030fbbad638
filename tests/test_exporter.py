import io
import json
import sys
from datetime import datetime
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

import pytest
from openpyxl import load_workbook

from utils.exporter import (
    HEADERS,
    area_in_km2,
    export_filename,
    export_geojson,
    export_isolines_to_xlsx,
    summarize_isolines,
)

NOW = datetime(2024, 5, 6, 7, 8, 9)


def _collection():
    polygon = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {
                    "Travel mode": "Cycling",
                    "Range": 10.0,
                    "Range units": "min",
                    "Latitude": 40.758,
                    "Longitude": -73.9855,
                    "Area": 2500000.0,
                    "Area units": "km^2",
                    "Population": 42000,
                    "Reach factor": 0.55,
                },
                "geometry": polygon,
            },
            {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [-73.9855, 40.758]}},
            {
                "type": "Feature",
                "properties": {
                    "Travel mode": "Driving",
                    "Range": 1.5,
                    "Range units": "km",
                    "Latitude": 40.7,
                    "Longitude": -74.0,
                    "Area": 1.25,
                    "Area units": "km^2",
                },
                "geometry": polygon,
            },
        ],
    }


def test_export_filename():
    assert export_filename("Manhattan", NOW) == "reachability_Manhattan_2024-05-06_070809.geojson"
    assert export_filename("Brooklyn", NOW, extension="xlsx") == "reachability_Brooklyn_2024-05-06_070809.xlsx"


def test_export_geojson():
    filename, content = export_geojson(_collection(), "Manhattan", NOW)
    assert filename == "reachability_Manhattan_2024-05-06_070809.geojson"
    assert json.loads(content) == _collection()
    assert content.startswith(b'{\n  "type"')


@pytest.mark.parametrize(
    "value, units, expected",
    [
        (1.25, "km^2", 1.25),
        (2500000, "km^2", 2.5),
        (50, "m^2", 0.00005),
        (None, "km^2", 0.0),
        ("n/a", None, 0.0),
    ],
)
def test_area_in_km2(value, units, expected):
    assert area_in_km2(value, units) == pytest.approx(expected)


def test_summarize_isolines():
    summary = summarize_isolines(_collection(), result_count=2)
    assert summary == {"result_count": 2, "polygon_count": 2, "total_area_km2": 3.75}


def test_summarize_empty():
    summary = summarize_isolines({"type": "FeatureCollection", "features": []}, result_count=0)
    assert summary == {"result_count": 0, "polygon_count": 0, "total_area_km2": 0}


def test_export_xlsx_skips_markers():
    filename, content = export_isolines_to_xlsx(_collection(), "Manhattan", NOW)
    assert filename == "reachability_Manhattan_2024-05-06_070809.xlsx"

    wb = load_workbook(io.BytesIO(content))
    ws = wb["Reachability"]
    rows = list(ws.iter_rows(values_only=True))
    assert list(rows[0]) == HEADERS
    assert len(rows) == 3
    assert rows[1][:3] == ("Cycling", 10, "min")
    assert rows[2][0] == "Driving"
    # missing population / reach factor are written as blanks
    assert rows[2][HEADERS.index("Population")] in (None, "")
