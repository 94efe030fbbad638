"""
等时圈数据导出工具。
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, Optional

from openpyxl import Workbook

logger = logging.getLogger(__name__)

HEADERS = [
    "Travel mode",
    "Range",
    "Range units",
    "Area",
    "Area units",
    "Population",
    "Reach factor",
    "Latitude",
    "Longitude",
]

# Area values above this are assumed to be m² when the unit label is not trustworthy
AREA_M2_THRESHOLD = 100


def export_filename(area_label: str, now: Optional[datetime] = None, extension: str = "geojson") -> str:
    now = now or datetime.now()
    return f"reachability_{area_label}_{now:%Y-%m-%d}_{now:%H%M%S}.{extension}"


def export_geojson(collection: Dict[str, Any], area_label: str, now: Optional[datetime] = None) -> tuple[str, bytes]:
    """
    将等时圈 FeatureCollection 导出为 GeoJSON，返回 (文件名, 文件字节)。
    """
    filename = export_filename(area_label, now)
    content = json.dumps(collection, indent=2, ensure_ascii=False).encode("utf-8")
    logger.info("导出等时圈为 GeoJSON: %s (%d features)", filename, len(collection.get("features", [])))
    return filename, content


def _iter_rows(collection: Dict[str, Any]) -> Iterable[list]:
    for feature in collection.get("features", []):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") == "Point":
            continue
        props = feature.get("properties") or {}
        yield ["" if props.get(key) is None else props[key] for key in HEADERS]


def export_isolines_to_xlsx(collection: Dict[str, Any], area_label: str, now: Optional[datetime] = None) -> tuple[str, bytes]:
    """
    将等时圈属性导出为 xlsx，返回 (文件名, 文件字节)。
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Reachability"
    ws.append(HEADERS)

    for row in _iter_rows(collection):
        ws.append(row)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    filename = export_filename(area_label, now, extension="xlsx")
    logger.info("导出等时圈为 xlsx: %s", filename)
    return filename, buffer.getvalue()


def area_in_km2(value: Any, units: Optional[str]) -> float:
    """
    Best-effort area conversion for statistics display only.

    Time-based responses come back in m² while the label says km², so a
    value above AREA_M2_THRESHOLD is read as m² unless the label says m².
    """
    try:
        area = float(value)
    except (TypeError, ValueError):
        return 0.0
    if units in ("m^2", "m²"):
        return area / 1_000_000
    if area > AREA_M2_THRESHOLD:
        return area / 1_000_000
    return area


def summarize_isolines(collection: Dict[str, Any], result_count: int) -> Dict[str, Any]:
    total_area = 0.0
    polygons = 0
    for feature in collection.get("features", []):
        props = feature.get("properties") or {}
        if (feature.get("geometry") or {}).get("type") == "Point":
            continue
        polygons += 1
        if props.get("Area") is not None:
            total_area += area_in_km2(props["Area"], props.get("Area units"))
    return {
        "result_count": result_count,
        "polygon_count": polygons,
        "total_area_km2": round(total_area, 2),
    }
