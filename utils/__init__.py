"""
工具函数入口：统一对外暴露常用方法。
"""

from .exporter import (
    export_filename,
    export_geojson,
    export_isolines_to_xlsx,
    summarize_isolines,
)

__all__ = [
    "export_filename",
    "export_geojson",
    "export_isolines_to_xlsx",
    "summarize_isolines",
]
