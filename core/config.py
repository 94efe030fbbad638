"""
配置管理模块
使用Pydantic Settings从环境变量加载配置
"""

from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    应用配置类
    从环境变量加载配置，支持类型转换和验证
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 未声明的 env 变量忽略，不抛出校验错误
    )

    # 应用配置
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # API密钥配置（访问本服务的鉴权）
    api_keys: List[str] = ["dev-only-key-change-in-production"]

    # CORS跨域配置
    cors_origins: List[str] = ["*"]

    # openrouteservice 等时圈服务
    ors_api_key: str = Field(
        "",
        validation_alias="ORS_API_KEY",
        description="openrouteservice key, empty or placeholder selects the offline approximation",
    )
    ors_base_url: str = Field(
        "https://api.openrouteservice.org/v2/isochrones",
        validation_alias="ORS_BASE_URL",
        description="Isochrone endpoint, the travel profile is appended",
    )
    ors_timeout_s: int = Field(60, validation_alias="ORS_TIMEOUT_S")

    isoline_smoothing: float = Field(5, validation_alias="ISOLINE_SMOOTHING")
    isoline_attributes: List[str] = Field(
        ["area", "reachfactor", "total_pop"],
        validation_alias="ISOLINE_ATTRIBUTES",
    )

    # 范围（距离 / 时间）
    range_type_default: Literal["time", "distance"] = "time"
    range_distance_interval: float = 0.5
    range_distance_max: float = 3
    range_distance_units: str = "km"
    range_distance_default: float = 1
    range_time_interval: int = 5
    range_time_max: int = 30
    range_time_default: int = 10

    # 出行方式
    travel_mode_profile_1: Optional[str] = "driving-car"
    travel_mode_profile_2: Optional[str] = "cycling-regular"
    travel_mode_profile_3: Optional[str] = "foot-walking"
    travel_mode_profile_4: Optional[str] = "wheelchair"
    travel_mode_default: str = "driving-car"

    # 控件行为
    control_collapsed: bool = Field(True, validation_alias="CONTROL_COLLAPSED")
    show_origin_marker: bool = Field(True, validation_alias="SHOW_ORIGIN_MARKER")
    error_indicator_s: float = Field(
        0.5,
        validation_alias="ERROR_INDICATOR_S",
        description="How long the error indicator stays on a control button",
    )
    export_area_label: str = Field("Manhattan", validation_alias="EXPORT_AREA_LABEL")


settings = Settings()
