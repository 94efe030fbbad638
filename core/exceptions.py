from typing import Any, Dict, Optional, Tuple

class BizError(Exception):
    """
    通用业务异常
    """
    def __init__(
        self,
        message: str,
        code: int = 400,
        payload: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.payload = payload or {}
        super().__init__(self.message)

class ExternalApiError(BizError):
    """
    第三方API调用失败 (如 openrouteservice)
    """
    def __init__(self, message: str, original_error: str = "", **payload: Any):
        super().__init__(
            message=message,
            code=502,
            payload={"original_error": str(original_error), **payload}
        )


class ReachabilityFailure(BizError):
    """
    等时圈请求失败的基类。
    events: 失败时需要通知宿主的事件名（不含 reachability: 前缀）
    """
    events: Tuple[str, ...] = ("error",)


class TransportFailure(ExternalApiError, ReachabilityFailure):
    """网络层异常（连接失败、超时等）"""
    events = ("error", "no_data")


class ServiceFailure(ExternalApiError, ReachabilityFailure):
    """服务返回非成功状态码或无法解析的响应"""
    events = ("error", "no_data")

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message, original_error=body, status_code=status_code)
        self.status_code = status_code


class EmptyResultFailure(ReachabilityFailure):
    """服务返回成功但没有任何几何要素"""
    events = ("no_data",)

    def __init__(self, message: str = "API returned data but no GeoJSON layers."):
        super().__init__(message, code=404)


class PreconditionFailure(ReachabilityFailure):
    """前置条件不满足（例如没有可删除的结果）"""
    events = ()

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=409, payload=payload)
