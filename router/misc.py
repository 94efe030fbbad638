from datetime import datetime
from fastapi import APIRouter

from core.config import settings
from modules.reachability import ReachabilityControl
from modules.reachability.adapter import is_real_api_key
from store import session_repo

router = APIRouter()


@router.get("/health", summary="健康检查")
async def health_check():
    """检查服务是否正常运行"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": ReachabilityControl.version,
        "isoline_backend": "live" if is_real_api_key(settings.ors_api_key) else "mock",
        "sessions": len(session_repo.list_ids()),
    }


@router.get("/", summary="根路径")
async def root():
    """返回欢迎信息"""
    return {
        "message": "Reachability API",
        "docs": "/docs",
        "health": "/health",
    }
