import logging
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.responses import StreamingResponse

from core.exceptions import PreconditionFailure
from modules.reachability import events as ev
from modules.reachability.schemas import (
    ClickResponse,
    ControlState,
    EventRecord,
    FeatureClickRequest,
    FeatureClickResponse,
    IntervalsRequest,
    LatLng,
    RangeTypeRequest,
    RangeValueRequest,
    ReachabilityOptions,
    SessionCreateRequest,
    TravelModeRequest,
)
from store import ReachabilitySession, session_repo
from utils import export_isolines_to_xlsx, summarize_isolines

from .utils.deps import load_session, verify_api_key

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/reachability",
    tags=["Reachability"],
    dependencies=[Security(verify_api_key)],
)


def _state(session: ReachabilitySession) -> ControlState:
    snapshot = session.control.snapshot()
    snapshot.session_id = session.session_id
    return snapshot


@router.post("/sessions", response_model=ControlState, summary="创建地图会话")
async def create_session(payload: SessionCreateRequest | None = None):
    overrides = payload.model_dump(exclude_none=True) if payload else {}
    try:
        options = ReachabilityOptions.from_settings(**overrides)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    session = session_repo.create(options)
    return _state(session)


@router.get("/sessions/{session_id}", response_model=ControlState, summary="读取控件状态")
async def get_session(session: ReachabilitySession = Depends(load_session)):
    return _state(session)


@router.delete("/sessions/{session_id}", summary="关闭地图会话")
async def delete_session(session_id: str):
    if not session_repo.remove(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="会话不存在或已关闭")
    return {"status": "ok"}


# ==================== 模式切换 ====================

@router.post("/sessions/{session_id}/draw", response_model=ControlState, summary="切换绘制模式")
async def toggle_draw(session: ReachabilitySession = Depends(load_session)):
    session.control.toggle_draw()
    return _state(session)


@router.post("/sessions/{session_id}/delete", response_model=ControlState, summary="切换删除模式")
async def toggle_delete(session: ReachabilitySession = Depends(load_session)):
    session.control.toggle_delete()
    return _state(session)


@router.post("/sessions/{session_id}/expand", response_model=ControlState, summary="展开控件")
async def expand(session: ReachabilitySession = Depends(load_session)):
    session.control.expand()
    return _state(session)


@router.post("/sessions/{session_id}/collapse", response_model=ControlState, summary="收起控件")
async def collapse(session: ReachabilitySession = Depends(load_session)):
    session.control.collapse()
    return _state(session)


# ==================== 参数选择 ====================

@router.put("/sessions/{session_id}/range-type", response_model=ControlState, summary="选择范围类型")
async def set_range_type(payload: RangeTypeRequest, session: ReachabilitySession = Depends(load_session)):
    session.control.set_range_type(payload.range_type)
    return _state(session)


@router.put("/sessions/{session_id}/range", response_model=ControlState, summary="选择范围值")
async def select_range(payload: RangeValueRequest, session: ReachabilitySession = Depends(load_session)):
    # Values outside the active bucket list are ignored
    session.control.select_range(payload.value)
    return _state(session)


@router.put("/sessions/{session_id}/intervals", response_model=ControlState, summary="显示分段")
async def toggle_intervals(payload: IntervalsRequest, session: ReachabilitySession = Depends(load_session)):
    session.control.toggle_intervals(payload.show_intervals)
    return _state(session)


@router.put("/sessions/{session_id}/travel-mode", response_model=ControlState, summary="选择出行方式")
async def set_travel_mode(payload: TravelModeRequest, session: ReachabilitySession = Depends(load_session)):
    if payload.profile is not None:
        accepted = session.control.set_travel_mode(payload.profile)
    elif payload.slot is not None:
        accepted = session.control.select_travel_mode_slot(payload.slot)
    else:
        accepted = False
    if not accepted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="出行方式不可用")
    return _state(session)


# ==================== 绘制与删除 ====================

@router.post(
    "/sessions/{session_id}/click",
    response_model=ClickResponse,
    summary="地图点击",
    description="绘制模式下提交等时圈请求；其他模式下忽略。",
)
async def map_click(point: LatLng, session: ReachabilitySession = Depends(load_session)):
    with session.capture() as fired:
        result = await session.control.click(point.lat, point.lng)
    names = [event.name for event in fired]

    if result is not None:
        return ClickResponse(
            status="displayed",
            result=result.to_geojson(),
            result_id=result.result_id,
            events=names,
        )
    message = next((e.payload.get("message") for e in fired if e.name in (ev.ERROR, ev.NO_DATA)), None)
    if ev.ERROR in names:
        outcome = "error"
    elif ev.NO_DATA in names:
        outcome = "no_data"
    else:
        outcome = "ignored"
    return ClickResponse(status=outcome, events=names, message=message)


@router.post(
    "/sessions/{session_id}/results/{result_id}/click",
    response_model=FeatureClickResponse,
    summary="点击等时圈或起点标记",
)
async def click_result(
    result_id: str,
    payload: FeatureClickRequest | None = None,
    session: ReachabilitySession = Depends(load_session),
):
    target = payload.target if payload else "feature"
    with session.capture() as fired:
        deleted = session.control.click_result(result_id, target)
    return FeatureClickResponse(
        deleted=deleted,
        events=[event.name for event in fired],
        result_count=len(session.control.layers),
    )


@router.delete("/sessions/{session_id}/results", response_model=ControlState, summary="删除全部等时圈")
async def clear_results(session: ReachabilitySession = Depends(load_session)):
    session.control.clear_all()
    return _state(session)


# ==================== 导出 ====================

@router.get("/sessions/{session_id}/geojson", summary="当前等时圈 GeoJSON")
async def get_geojson(session: ReachabilitySession = Depends(load_session)):
    return session.control.to_geojson()


@router.get("/sessions/{session_id}/summary", summary="统计信息")
async def get_summary(session: ReachabilitySession = Depends(load_session)):
    return summarize_isolines(session.control.to_geojson(), len(session.control.layers))


@router.get("/sessions/{session_id}/export", summary="导出 GeoJSON 文件")
async def export_geojson_file(session: ReachabilitySession = Depends(load_session)):
    artifact = session.control.export()
    return StreamingResponse(
        BytesIO(artifact.content),
        media_type="application/geo+json",
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/sessions/{session_id}/export/xlsx", summary="导出 xlsx 文件")
async def export_xlsx_file(session: ReachabilitySession = Depends(load_session)):
    document = session.control.to_geojson()
    if not document["features"]:
        raise PreconditionFailure("No reachability data to export")
    filename, content = export_isolines_to_xlsx(document, session.control.options.export_area_label)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/sessions/{session_id}/events", response_model=list[EventRecord], summary="最近的通知")
async def list_events(limit: int = 50, session: ReachabilitySession = Depends(load_session)):
    records = list(session.event_log)[-limit:] if limit > 0 else []
    return [
        EventRecord(
            name=event.name,
            # exported carries the whole document
            payload={k: v for k, v in event.payload.items() if k != "data"},
            fired_at=event.fired_at.isoformat(),
        )
        for event in records
    ]
