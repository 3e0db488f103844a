# 参考文档: DESIGN.md 接口层部分
# 编排会话相关API路由

import logging
from typing import Dict, Any
from fastapi import APIRouter, HTTPException, Depends, Path
from fastapi.responses import JSONResponse

from .models import (
    CreateSessionRequest, SetTableRequest, SelectProteinRequest, SelectComponentRequest,
    NotesRequest, AddLooseItemRequest, UpdateQuantityRequest, AddReplacementRequest,
    SessionState, SessionTotals
)
from api.catalog.routes import check_menu_date, format_daily_menu
from api.dependencies import (
    get_backend_service, get_catalog_reader, get_session_manager, get_submission_coordinator
)
from composer.backend_service import BackendService
from composer.manager import SessionManager
from composer.store import CompositionStore
from composer.validator import errors_by_field
from utils.response import create_success_response, create_error_response
from utils.validators import validate_component, validate_non_negative_integer, validate_string_length

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["点单编排"])

MAX_NOTES_LENGTH = 500


def session_state(store: CompositionStore) -> Dict[str, Any]:
    """格式化会话状态"""
    session = store.session
    state = SessionState(
        session_id=session.session_id,
        order_type=session.order_type,
        table_id=session.table_id,
        current_edit_index=session.current_edit_index,
        current=session.current.model_dump(mode="json"),
        drafts=[d.model_dump(mode="json") for d in session.drafts],
        totals=SessionTotals(
            lunch_price=store.lunch_total(),
            current_total=store.current_total(),
            session_total=store.session_total()
        ),
        validation_errors=errors_by_field(store.validate_current()),
        created_at=session.created_at.isoformat()
    )
    return state.model_dump(mode="json")


def get_store(
    session_id: str = Path(..., description="会话ID"),
    manager: SessionManager = Depends(get_session_manager)
) -> CompositionStore:
    """按路径中的会话ID获取编排存储，不存在时由全局处理器返回404"""
    return manager.get_store(session_id)


@router.post("", response_model=Dict[str, Any], status_code=201)
async def create_session(
    request: CreateSessionRequest,
    manager: SessionManager = Depends(get_session_manager),
    backend: BackendService = Depends(get_backend_service)
):
    """
    创建编排会话

    选择订单类型时调用；读取目录快照并自动选中固定选项
    """
    check_menu_date(request.menu_date)

    snapshot = await get_catalog_reader(backend).load_snapshot(request.menu_date)
    store = manager.create_session(request.order_type, snapshot, request.table_id)

    return create_success_response(
        data={"session": session_state(store), "daily_menu": format_daily_menu(store.snapshot)},
        message="Sesión creada"
    )


@router.get("/{session_id}", response_model=Dict[str, Any])
async def get_session(store: CompositionStore = Depends(get_store)):
    """获取会话状态"""
    return create_success_response(
        data={"session": session_state(store), "daily_menu": format_daily_menu(store.snapshot)}
    )


@router.delete("/{session_id}", response_model=Dict[str, Any])
async def cancel_session(
    session_id: str = Path(..., description="会话ID"),
    manager: SessionManager = Depends(get_session_manager)
):
    """取消会话，未提交的草稿全部丢弃"""
    if not manager.discard_session(session_id):
        raise HTTPException(status_code=404, detail=f"Sesión {session_id} no encontrada")
    return create_success_response(data={"session_id": session_id}, message="Sesión cancelada")


@router.post("/{session_id}/catalog/refresh", response_model=Dict[str, Any])
async def refresh_catalog(
    store: CompositionStore = Depends(get_store),
    backend: BackendService = Depends(get_backend_service)
):
    """重新读取目录快照"""
    snapshot = await get_catalog_reader(backend).load_snapshot(store.snapshot.menu_date)
    store.replace_snapshot(snapshot)
    return create_success_response(
        data={"session": session_state(store), "daily_menu": format_daily_menu(snapshot)},
        message="Menú actualizado"
    )


@router.put("/{session_id}/table", response_model=Dict[str, Any])
async def set_table(request: SetTableRequest, store: CompositionStore = Depends(get_store)):
    """设置或取消餐桌"""
    store.set_table(request.table_id)
    return create_success_response(data={"session": session_state(store)})


@router.put("/{session_id}/current/protein", response_model=Dict[str, Any])
async def select_protein(request: SelectProteinRequest, store: CompositionStore = Depends(get_store)):
    """选择蛋白质"""
    store.select_protein(request.protein_id)
    return create_success_response(data={"session": session_state(store)})


@router.put("/{session_id}/current/components/{component}", response_model=Dict[str, Any])
async def select_component(
    request: SelectComponentRequest,
    component: str = Path(..., description="组成部分"),
    store: CompositionStore = Depends(get_store)
):
    """选择午餐组成部分"""
    if not validate_component(component):
        raise HTTPException(status_code=400, detail=f"Componente desconocido: {component}")

    store.select_component(component, request.option_id)
    return create_success_response(data={"session": session_state(store)})


@router.put("/{session_id}/current/notes", response_model=Dict[str, Any])
async def set_notes(request: NotesRequest, store: CompositionStore = Depends(get_store)):
    """设置当前草稿备注"""
    if not validate_string_length(request.notes, max_length=MAX_NOTES_LENGTH):
        raise HTTPException(status_code=400, detail=f"La nota no puede superar {MAX_NOTES_LENGTH} caracteres")

    store.set_notes(request.notes)
    return create_success_response(data={"session": session_state(store)})


@router.post("/{session_id}/current/loose-items", response_model=Dict[str, Any])
async def add_loose_item(request: AddLooseItemRequest, store: CompositionStore = Depends(get_store)):
    """添加单品，已存在时数量加一"""
    store.add_loose_item(request.item_id)
    return create_success_response(data={"session": session_state(store)})


@router.put("/{session_id}/current/loose-items/{item_id}", response_model=Dict[str, Any])
async def update_loose_item_quantity(
    request: UpdateQuantityRequest,
    item_id: int = Path(..., description="商品ID"),
    store: CompositionStore = Depends(get_store)
):
    """修改单品数量，0表示移除"""
    if not validate_non_negative_integer(request.quantity):
        raise HTTPException(status_code=400, detail="La cantidad no puede ser negativa")

    store.update_loose_item_quantity(item_id, request.quantity)
    return create_success_response(data={"session": session_state(store)})


@router.post("/{session_id}/current/replacements", response_model=Dict[str, Any])
async def add_replacement(request: AddReplacementRequest, store: CompositionStore = Depends(get_store)):
    """添加替换记录"""
    if not validate_component(request.from_component):
        raise HTTPException(status_code=400, detail=f"Componente desconocido: {request.from_component}")

    replacement = store.add_replacement(request.from_component, request.to_item_id, request.from_option_name)
    return create_success_response(
        data={"replacement": replacement.model_dump(), "session": session_state(store)},
        message="Reemplazo agregado"
    )


@router.delete("/{session_id}/current/replacements/{replacement_id}", response_model=Dict[str, Any])
async def remove_replacement(
    replacement_id: str = Path(..., description="替换记录ID"),
    store: CompositionStore = Depends(get_store)
):
    """移除替换记录"""
    if not store.remove_replacement(replacement_id):
        raise HTTPException(status_code=404, detail="Reemplazo no encontrado")
    return create_success_response(data={"session": session_state(store)}, message="Reemplazo eliminado")


@router.delete("/{session_id}/current", response_model=Dict[str, Any])
async def clear_current(store: CompositionStore = Depends(get_store)):
    """清空当前草稿"""
    store.clear_current()
    return create_success_response(data={"session": session_state(store)})


@router.post("/{session_id}/drafts", response_model=Dict[str, Any])
async def add_or_update_draft(store: CompositionStore = Depends(get_store)):
    """
    把当前草稿加入列表（编辑模式下替换原条目）

    校验失败返回422及字段级错误，列表保持不变
    """
    editing = store.session.current_edit_index is not None
    draft, errors = store.add_or_update_draft()

    if errors:
        return JSONResponse(
            status_code=422,
            content=create_error_response(
                "Completa los campos requeridos",
                data={"errors": errors_by_field(errors)}
            )
        )

    message = "Pedido actualizado" if editing else f"Pedido #{len(store.drafts)} agregado"
    return create_success_response(
        data={"draft": draft.model_dump(mode="json"), "session": session_state(store)},
        message=message
    )


@router.post("/{session_id}/drafts/{index}/edit", response_model=Dict[str, Any])
async def edit_draft(
    index: int = Path(..., ge=0, description="草稿序号（从0开始）"),
    store: CompositionStore = Depends(get_store)
):
    """把已确认的草稿载入当前草稿进行编辑"""
    store.edit_draft(index)
    return create_success_response(data={"session": session_state(store)})


@router.post("/{session_id}/drafts/{index}/duplicate", response_model=Dict[str, Any])
async def duplicate_draft(
    index: int = Path(..., ge=0, description="草稿序号（从0开始）"),
    store: CompositionStore = Depends(get_store)
):
    """复制草稿"""
    duplicated = store.duplicate_draft(index)
    return create_success_response(
        data={"draft": duplicated.model_dump(mode="json"), "session": session_state(store)},
        message="Pedido duplicado"
    )


@router.delete("/{session_id}/drafts/{index}", response_model=Dict[str, Any])
async def remove_draft(
    index: int = Path(..., ge=0, description="草稿序号（从0开始）"),
    store: CompositionStore = Depends(get_store)
):
    """删除草稿"""
    store.remove_draft(index)
    return create_success_response(data={"session": session_state(store)}, message="Pedido eliminado")


@router.get("/{session_id}/validation", response_model=Dict[str, Any])
async def get_confirmation_errors(store: CompositionStore = Depends(get_store)):
    """整体确认前的校验（列表为空、堂食未选餐桌）"""
    errors = store.validate_confirmation()
    return create_success_response(
        data={"can_confirm": not errors, "errors": errors_by_field(errors)}
    )


@router.post("/{session_id}/submit", response_model=Dict[str, Any])
async def submit_session(
    store: CompositionStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
    backend: BackendService = Depends(get_backend_service)
):
    """
    并发提交全部草稿

    全部成功且列表已清空时结束会话；部分失败时失败的草稿保留在列表中并附带错误信息。
    同一会话已有提交在进行时返回400。
    """
    session_id = store.session.session_id
    report = await get_submission_coordinator(backend).submit(store)

    if report.success:
        if not store.drafts:
            manager.discard_session(session_id)
            return create_success_response(data={"report": report.model_dump(mode="json")}, message=report.message)
        # 提交期间加入的草稿仍待提交，会话保留
        return create_success_response(
            data={"report": report.model_dump(mode="json"), "session": session_state(store)},
            message=report.message
        )

    logger.warning(f"会话 {session_id} 部分提交失败: {report.failed_count}/{len(report.outcomes)}")
    return create_error_response(
        report.message,
        data={"report": report.model_dump(mode="json"), "session": session_state(store)}
    )
