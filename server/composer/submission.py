# 参考文档: DESIGN.md 提交协调部分
# 提交协调器：把草稿列表并发提交为相互独立的订单

import asyncio
import logging
from typing import List, Optional

from .backend_service import BackendService, GENERIC_ERROR_MESSAGE
from .exceptions import BackendError, CompositionError
from .models import DraftOrder, DraftOutcome, LineItem, OrderType, SubmissionReport
from .pricing import compute_submitted_total
from .store import CompositionStore
from .validator import validate_table

logger = logging.getLogger(__name__)

EMPTY_DRAFT_MESSAGE = "El pedido no tiene items válidos"
SUBMISSION_IN_PROGRESS_MESSAGE = "Envío en curso"


def build_line_items(draft: DraftOrder) -> List[LineItem]:
    """
    把一个草稿转换为订单行

    蛋白质一行（附带整份套餐的说明），每个单品一行；ID非正数的条目跳过。
    """
    items = []

    if draft.protein is not None and draft.protein.id > 0:
        notes = f"Almuerzo: {draft.protein.name}"
        if draft.notes:
            notes += f" - {draft.notes}"
        items.append(LineItem(
            menu_item_id=draft.protein.id,
            quantity=1,
            price_at_order=draft.protein.unit_price,
            notes=notes
        ))

    for loose_item in draft.loose_items:
        if loose_item.id > 0:
            items.append(LineItem(
                menu_item_id=loose_item.id,
                quantity=loose_item.quantity,
                price_at_order=loose_item.unit_price,
                notes=loose_item.name
            ))

    return items


def format_amount(amount: int) -> str:
    """按哥伦比亚习惯格式化金额，如 $10.000"""
    return "$" + f"{amount:,}".replace(",", ".")


class SubmissionCoordinator:
    """
    提交协调器

    每个草稿对应一个独立请求，全部并发发出，等待所有结果落定后才更新会话；
    任何一个失败都不会取消其他请求，也不会自动重试。
    """

    def __init__(self, backend: BackendService):
        self.backend = backend

    async def _submit_one(
        self,
        draft: DraftOrder,
        order_type: OrderType,
        table_id: Optional[int],
        line_items: List[LineItem]
    ) -> DraftOutcome:
        logger.info(f"提交草稿 {draft.id}: {len(line_items)} 行, 金额 {draft.total}")
        try:
            order = await self.backend.submit_order(order_type, table_id, line_items)
        except BackendError as e:
            logger.warning(f"草稿 {draft.id} 提交失败: {e.message}")
            return DraftOutcome(draft_id=draft.id, success=False, total=draft.total, error=e.message)

        order_id = order.get("id")
        logger.info(f"草稿 {draft.id} 提交成功, 订单 {order_id}")
        return DraftOutcome(
            draft_id=draft.id,
            success=True,
            total=draft.total,
            order_id=str(order_id) if order_id is not None else None
        )

    async def submit(self, store: CompositionStore) -> SubmissionReport:
        """
        提交会话中的全部草稿

        Args:
            store: 草稿编排存储

        Returns:
            汇总结果，包含每个草稿的成功/失败信息

        Raises:
            CompositionError: 列表为空、堂食未选餐桌或同一会话已有提交在进行，此时不会发出任何请求
        """
        session = store.session

        if store.submitting:
            raise CompositionError(SUBMISSION_IN_PROGRESS_MESSAGE)

        if not session.drafts:
            raise CompositionError("No hay pedidos para confirmar")

        table_errors = validate_table(session.order_type, session.table_id)
        if table_errors:
            raise CompositionError("Selecciona una mesa primero", errors=table_errors)

        table_id = session.table_id if session.order_type == OrderType.DINE_IN else None

        # 等待期间列表可能被修改，只处理提交开始时的草稿
        drafts = list(session.drafts)

        outcomes = {}
        dispatched = []
        for draft in drafts:
            line_items = build_line_items(draft)
            if not line_items:
                logger.warning(f"草稿 {draft.id} 没有有效订单行，不提交")
                outcomes[draft.id] = DraftOutcome(
                    draft_id=draft.id, success=False, total=draft.total, error=EMPTY_DRAFT_MESSAGE
                )
                continue
            dispatched.append((draft, line_items))

        store.submitting = True
        try:
            # 等待全部请求落定，单个异常不会中断其他请求
            results = await asyncio.gather(
                *(self._submit_one(d, session.order_type, table_id, items) for d, items in dispatched),
                return_exceptions=True
            )
        finally:
            store.submitting = False

        for (draft, _), result in zip(dispatched, results):
            if isinstance(result, BaseException):
                logger.error(f"草稿 {draft.id} 提交时出现未预期错误: {result!r}")
                result = DraftOutcome(
                    draft_id=draft.id, success=False, total=draft.total, error=GENERIC_ERROR_MESSAGE
                )
            outcomes[draft.id] = result

        ordered = [outcomes[d.id] for d in drafts]
        report = self._build_report(ordered, session.order_type, table_id)

        store.apply_submission(report)
        return report

    def _build_report(
        self,
        outcomes: List[DraftOutcome],
        order_type: OrderType,
        table_id: Optional[int]
    ) -> SubmissionReport:
        succeeded = [o for o in outcomes if o.success]
        failed = [o for o in outcomes if not o.success]
        submitted_total = compute_submitted_total(outcomes)

        if not failed:
            if order_type == OrderType.DINE_IN:
                message = f"{len(succeeded)} pedidos creados para Mesa {table_id}"
            else:
                message = f"{len(succeeded)} pedidos creados"
            message += f". Total: {format_amount(submitted_total)}"
            logger.info(message)
        else:
            message = "Algunos pedidos no se pudieron crear"
            logger.warning(f"{message}: 成功 {len(succeeded)}, 失败 {len(failed)}")

        return SubmissionReport(
            success=not failed,
            submitted_count=len(succeeded),
            failed_count=len(failed),
            submitted_total=submitted_total,
            outcomes=outcomes,
            message=message
        )
