# 参考文档: DESIGN.md 草稿编排部分
# 草稿编排存储：持有一个编排会话，提供单个草稿的编辑周期

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .catalog import apply_fixed_selections
from .exceptions import CompositionError
from .models import (
    CatalogSnapshot, CompositionSession, COMPONENT_LABELS, CurrentDraft, DraftOrder,
    LooseItem, LunchSelection, OrderType, ProteinOption, Replacement,
    SELECTABLE_COMPONENTS, SubmissionReport, ValidationError, generate_local_id
)
from .pricing import compute_draft_total, compute_lunch_total, compute_session_total
from .replacements import add_replacement, describe_replacements, remove_replacement
from .validator import validate, validate_draft, validate_table

logger = logging.getLogger(__name__)


class CompositionStore:
    """
    草稿编排存储

    每个实例只拥有一个 CompositionSession 及其目录快照，
    所有修改都是同步的，在提交之前不会发起任何网络请求。
    """

    def __init__(self, session: CompositionSession, snapshot: CatalogSnapshot):
        self.session = session
        self.snapshot = snapshot
        # 提交协调器在请求未落定期间置为 True
        self.submitting = False
        apply_fixed_selections(self.session.current, snapshot)

    @classmethod
    def open(
        cls,
        session_id: str,
        order_type: OrderType,
        snapshot: CatalogSnapshot,
        table_id: Optional[int] = None
    ) -> "CompositionStore":
        session = CompositionSession(session_id=session_id, order_type=order_type, table_id=table_id)
        logger.info(f"会话 {session_id} 开始: 类型={order_type.value}, 餐桌={table_id}")
        return cls(session, snapshot)

    @property
    def current(self) -> CurrentDraft:
        return self.session.current

    @property
    def drafts(self) -> List[DraftOrder]:
        return self.session.drafts

    def replace_snapshot(self, snapshot: CatalogSnapshot):
        """
        替换目录快照并与当前草稿对齐

        新快照中已不存在的选择（以及已停售的蛋白质）被取消，
        仍然存在的蛋白质换成新快照中的数据（价格可能变化），
        最后重新执行一次固定选项的自动选择。
        """
        self.snapshot = snapshot
        current = self.current

        if current.protein is not None:
            protein = snapshot.find_protein(current.protein.id)
            if protein is None or not protein.is_available:
                logger.info(f"会话 {self.session.session_id} 蛋白质 {current.protein.name} 已不在菜单中，取消选择")
                self._clear_protein()
            else:
                current.protein = protein

        for component in SELECTABLE_COMPONENTS:
            selected = getattr(current, component)
            if selected is not None and snapshot.find_option(component, selected.id) is None:
                logger.info(f"会话 {self.session.session_id} {component} 选项 {selected.name} 已不在菜单中，取消选择")
                setattr(current, component, None)

        apply_fixed_selections(current, snapshot)

    def _clear_protein(self):
        """取消蛋白质时一并移除替换记录，替换只对午餐套餐有意义"""
        self.current.protein = None
        if self.current.replacements:
            logger.info(f"会话 {self.session.session_id} 取消午餐，移除 {len(self.current.replacements)} 条替换")
            self.current.replacements = []

    # 当前草稿的编辑操作
    def select_protein(self, protein_id: Optional[int]) -> Optional[ProteinOption]:
        if protein_id is None:
            self._clear_protein()
            return None

        protein = self.snapshot.find_protein(protein_id)
        if protein is None:
            raise CompositionError(f"Proteína {protein_id} no está en el menú del día")
        if not protein.is_available:
            raise CompositionError(f"{protein.name} no está disponible")

        self.current.protein = protein
        return protein

    def select_component(self, component: str, option_id: Optional[int]):
        if component not in SELECTABLE_COMPONENTS:
            raise CompositionError(f"Componente desconocido: {component}")

        if option_id is None:
            setattr(self.current, component, None)
            return None

        option = self.snapshot.find_option(component, option_id)
        if option is None:
            raise CompositionError(f"Opción {option_id} no existe para {COMPONENT_LABELS[component]}")

        setattr(self.current, component, option)
        return option

    def add_loose_item(self, item_id: int) -> LooseItem:
        """添加单品，已存在时数量加一"""
        for loose_item in self.current.loose_items:
            if loose_item.id == item_id:
                loose_item.quantity += 1
                return loose_item

        item = self.snapshot.find_loose_item(item_id)
        if item is None:
            raise CompositionError(f"Producto {item_id} no existe")
        if not item.is_available:
            raise CompositionError(f"{item.name} no está disponible")

        loose_item = LooseItem(id=item.id, name=item.name, unit_price=item.unit_price, quantity=1)
        self.current.loose_items.append(loose_item)
        return loose_item

    def update_loose_item_quantity(self, item_id: int, quantity: int) -> Optional[LooseItem]:
        """设置单品数量，数量 <= 0 时移除该单品"""
        if quantity <= 0:
            self.current.loose_items = [i for i in self.current.loose_items if i.id != item_id]
            return None

        for loose_item in self.current.loose_items:
            if loose_item.id == item_id:
                loose_item.quantity = quantity
                return loose_item

        raise CompositionError(f"Producto {item_id} no está en el pedido actual")

    def add_replacement(
        self,
        from_component: str,
        to_item_id: int,
        from_option_name: Optional[str] = None
    ) -> Replacement:
        if self.current.protein is None:
            raise CompositionError("Selecciona una proteína antes de agregar reemplazos")

        item = self.snapshot.find_loose_item(to_item_id)
        if item is None:
            raise CompositionError(f"Producto {to_item_id} no existe")

        if from_option_name is None:
            selected = getattr(self.current, from_component, None)
            from_option_name = selected.name if selected else COMPONENT_LABELS.get(from_component, from_component)

        return add_replacement(self.current, from_component, from_option_name, item)

    def remove_replacement(self, replacement_id: str) -> bool:
        return remove_replacement(self.current, replacement_id) is not None

    def set_notes(self, notes: str):
        self.current.notes = notes.strip()

    def set_table(self, table_id: Optional[int]):
        self.session.table_id = table_id
        logger.info(f"会话 {self.session.session_id} 餐桌设为 {table_id}")

    def clear_current(self):
        """清空当前草稿并退出编辑模式"""
        self.session.current = CurrentDraft()
        self.session.current_edit_index = None
        apply_fixed_selections(self.session.current, self.snapshot)

    # 计算
    def lunch_total(self) -> int:
        return compute_lunch_total(self.snapshot.base_price, self.current.protein)

    def current_total(self) -> int:
        return compute_draft_total(self.current, self.snapshot.base_price)

    def session_total(self) -> int:
        return compute_session_total(self.drafts)

    def validate_current(self) -> List[ValidationError]:
        """当前草稿的完整校验结果（包含餐桌规则），用于界面提示"""
        return validate(self.current, self.snapshot, self.session.order_type, self.session.table_id)

    def validate_confirmation(self) -> List[ValidationError]:
        """阻止整体确认的错误：列表为空或堂食未选餐桌"""
        errors = []
        if not self.drafts:
            errors.append(ValidationError(field="drafts", message="No hay pedidos para confirmar"))
        return errors + validate_table(self.session.order_type, self.session.table_id)

    def build_notes(self) -> str:
        """
        拼接可读备注

        格式: "Lunch: <蛋白质> + <组成部分> | Swap: <原>→<新> | Note: <备注>"
        没有蛋白质时只返回用户备注。
        """
        current = self.current
        if current.protein is None:
            return current.notes

        rice = current.rice or (self.snapshot.rice_options[0] if self.snapshot.rice_options else None)
        components = [
            option.name for option in (
                rice, current.soup, current.principle, current.salad, current.drink, current.extra
            ) if option is not None
        ]

        note = f"Lunch: {current.protein.name}"
        if components:
            note += f" + {', '.join(components)}"
        if current.replacements:
            note += f" | Swap: {describe_replacements(current.replacements)}"
        if current.notes:
            note += f" | Note: {current.notes}"
        return note

    # 草稿列表操作
    def add_or_update_draft(self) -> Tuple[Optional[DraftOrder], List[ValidationError]]:
        """
        校验当前草稿并加入列表（或替换正在编辑的条目）

        餐桌规则不在这里检查，而是在整体确认时检查。

        Returns:
            (草稿, 错误列表)；有错误时草稿为None且列表不变
        """
        errors = validate_draft(self.current, self.snapshot)
        if errors:
            logger.info(f"会话 {self.session.session_id} 草稿校验未通过: {[e.field for e in errors]}")
            return None, errors

        current = self.current
        lunch = None
        if current.protein is not None:
            lunch = LunchSelection(
                protein=current.protein,
                soup=current.soup,
                principle=current.principle,
                salad=current.salad,
                drink=current.drink,
                extra=current.extra,
                rice=current.rice or (self.snapshot.rice_options[0] if self.snapshot.rice_options else None),
                replacements=[r.model_copy() for r in current.replacements]
            )

        draft = DraftOrder(
            id=generate_local_id(),
            protein=current.protein,
            lunch=lunch,
            loose_items=[i.model_copy() for i in current.loose_items],
            total=self.current_total(),
            notes=self.build_notes(),
            customer_notes=current.notes
        )

        edit_index = self.session.current_edit_index
        if edit_index is not None:
            # 原位替换，保留原条目的标识和创建时间
            original = self.drafts[edit_index]
            draft.id = original.id
            draft.created_at = original.created_at
            self.drafts[edit_index] = draft
            logger.info(f"会话 {self.session.session_id} 更新草稿 #{edit_index + 1}, 金额 {draft.total}")
        else:
            self.drafts.append(draft)
            logger.info(f"会话 {self.session.session_id} 添加草稿 #{len(self.drafts)}, 金额 {draft.total}")

        self.clear_current()
        return draft, []

    def _get_draft(self, index: int) -> DraftOrder:
        if index < 0 or index >= len(self.drafts):
            raise CompositionError(f"Pedido #{index + 1} no existe")
        return self.drafts[index]

    def edit_draft(self, index: int) -> CurrentDraft:
        """把已确认的草稿复制回当前草稿进入编辑模式，列表本身不变"""
        draft = self._get_draft(index)

        current = CurrentDraft(
            protein=draft.protein,
            loose_items=[i.model_copy() for i in draft.loose_items],
            notes=draft.customer_notes
        )
        if draft.lunch is not None:
            for component in SELECTABLE_COMPONENTS:
                setattr(current, component, getattr(draft.lunch, component))
            current.replacements = [r.model_copy() for r in draft.lunch.replacements]

        self.session.current = current
        self.session.current_edit_index = index
        logger.debug(f"会话 {self.session.session_id} 编辑草稿 #{index + 1}")
        return current

    def remove_draft(self, index: int) -> DraftOrder:
        draft = self._get_draft(index)
        del self.drafts[index]

        edit_index = self.session.current_edit_index
        if edit_index == index:
            self.clear_current()
        elif edit_index is not None and edit_index > index:
            self.session.current_edit_index = edit_index - 1

        logger.info(f"会话 {self.session.session_id} 删除草稿 {draft.id}")
        return draft

    def duplicate_draft(self, index: int) -> DraftOrder:
        draft = self._get_draft(index)
        duplicated = draft.model_copy(
            deep=True,
            update={"id": generate_local_id(), "created_at": datetime.now(), "last_error": None}
        )
        self.drafts.append(duplicated)
        logger.info(f"会话 {self.session.session_id} 复制草稿 {draft.id} -> {duplicated.id}")
        return duplicated

    def apply_submission(self, report: SubmissionReport):
        """
        根据提交结果更新会话

        只处理报告中出现的草稿：成功的移除，失败的保留并附上错误信息；
        提交期间新加入的草稿原样保留。列表因此变空时才重置会话。
        """
        editing_id = None
        if self.session.current_edit_index is not None:
            editing_id = self.drafts[self.session.current_edit_index].id

        outcomes = {o.draft_id: o for o in report.outcomes}
        remaining = []
        for draft in self.drafts:
            outcome = outcomes.get(draft.id)
            if outcome is not None and outcome.success:
                continue
            if outcome is not None:
                draft.last_error = outcome.error
            remaining.append(draft)
        self.session.drafts = remaining

        if not remaining:
            self.reset()
            return

        if editing_id is not None:
            remaining_ids = [d.id for d in remaining]
            if editing_id in remaining_ids:
                self.session.current_edit_index = remaining_ids.index(editing_id)
            else:
                self.clear_current()

    def reset(self):
        """丢弃草稿列表、餐桌和当前草稿（返回订单类型选择）"""
        self.session.drafts = []
        self.session.table_id = None
        self.clear_current()
        logger.info(f"会话 {self.session.session_id} 已重置")
