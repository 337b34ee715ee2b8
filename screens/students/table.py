# screens/students/table.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from screens.students.models import STATUS_LABELS, StudentRecord

COLUMNS = ("Name", "Enrollment", "E-mail", "Birth date", "Status")
ACTIONS_COLUMN = "Actions"
EMPTY_MESSAGE = "No students found"


@dataclass(frozen=True)
class TableRow:
    record_id: str
    cells: Tuple[str, ...]
    actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TableView:
    state: str                      # 'loading' | 'empty' | 'table'
    columns: Tuple[str, ...] = ()
    rows: Tuple[TableRow, ...] = field(default_factory=tuple)

    def to_frame(self) -> pd.DataFrame:
        data = [dict(zip(COLUMNS, r.cells)) for r in self.rows]
        return pd.DataFrame(data, columns=list(COLUMNS))


def build_table(records: Sequence[StudentRecord], loading: bool, is_admin: bool,
                date_format: str = "%d/%m/%Y") -> TableView:
    if loading:
        return TableView("loading")
    if not records:
        return TableView("empty")

    actions = ("edit", "delete") if is_admin else ()
    columns = COLUMNS + ((ACTIONS_COLUMN,) if is_admin else ())
    rows = tuple(
        TableRow(
            record_id=r.id,
            cells=(
                r.name,
                r.enrollment,
                r.email,
                r.birth_date.strftime(date_format) if r.birth_date else "",
                STATUS_LABELS.get(r.status, r.status),
            ),
            actions=actions,
        )
        for r in records
    )
    return TableView("table", columns, rows)


def render(view: TableView, records: Sequence[StudentRecord],
           on_edit: Optional[Callable[[StudentRecord], None]] = None,
           on_delete: Optional[Callable[[str], None]] = None,
           key_prefix: str = "students_table") -> None:
    if view.state == "loading":
        st.caption("⏳ Loading students...")
        return
    if view.state == "empty":
        st.info(EMPTY_MESSAGE)
        return

    if ACTIONS_COLUMN not in view.columns:
        st.dataframe(view.to_frame(), use_container_width=True, hide_index=True)
        return

    by_id = {r.id: r for r in records}
    widths = [3, 2, 3, 2, 1, 1]
    header = st.columns(widths)
    for col, title in zip(header, view.columns):
        col.markdown(f"**{title}**")

    for row in view.rows:
        cols = st.columns(widths)
        for col, value in zip(cols, row.cells):
            col.write(value)
        with cols[-1]:
            a, b = st.columns(2)
            if "edit" in row.actions and a.button("✏️", key=f"{key_prefix}_edit_{row.record_id}", help="Edit") and on_edit:
                on_edit(by_id[row.record_id])
            if "delete" in row.actions and b.button("🗑️", key=f"{key_prefix}_del_{row.record_id}", help="Delete") and on_delete:
                on_delete(row.record_id)
