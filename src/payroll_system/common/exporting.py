from __future__ import annotations

import io
from typing import Iterable, Mapping

import pandas as pd

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_xlsx(rows: Iterable[Mapping], *, columns: Mapping[str, str], sheet_name: str) -> io.BytesIO:
    """Write rows to an in-memory workbook.

    `columns` maps row keys to the header shown in the sheet, in order.
    """
    df = pd.DataFrame([{header: row.get(key) for key, header in columns.items()} for row in rows], columns=list(columns.values()))
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output
