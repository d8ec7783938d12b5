import os
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import FileResponse

from ..excel_db import ExcelAppendStore
from ..schemas import WorkbookSummary

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def dev_guard(request: Request, token: Optional[str]):
    expected = request.app.state.settings.dev_token
    if not expected:
        return
    if token != expected:
        raise HTTPException(status_code=401, detail="Invalid developer token.")


@router.get("/health")
def health():
    return {"ok": True, "time": datetime.utcnow().isoformat()}


@router.get("/dev/exports/excel")
def dev_export_excel(request: Request, x_dev_token: Optional[str] = Header(None)):
    dev_guard(request, x_dev_token)
    path = request.app.state.settings.workbook_path
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="No applications have been submitted yet.")
    return FileResponse(path, filename=os.path.basename(path), media_type=XLSX_MEDIA_TYPE)


@router.get("/dev/summary", response_model=WorkbookSummary)
def dev_summary(request: Request, x_dev_token: Optional[str] = Header(None)):
    dev_guard(request, x_dev_token)
    store = ExcelAppendStore(request.app.state.settings.workbook_path)
    if not store.exists():
        return WorkbookSummary(exists=False)
    return WorkbookSummary(exists=True, tables=store.table_counts())
