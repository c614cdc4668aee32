from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import List
from io import BytesIO
import logging
import pandas as pd

from database import get_db
from schemas.custom_reports import CustomReport, CustomReportCreate, CustomReportUpdate, ReportResult
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import custom_reports as crud_reports

router = APIRouter(prefix="/custom-reports", tags=["Custom Reports"])
logger = logging.getLogger("custom_reports")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/", response_model=CustomReport, status_code=status.HTTP_201_CREATED)
def create_custom_report(
    report: CustomReportCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    return crud_reports.create_custom_report(db, report, actor.tenant_id, actor)


@router.get("/", response_model=List[CustomReport])
def read_custom_reports(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    """The caller's own reports plus every public report of the tenant."""
    return crud_reports.get_custom_reports(db, actor.tenant_id, actor.user_id)


@router.get("/{report_id}", response_model=CustomReport)
def read_custom_report(
    report_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    db_report = crud_reports.get_custom_report(db, report_id, actor.tenant_id, actor.user_id)
    if db_report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return db_report


@router.post("/{report_id}/run", response_model=ReportResult)
def run_custom_report(
    report_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_reports.run_custom_report(db, report_id, actor.tenant_id, actor.user_id)


def report_to_dataframe(result: ReportResult) -> pd.DataFrame:
    """One row per report row; detail keys become extra columns."""
    records = [
        {"label": row.label, "amount": float(row.amount), **row.details}
        for row in result.rows
    ]
    if result.total is not None:
        records.append({"label": "TOTAL", "amount": float(result.total)})
    return pd.DataFrame(records, columns=None if records else ["label", "amount"])


@router.get("/{report_id}/export")
def export_custom_report(
    report_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    """Run the report and download it as an Excel workbook."""
    result = crud_reports.run_custom_report(db, report_id, actor.tenant_id, actor.user_id)
    df = report_to_dataframe(result)

    # Create an in-memory Excel file
    excel_file = BytesIO()
    df.to_excel(excel_file, index=False, sheet_name=result.report_type[:31])
    excel_file.seek(0)
    logger.info(f"Exported report {report_id} for tenant {actor.tenant_id} ({len(result.rows)} rows)")

    headers = {
        'Content-Disposition': f'attachment; filename="report_{report_id}_{result.currency_code}.xlsx"'
    }
    return StreamingResponse(excel_file, media_type=XLSX_MEDIA_TYPE, headers=headers)


@router.patch("/{report_id}", response_model=CustomReport)
def update_custom_report(
    report_id: int,
    report: CustomReportUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    updated = crud_reports.update_custom_report(db, report_id, report, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return updated


@router.delete("/{report_id}")
def delete_custom_report(
    report_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    if not crud_reports.delete_custom_report(db, report_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Report not found")
    return {"message": "Report deleted successfully"}
