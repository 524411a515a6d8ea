# routes/reports.py
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from services.report_service import ReportService, SellerRanking
from utils.audit import client_ip, write_log
from utils.spreadsheet import media_type
from utils.tokenJWT import role_required

router = APIRouter(prefix="/reports", tags=["Reports"])

_report_roles = role_required(UserRole.ADMIN, UserRole.MANAGER)
FORMAT_PATTERN = "^(xlsx|csv)$"


def ranking_payload(ranking: SellerRanking) -> dict:
    return {
        "items": [
            {
                "position": m.position,
                "seller_id": m.seller_id,
                "seller_name": m.seller_name,
                "cpf": m.cpf,
                "employee_id": m.employee_id,
                "total_sales": m.total_sales,
                "total_revenue": m.total_revenue,
                "average_ticket": m.average_ticket,
            }
            for m in ranking.rows
        ],
        "total_sellers": ranking.total_sellers,
        "total_sales": ranking.total_sales,
        "total_revenue": ranking.total_revenue,
        "date_from": ranking.start,
        "date_to": ranking.end,
    }


def _attachment(content: bytes, name: str, fmt: str, start: datetime, end: datetime) -> Response:
    filename = f"{name}_{start:%Y%m%d}_{end:%Y%m%d}.{fmt}"
    return Response(
        content=content,
        media_type=media_type(fmt),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _sales_report(db: Session, request: Request, user: User, start: datetime, end: datetime, fmt: str) -> Response:
    content = ReportService(SqlEntityStore(db)).generate_sales_report(start, end, fmt)
    write_log(db, user_id=user.id, action="REPORT_GENERATE", resource="reports",
              ip=client_ip(request),
              meta={"report": "sales", "format": fmt, "start": start.isoformat(), "end": end.isoformat()})
    return _attachment(content, "sales_report", fmt, start, end)


def _ranking_report(db: Session, request: Request, user: User, start: datetime, end: datetime, fmt: str) -> Response:
    content = ReportService(SqlEntityStore(db)).generate_seller_ranking_report(start, end, fmt)
    write_log(db, user_id=user.id, action="REPORT_GENERATE", resource="reports",
              ip=client_ip(request),
              meta={"report": "seller_ranking", "format": fmt, "start": start.isoformat(), "end": end.isoformat()})
    return _attachment(content, "seller_ranking", fmt, start, end)


# -----------------------------
# 1) Sales ledger
# -----------------------------
@router.get("/sales")
def sales_report(
    request: Request,
    start_date: datetime = Query(..., description="ISO datetime, inclusive"),
    end_date: datetime = Query(..., description="ISO datetime, inclusive"),
    fmt: str = Query("xlsx", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(_report_roles),
):
    return _sales_report(db, request, current_user, start_date, end_date, fmt)


@router.get("/sales/period")
def sales_report_current_period(
    request: Request,
    fmt: str = Query("xlsx", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(_report_roles),
):
    start, end = ReportService(SqlEntityStore(db)).default_window()
    return _sales_report(db, request, current_user, start, end, fmt)


# -----------------------------
# 2) Seller ranking
# -----------------------------
@router.get("/seller-ranking")
def seller_ranking_report(
    request: Request,
    start_date: datetime = Query(..., description="ISO datetime, inclusive"),
    end_date: datetime = Query(..., description="ISO datetime, inclusive"),
    fmt: str = Query("xlsx", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(_report_roles),
):
    return _ranking_report(db, request, current_user, start_date, end_date, fmt)


@router.get("/seller-ranking/period")
def seller_ranking_report_current_period(
    request: Request,
    fmt: str = Query("xlsx", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(_report_roles),
):
    start, end = ReportService(SqlEntityStore(db)).default_window()
    return _ranking_report(db, request, current_user, start, end, fmt)
