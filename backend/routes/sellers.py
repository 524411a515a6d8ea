# backend/routes/sellers.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from routes.reports import ranking_payload
from schemas.reports import SellerRankingResponse
from schemas.sale import SaleResponse
from schemas.seller import SellerCreate, SellerResponse, SellerUpdate
from services.report_service import ReportService
from services.sale_service import SaleService
from services.seller_service import SellerService
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/sellers", tags=["Sellers"])


@router.post("", response_model=SellerResponse, status_code=status.HTTP_201_CREATED)
def create_seller(
    payload: SellerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    seller = SellerService(SqlEntityStore(db)).create_seller(payload.name, payload.cpf, payload.employee_id)
    write_log(db, user_id=current_user.id, action="SELLER_CREATE", resource="sellers",
              ip=client_ip(request), meta={"seller_id": seller.id})
    return seller


@router.put("/{seller_id}", response_model=SellerResponse)
def update_seller(
    seller_id: int,
    payload: SellerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    seller = SellerService(SqlEntityStore(db)).update_seller(seller_id, payload.name)
    write_log(db, user_id=current_user.id, action="SELLER_UPDATE", resource="sellers",
              ip=client_ip(request), meta={"seller_id": seller_id})
    return seller


@router.get("", response_model=List[SellerResponse])
def list_sellers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return SellerService(SqlEntityStore(db)).list_sellers()


# All-time ranking by revenue
@router.get("/ranking", response_model=SellerRankingResponse)
def seller_ranking(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ranking = ReportService(SqlEntityStore(db)).seller_ranking(None, None)
    return ranking_payload(ranking)


@router.get("/{seller_id}", response_model=SellerResponse)
def get_seller(seller_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return SellerService(SqlEntityStore(db)).get_seller(seller_id)


@router.get("/{seller_id}/sales", response_model=List[SaleResponse])
def list_seller_sales(seller_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return SaleService(SqlEntityStore(db)).list_sales_by_seller(seller_id)


@router.delete("/{seller_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_seller(
    seller_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN)),
):
    SellerService(SqlEntityStore(db)).delete_seller(seller_id)
    write_log(db, user_id=current_user.id, action="SELLER_DELETE", resource="sellers",
              ip=client_ip(request), meta={"seller_id": seller_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
