# backend/routes/sales.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from schemas.sale import SaleCreate, SaleResponse
from services.sale_service import SaleService
from utils.audit import client_ip, write_log
from utils.tokenJWT import ANY_ROLE, role_required

router = APIRouter(prefix="/sales", tags=["Sales"])


# Register a sale: prices it, applies the customer discount and marks the ducks SOLD
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    payload: SaleCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN, UserRole.SELLER)),
):
    sale = SaleService(SqlEntityStore(db)).create_sale(payload.duck_ids, payload.customer_id, payload.seller_id)
    write_log(db, user_id=current_user.id, action="SALE_CREATE", resource="sales",
              ip=client_ip(request),
              meta={"sale_id": sale.id, "duck_ids": list(payload.duck_ids), "final_price": str(sale.final_price)})
    return sale


@router.get("", response_model=List[SaleResponse])
def list_sales(db: Session = Depends(get_db), current_user: User = Depends(role_required(*ANY_ROLE))):
    return SaleService(SqlEntityStore(db)).list_sales()


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(role_required(*ANY_ROLE))):
    return SaleService(SqlEntityStore(db)).get_sale(sale_id)


# The ducks of a deleted sale stay SOLD
@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN)),
):
    SaleService(SqlEntityStore(db)).delete_sale(sale_id)
    write_log(db, user_id=current_user.id, action="SALE_DELETE", resource="sales",
              ip=client_ip(request), meta={"sale_id": sale_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
