# backend/routes/customers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from schemas.duck import DuckResponse
from schemas.sale import SaleResponse
from services.customer_service import CustomerService
from services.duck_service import DuckService
from services.sale_service import SaleService
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = CustomerService(SqlEntityStore(db)).create_customer(
        payload.name, payload.cpf, payload.phone, payload.address, payload.discount_eligible
    )
    write_log(db, user_id=current_user.id, action="CUSTOMER_CREATE", resource="customers",
              ip=client_ip(request), meta={"customer_id": customer.id})
    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = CustomerService(SqlEntityStore(db)).update_customer(
        customer_id, payload.name, payload.phone, payload.address, payload.discount_eligible
    )
    write_log(db, user_id=current_user.id, action="CUSTOMER_UPDATE", resource="customers",
              ip=client_ip(request), meta={"customer_id": customer_id})
    return customer


# List customers, optionally filtered by a case-insensitive name fragment
@router.get("", response_model=List[CustomerResponse])
def list_customers(
    name: Optional[str] = Query(None, description="Search by name"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CustomerService(SqlEntityStore(db)).list_customers(name)


@router.get("/discount/{eligible}", response_model=List[CustomerResponse])
def list_customers_by_discount(
    eligible: bool,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CustomerService(SqlEntityStore(db)).list_customers_by_discount(eligible)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return CustomerService(SqlEntityStore(db)).get_customer(customer_id)


# Ducks bought by the customer across all of their sales
@router.get("/{customer_id}/ducks", response_model=List[DuckResponse])
def list_customer_ducks(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return DuckService(SqlEntityStore(db)).list_ducks_by_customer(customer_id)


@router.get("/{customer_id}/sales", response_model=List[SaleResponse])
def list_customer_sales(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return SaleService(SqlEntityStore(db)).list_sales_by_customer(customer_id)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN)),
):
    CustomerService(SqlEntityStore(db)).delete_customer(customer_id)
    write_log(db, user_id=current_user.id, action="CUSTOMER_DELETE", resource="customers",
              ip=client_ip(request), meta={"customer_id": customer_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
