# backend/routes/ducks.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.duck import DuckStatus
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from schemas.duck import DuckCreate, DuckResponse, DuckUpdate
from services.duck_service import DuckService
from utils.audit import client_ip, write_log
from utils.tokenJWT import ANY_ROLE, role_required

router = APIRouter(prefix="/ducks", tags=["Ducks"])

_can_edit = role_required(UserRole.ADMIN, UserRole.SELLER)
_can_view = role_required(*ANY_ROLE)


def _service(db: Session) -> DuckService:
    return DuckService(SqlEntityStore(db))


@router.post("", response_model=DuckResponse, status_code=status.HTTP_201_CREATED)
def create_duck(
    payload: DuckCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_can_edit),
):
    duck = _service(db).create_duck(payload.name, payload.price, payload.mother_id)
    write_log(db, user_id=current_user.id, action="DUCK_CREATE", resource="ducks",
              ip=client_ip(request), meta={"duck_id": duck.id})
    return duck


@router.put("/{duck_id}", response_model=DuckResponse)
def update_duck(
    duck_id: int,
    payload: DuckUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_can_edit),
):
    duck = _service(db).update_duck(duck_id, payload.name, payload.price, payload.mother_id)
    write_log(db, user_id=current_user.id, action="DUCK_UPDATE", resource="ducks",
              ip=client_ip(request), meta={"duck_id": duck_id})
    return duck


@router.get("", response_model=List[DuckResponse])
def list_ducks(db: Session = Depends(get_db), current_user: User = Depends(_can_view)):
    return _service(db).list_ducks()


# Declared before /{duck_id} so the literal paths win
@router.get("/available", response_model=List[DuckResponse])
def list_available_ducks(db: Session = Depends(get_db), current_user: User = Depends(_can_view)):
    return _service(db).list_available_for_sale()


@router.get("/status/{duck_status}", response_model=List[DuckResponse])
def list_ducks_by_status(
    duck_status: DuckStatus,
    db: Session = Depends(get_db),
    current_user: User = Depends(_can_view),
):
    return _service(db).list_ducks_by_status(duck_status)


@router.get("/{duck_id}", response_model=DuckResponse)
def get_duck(duck_id: int, db: Session = Depends(get_db), current_user: User = Depends(_can_view)):
    return _service(db).get_duck(duck_id)


@router.get("/{duck_id}/offspring", response_model=List[DuckResponse])
def list_offspring(duck_id: int, db: Session = Depends(get_db), current_user: User = Depends(_can_view)):
    return _service(db).list_offspring(duck_id)


@router.delete("/{duck_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_duck(
    duck_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN)),
):
    _service(db).delete_duck(duck_id)
    write_log(db, user_id=current_user.id, action="DUCK_DELETE", resource="ducks",
              ip=client_ip(request), meta={"duck_id": duck_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
