# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole
from repositories.entity_store import SqlEntityStore
from schemas import user as schemas
from services.auth_service import AuthService
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/auth", tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    service = AuthService(SqlEntityStore(db))
    user = service.authenticate(payload.username, payload.password)

    # Validate credentials and log failure on error
    if user is None:
        write_log(db, user_id=None, action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"username": payload.username})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = service.issue_token(user)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"username": user.username})

    return {"access_token": access_token, "token_type": "bearer", "user": user}


# Create a new API account (admin only)
@router.post("/users", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(UserRole.ADMIN)),
):
    user = AuthService(SqlEntityStore(db)).create_user(
        payload.username, payload.password, payload.name, payload.role
    )
    write_log(db, user_id=current_user.id, action="USER_CREATE", resource="auth",
              ip=client_ip(request), meta={"new_user_id": user.id, "role": user.role.value})
    return user


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
