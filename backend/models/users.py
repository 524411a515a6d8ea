# backend/models/users.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from database import Base

class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    MANAGER = "MANAGER"

# Represents an API account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    registration_date = Column(DateTime, nullable=False)
