# backend/repositories/entity_store.py
"""
Entity Store: the persistence contract used by the service layer.

Services receive an ``EntityStore`` at construction time and never touch
the session directly, so tests can hand them any object that satisfies
the protocol. ``SqlEntityStore`` is the SQLAlchemy implementation used by
the HTTP layer.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Protocol, Sequence

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload, selectinload

from models.customer import Customer
from models.duck import Duck, DuckStatus
from models.sale import Sale, SaleItem
from models.seller import Seller
from models.users import User

logger = logging.getLogger(__name__)


class EntityStore(Protocol):
    def atomic(self): ...
    def save(self, entity): ...
    def delete(self, entity) -> None: ...

    # Ducks
    def find_duck_by_id(self, duck_id: int) -> Optional[Duck]: ...
    def find_ducks_by_ids(self, duck_ids: Sequence[int], lock: bool = False) -> List[Duck]: ...
    def find_all_ducks(self) -> List[Duck]: ...
    def find_ducks_by_status(self, status: DuckStatus) -> List[Duck]: ...
    def find_available_for_sale(self) -> List[Duck]: ...
    def find_ducks_by_mother(self, mother_id: int) -> List[Duck]: ...
    def find_ducks_by_customer(self, customer_id: int) -> List[Duck]: ...
    def mark_ducks_sold(self, duck_ids: Sequence[int]) -> int: ...

    # Customers
    def find_customer_by_id(self, customer_id: int) -> Optional[Customer]: ...
    def find_all_customers(self, name: Optional[str] = None) -> List[Customer]: ...
    def find_customers_by_discount(self, eligible: bool) -> List[Customer]: ...
    def customer_cpf_exists(self, cpf: str) -> bool: ...
    def count_sales_by_customer(self, customer_id: int) -> int: ...

    # Sellers
    def find_seller_by_id(self, seller_id: int) -> Optional[Seller]: ...
    def find_all_sellers(self) -> List[Seller]: ...
    def seller_cpf_exists(self, cpf: str) -> bool: ...
    def employee_id_exists(self, employee_id: str) -> bool: ...
    def count_sales_by_seller(self, seller_id: int) -> int: ...

    # Sales
    def find_sale_by_id(self, sale_id: int) -> Optional[Sale]: ...
    def find_all_sales(self) -> List[Sale]: ...
    def find_sales_by_customer(self, customer_id: int) -> List[Sale]: ...
    def find_sales_by_seller(self, seller_id: int) -> List[Sale]: ...
    def find_sales_in_range(self, start: datetime, end: datetime) -> List[Sale]: ...
    def find_sales_by_seller_in_range(self, seller_id: int, start: datetime, end: datetime) -> List[Sale]: ...

    # Users
    def find_user_by_id(self, user_id: int) -> Optional[User]: ...
    def find_user_by_username(self, username: str) -> Optional[User]: ...
    def count_users(self) -> int: ...


class SqlEntityStore:
    """EntityStore over a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== TRANSACTIONS ====================

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Commit everything done inside the block, or nothing at all."""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def save(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity) -> None:
        self.db.delete(entity)
        self.db.flush()

    # ==================== DUCKS ====================

    def find_duck_by_id(self, duck_id: int) -> Optional[Duck]:
        return self.db.query(Duck).filter(Duck.id == duck_id).first()

    def find_ducks_by_ids(self, duck_ids: Sequence[int], lock: bool = False) -> List[Duck]:
        if not duck_ids:
            return []
        query = self.db.query(Duck).filter(Duck.id.in_(list(duck_ids))).order_by(Duck.id)
        if lock:
            # Row locks on backends that support them; ignored by SQLite
            query = query.with_for_update()
        return query.all()

    def find_all_ducks(self) -> List[Duck]:
        return self.db.query(Duck).order_by(Duck.id).all()

    def find_ducks_by_status(self, status: DuckStatus) -> List[Duck]:
        return self.db.query(Duck).filter(Duck.status == status).order_by(Duck.id).all()

    def find_available_for_sale(self) -> List[Duck]:
        sold_ids = self.db.query(SaleItem.duck_id)
        return (self.db.query(Duck)
                .filter(Duck.status == DuckStatus.AVAILABLE, ~Duck.id.in_(sold_ids))
                .order_by(Duck.id)
                .all())

    def find_ducks_by_mother(self, mother_id: int) -> List[Duck]:
        return self.db.query(Duck).filter(Duck.mother_id == mother_id).order_by(Duck.id).all()

    def find_ducks_by_customer(self, customer_id: int) -> List[Duck]:
        return (self.db.query(Duck)
                .join(SaleItem, SaleItem.duck_id == Duck.id)
                .join(Sale, Sale.id == SaleItem.sale_id)
                .filter(Sale.customer_id == customer_id)
                .order_by(Sale.sale_date, SaleItem.position)
                .all())

    def mark_ducks_sold(self, duck_ids: Sequence[int]) -> int:
        """
        Conditional AVAILABLE -> SOLD transition.

        Returns the number of rows actually switched; fewer than
        ``len(duck_ids)`` means another transaction sold one of them first.
        """
        stmt = (update(Duck)
                .where(Duck.id.in_(list(duck_ids)), Duck.status == DuckStatus.AVAILABLE)
                .values(status=DuckStatus.SOLD)
                .execution_options(synchronize_session=False))
        result = self.db.execute(stmt)
        # Reload status on ducks already held by this session
        ids = set(duck_ids)
        for obj in list(self.db.identity_map.values()):
            if isinstance(obj, Duck) and obj.id in ids:
                self.db.expire(obj, ["status"])
        logger.debug("Marked %s of %s ducks as SOLD", result.rowcount, len(duck_ids))
        return result.rowcount

    # ==================== CUSTOMERS ====================

    def find_customer_by_id(self, customer_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def find_all_customers(self, name: Optional[str] = None) -> List[Customer]:
        query = self.db.query(Customer)
        if name:
            query = query.filter(Customer.name.ilike(f"%{name}%"))
        return query.order_by(Customer.id).all()

    def find_customers_by_discount(self, eligible: bool) -> List[Customer]:
        return (self.db.query(Customer)
                .filter(Customer.discount_eligible == eligible)
                .order_by(Customer.id)
                .all())

    def customer_cpf_exists(self, cpf: str) -> bool:
        return self.db.query(Customer.id).filter(Customer.cpf == cpf).first() is not None

    def count_sales_by_customer(self, customer_id: int) -> int:
        return self.db.query(func.count(Sale.id)).filter(Sale.customer_id == customer_id).scalar() or 0

    # ==================== SELLERS ====================

    def find_seller_by_id(self, seller_id: int) -> Optional[Seller]:
        return self.db.query(Seller).filter(Seller.id == seller_id).first()

    def find_all_sellers(self) -> List[Seller]:
        return self.db.query(Seller).order_by(Seller.id).all()

    def seller_cpf_exists(self, cpf: str) -> bool:
        return self.db.query(Seller.id).filter(Seller.cpf == cpf).first() is not None

    def employee_id_exists(self, employee_id: str) -> bool:
        return self.db.query(Seller.id).filter(Seller.employee_id == employee_id).first() is not None

    def count_sales_by_seller(self, seller_id: int) -> int:
        return self.db.query(func.count(Sale.id)).filter(Sale.seller_id == seller_id).scalar() or 0

    # ==================== SALES ====================

    def _sales(self):
        return self.db.query(Sale).options(
            joinedload(Sale.customer),
            joinedload(Sale.seller),
            selectinload(Sale.items).joinedload(SaleItem.duck),
        )

    def find_sale_by_id(self, sale_id: int) -> Optional[Sale]:
        return self._sales().filter(Sale.id == sale_id).first()

    def find_all_sales(self) -> List[Sale]:
        return self._sales().order_by(Sale.sale_date, Sale.id).all()

    def find_sales_by_customer(self, customer_id: int) -> List[Sale]:
        return self._sales().filter(Sale.customer_id == customer_id).order_by(Sale.sale_date, Sale.id).all()

    def find_sales_by_seller(self, seller_id: int) -> List[Sale]:
        return self._sales().filter(Sale.seller_id == seller_id).order_by(Sale.sale_date, Sale.id).all()

    def find_sales_in_range(self, start: datetime, end: datetime) -> List[Sale]:
        return (self._sales()
                .filter(Sale.sale_date >= start, Sale.sale_date <= end)
                .order_by(Sale.sale_date, Sale.id)
                .all())

    def find_sales_by_seller_in_range(self, seller_id: int, start: datetime, end: datetime) -> List[Sale]:
        return (self._sales()
                .filter(Sale.seller_id == seller_id, Sale.sale_date >= start, Sale.sale_date <= end)
                .order_by(Sale.sale_date, Sale.id)
                .all())

    # ==================== USERS ====================

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()

    def count_users(self) -> int:
        return self.db.query(func.count(User.id)).scalar() or 0
