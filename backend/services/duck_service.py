# backend/services/duck_service.py
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

from models.duck import Duck, DuckStatus
from models.factories import new_duck
from repositories.entity_store import EntityStore
from utils.exceptions import BusinessRuleError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class DuckService:

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def create_duck(self, name: str, price, mother_id: Optional[int] = None) -> Duck:
        logger.info("Creating duck: %s", name)
        name, price = self._validate(name, price)

        with self.store.atomic():
            self._check_mother(mother_id)
            duck = self.store.save(new_duck(name, price, mother_id, now=self.clock()))

        logger.info("Duck created with id %s", duck.id)
        return duck

    def update_duck(self, duck_id: int, name: str, price, mother_id: Optional[int] = None) -> Duck:
        """Edit name, price and lineage. Status is owned by the sale engine and never changes here."""
        logger.info("Updating duck: %s", duck_id)
        name, price = self._validate(name, price)
        if mother_id is not None and mother_id == duck_id:
            raise InvalidInputError("A duck cannot be its own mother")

        with self.store.atomic():
            duck = self.get_duck(duck_id)
            self._check_mother(mother_id)
            duck.name = name
            duck.price = price
            duck.mother_id = mother_id
            self.store.save(duck)
        return duck

    def get_duck(self, duck_id: int) -> Duck:
        logger.debug("Fetching duck by id: %s", duck_id)
        duck = self.store.find_duck_by_id(duck_id)
        if duck is None:
            raise NotFoundError(f"Duck not found with id: {duck_id}")
        return duck

    def list_ducks(self) -> List[Duck]:
        return self.store.find_all_ducks()

    def list_ducks_by_status(self, status: DuckStatus) -> List[Duck]:
        logger.debug("Fetching ducks with status: %s", status)
        return self.store.find_ducks_by_status(status)

    def list_available_for_sale(self) -> List[Duck]:
        return self.store.find_available_for_sale()

    def list_offspring(self, mother_id: int) -> List[Duck]:
        self.get_duck(mother_id)
        return self.store.find_ducks_by_mother(mother_id)

    def list_ducks_by_customer(self, customer_id: int) -> List[Duck]:
        if self.store.find_customer_by_id(customer_id) is None:
            raise NotFoundError("Customer not found")
        return self.store.find_ducks_by_customer(customer_id)

    def delete_duck(self, duck_id: int) -> None:
        logger.info("Deleting duck: %s", duck_id)
        with self.store.atomic():
            duck = self.get_duck(duck_id)
            if duck.status == DuckStatus.SOLD:
                raise BusinessRuleError("A sold duck cannot be deleted", "DUCK_SOLD")
            if self.store.find_ducks_by_mother(duck_id):
                raise BusinessRuleError("A duck with registered offspring cannot be deleted", "DUCK_HAS_OFFSPRING")
            self.store.delete(duck)

    # ==================== HELPERS ====================

    def _validate(self, name: Optional[str], price):
        if name is None or not name.strip():
            raise InvalidInputError("Duck name must not be empty")
        try:
            price = Decimal(str(price)) if price is not None else None
        except InvalidOperation:
            price = None
        if price is None or not price.is_finite() or price <= 0:
            raise InvalidInputError("Duck price must be greater than zero")
        return name.strip(), price

    def _check_mother(self, mother_id: Optional[int]) -> None:
        if mother_id is not None and self.store.find_duck_by_id(mother_id) is None:
            raise NotFoundError("Mother duck not found")
