# backend/services/seller_service.py
import logging
from datetime import datetime
from typing import Callable, List

from sqlalchemy.exc import IntegrityError

from models.factories import new_seller
from models.seller import Seller
from repositories.entity_store import EntityStore
from services.customer_service import _require
from utils.exceptions import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


class SellerService:

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def create_seller(self, name: str, cpf: str, employee_id: str) -> Seller:
        logger.info("Creating seller: %s", name)
        _require(name=name, cpf=cpf, employee_id=employee_id)
        cpf, employee_id = cpf.strip(), employee_id.strip()

        with self.store.atomic():
            if self.store.seller_cpf_exists(cpf):
                raise BusinessRuleError("CPF already registered", "CPF_ALREADY_REGISTERED")
            if self.store.employee_id_exists(employee_id):
                raise BusinessRuleError("Employee ID already registered", "EMPLOYEE_ID_ALREADY_REGISTERED")
            try:
                seller = self.store.save(new_seller(name.strip(), cpf, employee_id, now=self.clock()))
            except IntegrityError as exc:
                # Registered concurrently after the checks above
                if "employee_id" in str(exc.orig):
                    raise BusinessRuleError("Employee ID already registered", "EMPLOYEE_ID_ALREADY_REGISTERED")
                raise BusinessRuleError("CPF already registered", "CPF_ALREADY_REGISTERED")
        return seller

    def update_seller(self, seller_id: int, name: str) -> Seller:
        """Only the name is editable; CPF and employee id identify the seller."""
        logger.info("Updating seller: %s", seller_id)
        _require(name=name)
        with self.store.atomic():
            seller = self.get_seller(seller_id)
            seller.name = name.strip()
            self.store.save(seller)
        return seller

    def get_seller(self, seller_id: int) -> Seller:
        seller = self.store.find_seller_by_id(seller_id)
        if seller is None:
            raise NotFoundError("Seller not found")
        return seller

    def list_sellers(self) -> List[Seller]:
        return self.store.find_all_sellers()

    def delete_seller(self, seller_id: int) -> None:
        logger.info("Deleting seller: %s", seller_id)
        with self.store.atomic():
            seller = self.get_seller(seller_id)
            if self.store.count_sales_by_seller(seller_id) > 0:
                raise BusinessRuleError("Seller with sales history cannot be deleted", "SELLER_HAS_SALES")
            self.store.delete(seller)
