# backend/services/customer_service.py
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from models.customer import Customer
from models.factories import new_customer
from repositories.entity_store import EntityStore
from utils.exceptions import BusinessRuleError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def create_customer(self, name: str, cpf: str, phone: str, address: str,
                        discount_eligible: Optional[bool] = False) -> Customer:
        logger.info("Creating customer: %s", name)
        _require(name=name, cpf=cpf, phone=phone, address=address)

        with self.store.atomic():
            if self.store.customer_cpf_exists(cpf.strip()):
                raise BusinessRuleError("CPF already registered", "CPF_ALREADY_REGISTERED")
            try:
                customer = self.store.save(new_customer(
                    name.strip(), cpf.strip(), phone.strip(), address.strip(), discount_eligible, now=self.clock()
                ))
            except IntegrityError:
                # Registered concurrently after the check above
                raise BusinessRuleError("CPF already registered", "CPF_ALREADY_REGISTERED")
        return customer

    def update_customer(self, customer_id: int, name: str, phone: str, address: str,
                        discount_eligible: bool) -> Customer:
        """CPF is the customer's identity and cannot be changed."""
        logger.info("Updating customer: %s", customer_id)
        _require(name=name, phone=phone, address=address)

        with self.store.atomic():
            customer = self.get_customer(customer_id)
            customer.name = name.strip()
            customer.phone = phone.strip()
            customer.address = address.strip()
            customer.discount_eligible = bool(discount_eligible)
            self.store.save(customer)
        return customer

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.store.find_customer_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    def list_customers(self, name: Optional[str] = None) -> List[Customer]:
        return self.store.find_all_customers(name=name)

    def list_customers_by_discount(self, eligible: bool) -> List[Customer]:
        logger.debug("Fetching customers by discount eligibility: %s", eligible)
        return self.store.find_customers_by_discount(eligible)

    def delete_customer(self, customer_id: int) -> None:
        logger.info("Deleting customer: %s", customer_id)
        with self.store.atomic():
            customer = self.get_customer(customer_id)
            if self.store.count_sales_by_customer(customer_id) > 0:
                raise BusinessRuleError("Customer with sales history cannot be deleted", "CUSTOMER_HAS_SALES")
            self.store.delete(customer)


def _require(**fields) -> None:
    for field, value in fields.items():
        if value is None or not str(value).strip():
            raise InvalidInputError(f"{field} is required")
