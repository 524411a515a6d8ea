# backend/services/sale_service.py
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from config import settings
from models.duck import Duck, DuckStatus
from models.factories import new_sale
from models.sale import Sale
from repositories.entity_store import EntityStore
from utils.exceptions import BusinessRuleError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Round a monetary amount to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discount(original_price: Decimal, eligible: bool, rate: Decimal = None) -> Decimal:
    if not eligible:
        return money(0)
    rate = settings.DISCOUNT_RATE if rate is None else rate
    return money(original_price * rate)


class SaleService:
    """
    Sale transaction engine.

    Turns (duck ids, customer id, seller id) into one persisted, priced
    ``Sale`` and flips every duck involved from AVAILABLE to SOLD, all in
    one transaction.
    """

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now,
                 discount_rate: Optional[Decimal] = None):
        self.store = store
        self.clock = clock
        self.discount_rate = settings.DISCOUNT_RATE if discount_rate is None else discount_rate

    def create_sale(self, duck_ids: Sequence[int], customer_id: Optional[int], seller_id: Optional[int]) -> Sale:
        logger.info("Creating sale: ducks=%s customer=%s seller=%s", list(duck_ids or []), customer_id, seller_id)

        # 1. Input shape
        if not duck_ids:
            raise InvalidInputError("At least one duck must be selected for sale")
        if customer_id is None:
            raise InvalidInputError("Customer ID is required")
        if seller_id is None:
            raise InvalidInputError("Seller ID is required")
        if len(set(duck_ids)) != len(duck_ids):
            raise InvalidInputError("Duplicate duck ids in sale request")

        with self.store.atomic():
            # 2-3. Parties
            customer = self.store.find_customer_by_id(customer_id)
            if customer is None:
                raise NotFoundError("Customer not found")
            seller = self.store.find_seller_by_id(seller_id)
            if seller is None:
                raise NotFoundError("Seller not found")

            # 4. Ducks, locked for the rest of the transaction
            found = self.store.find_ducks_by_ids(duck_ids, lock=True)
            if len(found) != len(duck_ids):
                raise NotFoundError("Some ducks not found")
            by_id = {duck.id: duck for duck in found}
            ducks: List[Duck] = [by_id[duck_id] for duck_id in duck_ids]

            # 5. Availability
            for duck in ducks:
                if duck.status != DuckStatus.AVAILABLE:
                    raise BusinessRuleError(f"Duck {duck.name} is not available", "DUCK_NOT_AVAILABLE")

            original_price = money(sum((Decimal(duck.price) for duck in ducks), Decimal("0")))
            discount_amount = calculate_discount(original_price, customer.discount_eligible, self.discount_rate)

            sale = new_sale(ducks, customer, seller, original_price, discount_amount, now=self.clock())
            try:
                self.store.save(sale)
            except IntegrityError:
                # A duck can belong to one sale only
                raise BusinessRuleError("One or more ducks were sold by another transaction", "DUCK_NOT_AVAILABLE")

            # Conditional transition guards against a concurrent sale of the same duck
            switched = self.store.mark_ducks_sold(duck_ids)
            if switched != len(duck_ids):
                raise BusinessRuleError("One or more ducks were sold by another transaction", "DUCK_NOT_AVAILABLE")

        logger.info("Sale created successfully: %s (final price %s)", sale.id, sale.final_price)
        return sale

    def update_sale(self, sale_id: int, *args, **kwargs) -> Sale:
        """Sales are immutable once recorded; delete and re-create instead."""
        self.get_sale(sale_id)
        raise BusinessRuleError("Sales cannot be modified after creation", "SALE_IMMUTABLE")

    def get_sale(self, sale_id: int) -> Sale:
        logger.debug("Fetching sale by id: %s", sale_id)
        sale = self.store.find_sale_by_id(sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")
        return sale

    def list_sales(self) -> List[Sale]:
        logger.debug("Fetching all sales")
        return self.store.find_all_sales()

    def list_sales_by_customer(self, customer_id: int) -> List[Sale]:
        logger.debug("Fetching sales by customer id: %s", customer_id)
        if self.store.find_customer_by_id(customer_id) is None:
            raise NotFoundError("Customer not found")
        return self.store.find_sales_by_customer(customer_id)

    def list_sales_by_seller(self, seller_id: int) -> List[Sale]:
        logger.debug("Fetching sales by seller id: %s", seller_id)
        if self.store.find_seller_by_id(seller_id) is None:
            raise NotFoundError("Seller not found")
        return self.store.find_sales_by_seller(seller_id)

    def delete_sale(self, sale_id: int) -> None:
        logger.info("Deleting sale: %s", sale_id)
        with self.store.atomic():
            sale = self.store.find_sale_by_id(sale_id)
            if sale is None:
                raise NotFoundError("Sale not found")
            self.store.delete(sale)
