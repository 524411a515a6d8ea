"""
Tests for `services/sale_service.py`.

Covers:
- Pricing: original = sum of duck prices, 20% discount for eligible customers,
  final = original - discount, all decimal-exact.
- Validation order and error kinds (Invalid-Input, Not-Found, Business-Rule).
- Atomicity: a failed sale leaves no Sale row and no duck-status change.
- Lookups, immutability and deletion.
"""

from decimal import Decimal

import pytest

from models.duck import DuckStatus
from models.sale import Sale, SaleItem
from repositories.entity_store import SqlEntityStore
from services.sale_service import SaleService, calculate_discount, money
from utils.exceptions import BusinessRuleError, InvalidInputError, NotFoundError


@pytest.fixture
def service(store, clock) -> SaleService:
    return SaleService(store, clock)


def _sale_count(db) -> int:
    return db.query(Sale).count()


# ==================== PRICING ====================

def test_eligible_customer_gets_twenty_percent_discount(service, make_duck, make_customer, make_seller, db):
    a = make_duck("A", "100.00")
    b = make_duck("B", "50.00")
    customer = make_customer(eligible=True)
    seller = make_seller()

    sale = service.create_sale([a.id, b.id], customer.id, seller.id)

    assert sale.original_price == Decimal("150.00")
    assert sale.discount_amount == Decimal("30.00")
    assert sale.final_price == Decimal("120.00")
    db.refresh(a)
    db.refresh(b)
    assert a.status == DuckStatus.SOLD
    assert b.status == DuckStatus.SOLD


def test_non_eligible_customer_pays_full_price(service, make_duck, make_customer, make_seller):
    a = make_duck("A", "100.00")
    b = make_duck("B", "50.00")
    customer = make_customer(eligible=False)
    seller = make_seller()

    sale = service.create_sale([a.id, b.id], customer.id, seller.id)

    assert sale.original_price == Decimal("150.00")
    assert sale.discount_amount == Decimal("0.00")
    assert sale.final_price == Decimal("150.00")


def test_prices_add_without_float_drift(service, make_duck, make_customer, make_seller):
    ids = [make_duck(f"D{i}", "0.10").id for i in range(3)]
    sale = service.create_sale(ids, make_customer().id, make_seller().id)

    assert sale.original_price == Decimal("0.30")
    assert sale.final_price == Decimal("0.30")


@pytest.mark.parametrize(
    "original, expected",
    [
        (Decimal("150.00"), Decimal("30.00")),
        (Decimal("10.05"), Decimal("2.01")),
        (Decimal("0.03"), Decimal("0.01")),
        (Decimal("33.33"), Decimal("6.67")),
    ],
)
def test_discount_rounds_half_up_to_cents(original, expected):
    assert calculate_discount(original, True) == expected


def test_discount_is_zero_when_not_eligible():
    assert calculate_discount(Decimal("999.99"), False) == Decimal("0.00")


def test_money_rounds_half_up():
    assert money(Decimal("1.005")) == Decimal("1.01")
    assert money(Decimal("1.004")) == Decimal("1.00")


def test_discount_rate_can_be_injected(store, clock, make_duck, make_customer, make_seller):
    service = SaleService(store, clock, discount_rate=Decimal("0.10"))
    duck = make_duck("A", "100.00")

    sale = service.create_sale([duck.id], make_customer(eligible=True).id, make_seller().id)

    assert sale.discount_amount == Decimal("10.00")
    assert sale.final_price == Decimal("90.00")


# ==================== RECORD SHAPE ====================

def test_sale_keeps_every_duck_in_request_order(service, make_duck, make_customer, make_seller, clock):
    first = make_duck("First", "10.00")
    second = make_duck("Second", "20.00")
    third = make_duck("Third", "30.00")

    sale = service.create_sale([third.id, first.id, second.id], make_customer().id, make_seller().id)

    assert sale.duck_ids == [third.id, first.id, second.id]
    assert [item.unit_price for item in sale.items] == [Decimal("30.00"), Decimal("10.00"), Decimal("20.00")]
    assert sale.sale_date == clock.now


def test_sale_read_back_carries_all_ducks(service, make_duck, make_customer, make_seller, db):
    ids = [make_duck("A", "10.00").id, make_duck("B", "20.00").id]
    sale = service.create_sale(ids, make_customer().id, make_seller().id)
    db.expunge_all()

    loaded = service.get_sale(sale.id)

    assert loaded.duck_ids == ids
    assert [item.duck_name for item in loaded.items] == ["A", "B"]


# ==================== VALIDATION ====================

@pytest.mark.parametrize(
    "duck_ids, customer_id, seller_id",
    [
        ([], 1, 1),
        (None, 1, 1),
        ([1], None, 1),
        ([1], 1, None),
        ([1, 1], 1, 1),
    ],
)
def test_malformed_request_is_invalid_input(service, duck_ids, customer_id, seller_id):
    with pytest.raises(InvalidInputError):
        service.create_sale(duck_ids, customer_id, seller_id)


def test_missing_customer_is_not_found(service, make_duck, make_seller):
    duck = make_duck()
    with pytest.raises(NotFoundError, match="Customer not found"):
        service.create_sale([duck.id], 999, make_seller().id)


def test_missing_seller_is_not_found(service, make_duck, make_customer):
    duck = make_duck()
    with pytest.raises(NotFoundError, match="Seller not found"):
        service.create_sale([duck.id], make_customer().id, 999)


def test_customer_is_checked_before_seller(service, make_duck):
    duck = make_duck()
    with pytest.raises(NotFoundError, match="Customer not found"):
        service.create_sale([duck.id], 999, 999)


def test_unknown_duck_id_is_not_found(service, make_duck, make_customer, make_seller, db):
    duck = make_duck()
    with pytest.raises(NotFoundError, match="Some ducks not found"):
        service.create_sale([duck.id, 999], make_customer().id, make_seller().id)

    db.refresh(duck)
    assert duck.status == DuckStatus.AVAILABLE
    assert _sale_count(db) == 0


# ==================== AVAILABILITY AND ATOMICITY ====================

def test_sold_duck_cannot_be_sold_again(service, make_duck, make_customer, make_seller, db):
    duck = make_duck("Donald", "100.00")
    customer, seller = make_customer(), make_seller()
    service.create_sale([duck.id], customer.id, seller.id)

    with pytest.raises(BusinessRuleError, match="Duck Donald is not available") as exc_info:
        service.create_sale([duck.id], customer.id, seller.id)

    assert exc_info.value.code == "DUCK_NOT_AVAILABLE"
    assert _sale_count(db) == 1


def test_unavailable_duck_leaves_others_available(service, make_duck, make_customer, make_seller, db):
    sold = make_duck("Sold", "10.00")
    fresh = make_duck("Fresh", "20.00")
    customer, seller = make_customer(), make_seller()
    service.create_sale([sold.id], customer.id, seller.id)

    with pytest.raises(BusinessRuleError):
        service.create_sale([fresh.id, sold.id], customer.id, seller.id)

    db.refresh(fresh)
    assert fresh.status == DuckStatus.AVAILABLE
    assert _sale_count(db) == 1
    assert db.query(SaleItem).filter(SaleItem.duck_id == fresh.id).count() == 0


def test_reserved_duck_is_not_available(service, make_duck, make_customer, make_seller, db):
    duck = make_duck("Reserved")
    duck.status = DuckStatus.RESERVED
    db.commit()

    with pytest.raises(BusinessRuleError):
        service.create_sale([duck.id], make_customer().id, make_seller().id)


class _LosingRaceStore(SqlEntityStore):
    """Simulates another transaction selling the ducks between read and write."""

    def mark_ducks_sold(self, duck_ids):
        return 0


def test_lost_status_race_rolls_back_whole_sale(db, clock, make_duck, make_customer, make_seller):
    a = make_duck("A", "10.00")
    b = make_duck("B", "20.00")
    service = SaleService(_LosingRaceStore(db), clock)

    with pytest.raises(BusinessRuleError) as exc_info:
        service.create_sale([a.id, b.id], make_customer().id, make_seller().id)

    assert exc_info.value.code == "DUCK_NOT_AVAILABLE"
    assert _sale_count(db) == 0
    assert db.query(SaleItem).count() == 0
    db.refresh(a)
    db.refresh(b)
    assert a.status == DuckStatus.AVAILABLE
    assert b.status == DuckStatus.AVAILABLE


def test_sold_ducks_leave_available_for_sale_list(service, make_duck, make_customer, make_seller, store):
    sold = make_duck("Sold")
    kept = make_duck("Kept")
    service.create_sale([sold.id], make_customer().id, make_seller().id)

    assert [d.id for d in store.find_available_for_sale()] == [kept.id]


# ==================== LOOKUPS, UPDATE, DELETE ====================

def test_list_sales_in_store_order(service, make_duck, make_customer, make_seller, clock):
    customer, seller = make_customer(), make_seller()
    first = service.create_sale([make_duck("A").id], customer.id, seller.id)
    clock.advance(hours=1)
    second = service.create_sale([make_duck("B").id], customer.id, seller.id)

    assert [s.id for s in service.list_sales()] == [first.id, second.id]


def test_sales_by_customer_and_seller(service, make_duck, make_customer, make_seller):
    c1, c2 = make_customer("C1"), make_customer("C2")
    s1, s2 = make_seller("S1"), make_seller("S2")
    sale_1 = service.create_sale([make_duck("A").id], c1.id, s1.id)
    sale_2 = service.create_sale([make_duck("B").id], c2.id, s1.id)
    sale_3 = service.create_sale([make_duck("C").id], c1.id, s2.id)

    assert [s.id for s in service.list_sales_by_customer(c1.id)] == [sale_1.id, sale_3.id]
    assert [s.id for s in service.list_sales_by_seller(s1.id)] == [sale_1.id, sale_2.id]


def test_sales_of_unknown_parties_are_not_found(service):
    with pytest.raises(NotFoundError):
        service.list_sales_by_customer(404)
    with pytest.raises(NotFoundError):
        service.list_sales_by_seller(404)


def test_get_unknown_sale_is_not_found(service):
    with pytest.raises(NotFoundError, match="Sale not found"):
        service.get_sale(12345)


def test_sales_are_immutable(service, make_duck, make_customer, make_seller):
    sale = service.create_sale([make_duck().id], make_customer().id, make_seller().id)

    with pytest.raises(BusinessRuleError) as exc_info:
        service.update_sale(sale.id, duck_ids=[])

    assert exc_info.value.code == "SALE_IMMUTABLE"


def test_update_of_unknown_sale_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.update_sale(404)


def test_delete_sale_keeps_ducks_sold(service, make_duck, make_customer, make_seller, db):
    duck = make_duck()
    sale = service.create_sale([duck.id], make_customer().id, make_seller().id)

    service.delete_sale(sale.id)

    assert _sale_count(db) == 0
    assert db.query(SaleItem).count() == 0
    db.refresh(duck)
    assert duck.status == DuckStatus.SOLD


def test_delete_unknown_sale_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.delete_sale(404)


def test_duck_already_in_a_sale_is_not_sold_twice(service, make_duck, make_customer, make_seller, db):
    duck = make_duck("Twice", "10.00")
    customer, seller = make_customer(), make_seller()
    service.create_sale([duck.id], customer.id, seller.id)
    # Status flipped back outside the sale engine; the sale item still holds the duck
    duck.status = DuckStatus.AVAILABLE
    db.commit()

    with pytest.raises(BusinessRuleError) as exc_info:
        service.create_sale([duck.id], customer.id, seller.id)

    assert exc_info.value.code == "DUCK_NOT_AVAILABLE"
    assert _sale_count(db) == 1
    assert db.query(SaleItem).count() == 1
