# backend/models/factories.py
"""
Record constructors.

Registration and sale timestamps are stamped here, when the record is
built, so nothing depends on database defaults or ORM event hooks.
Every factory accepts ``now`` so callers (and tests) control the clock.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from models.customer import Customer
from models.duck import Duck, DuckStatus
from models.sale import Sale, SaleItem
from models.seller import Seller
from models.users import User, UserRole


def _stamp(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def new_duck(name: str, price: Decimal, mother_id: Optional[int] = None, now: Optional[datetime] = None) -> Duck:
    return Duck(
        name=name,
        price=price,
        mother_id=mother_id,
        status=DuckStatus.AVAILABLE,
        registration_date=_stamp(now),
    )


def new_customer(name: str, cpf: str, phone: str, address: str,
                 discount_eligible: Optional[bool] = False, now: Optional[datetime] = None) -> Customer:
    return Customer(
        name=name,
        cpf=cpf,
        phone=phone,
        address=address,
        discount_eligible=bool(discount_eligible),
        registration_date=_stamp(now),
    )


def new_seller(name: str, cpf: str, employee_id: str, now: Optional[datetime] = None) -> Seller:
    return Seller(name=name, cpf=cpf, employee_id=employee_id, registration_date=_stamp(now))


def new_sale(ducks: List[Duck], customer: Customer, seller: Seller,
             original_price: Decimal, discount_amount: Decimal, now: Optional[datetime] = None) -> Sale:
    sale = Sale(
        customer=customer,
        seller=seller,
        original_price=original_price,
        discount_amount=discount_amount,
        final_price=original_price - discount_amount,
        sale_date=_stamp(now),
    )
    sale.items = [
        SaleItem(duck=duck, duck_id=duck.id, position=pos, unit_price=duck.price)
        for pos, duck in enumerate(ducks)
    ]
    return sale


def new_user(username: str, password_hash: str, name: str, role: UserRole,
             now: Optional[datetime] = None) -> User:
    return User(
        username=username,
        password_hash=password_hash,
        name=name,
        role=role,
        active=True,
        registration_date=_stamp(now),
    )
