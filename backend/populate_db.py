import os
import random
import sys
from datetime import datetime, timedelta

import pandas as pd

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from config import settings
from database import SessionLocal, init_db
from models.customer import Customer
from models.duck import Duck
from models.sale import Sale, SaleItem
from models.seller import Seller
from repositories.entity_store import SqlEntityStore
from services.auth_service import AuthService
from services.customer_service import CustomerService
from services.duck_service import DuckService
from services.sale_service import SaleService
from services.seller_service import SellerService

# Configuration
DATA_DIR = os.path.join(os.path.dirname(__file__), "data_source")
SALES_TO_CREATE = 5  # Each sale takes one or two ducks
SALE_DATE_WINDOW_DAYS = 60  # Sales are spread over the last N days
# End Configuration


def _read(name: str) -> pd.DataFrame:
    return pd.read_csv(os.path.join(DATA_DIR, name), dtype=str, keep_default_na=False)


def load_all_data(session):
    """Loads the demo CSVs and registers them through the services."""
    store = SqlEntityStore(session)

    # Mothers must exist before their offspring, so founders go first
    ducks_df = _read("ducks.csv")
    ducks_df["has_mother"] = ducks_df["mother"].str.strip() != ""
    duck_ids = {}
    duck_service = DuckService(store)
    for _, row in ducks_df.sort_values("has_mother", kind="stable").iterrows():
        mother_id = duck_ids.get(row["mother"]) if row["has_mother"] else None
        duck = duck_service.create_duck(row["name"], row["price"], mother_id)
        duck_ids[row["name"]] = duck.id
    print(f"Inserted {len(duck_ids)} ducks.")

    customers_df = _read("customers.csv")
    customers_df["discount_eligible"] = customers_df["discount_eligible"].str.lower() == "true"
    customer_service = CustomerService(store)
    customers = [
        customer_service.create_customer(r["name"], r["cpf"], r["phone"], r["address"], bool(r["discount_eligible"]))
        for _, r in customers_df.iterrows()
    ]
    print(f"Inserted {len(customers)} customers.")

    seller_service = SellerService(store)
    sellers = [
        seller_service.create_seller(r["name"], r["cpf"], r["employee_id"])
        for _, r in _read("sellers.csv").iterrows()
    ]
    print(f"Inserted {len(sellers)} sellers.")

    # Offspring are sold, founders stay in stock
    for_sale = [duck_ids[name] for name in ducks_df.loc[ducks_df["has_mother"], "name"]]
    random.shuffle(for_sale)
    now = datetime.now()
    created = 0
    for _ in range(SALES_TO_CREATE):
        if not for_sale:
            break
        take = min(len(for_sale), random.randint(1, 2))
        batch, for_sale = for_sale[:take], for_sale[take:]
        sale_date = now - timedelta(days=random.randint(0, SALE_DATE_WINDOW_DAYS), hours=random.randint(0, 23))
        sale = SaleService(store, clock=lambda: sale_date).create_sale(
            batch, random.choice(customers).id, random.choice(sellers).id
        )
        created += 1
        print(f"  Sale {sale.id}: ducks {sale.duck_ids}, final price {sale.final_price}")
    print(f"Inserted {created} sales.")


def populate_database():
    """Main execution function to populate database."""
    init_db()

    # Clean existing farm data
    # Users are preserved
    session = SessionLocal()
    try:
        session.query(SaleItem).delete()
        session.query(Sale).delete()
        session.query(Duck).update({Duck.mother_id: None})
        session.query(Duck).delete()
        session.query(Customer).delete()
        session.query(Seller).delete()
        session.commit()

        AuthService(SqlEntityStore(session)).ensure_admin(
            settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, settings.ADMIN_NAME
        )
        load_all_data(session)
    finally:
        session.close()


if __name__ == "__main__":
    populate_database()
