"""Reset database to clean state."""
from sqlalchemy import text

from purifier.lib.db import engine

print("Resetting database...")

with engine.connect() as conn:
    # Drop all tables
    for table in ("invoices", "services", "orders", "products", "customers", "users", "alembic_version"):
        conn.execute(text(f"DROP TABLE IF EXISTS {table} CASCADE"))

    # Drop all enum types
    for enum_type in (
        "invoice_status",
        "invoice_type",
        "service_status",
        "service_type",
        "order_status",
        "product_status",
        "user_role",
    ):
        conn.execute(text(f"DROP TYPE IF EXISTS {enum_type} CASCADE"))

    conn.commit()
    print("Database reset complete! Run `alembic upgrade head` to recreate the schema.")
