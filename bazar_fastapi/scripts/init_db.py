import argparse, asyncio, json
from decimal import Decimal

from bazar.db import close_pool
from bazar.db.schema import DDL, create_schema
from bazar.db.store import PostgresStore
from bazar.services.fabrics import FABRIC_CONFIG


async def seed_categories(store: PostgresStore) -> int:
    existing = {c["name"].lower() for c in await store.query("categories")}
    rows = [{"name": spec.name} for spec in FABRIC_CONFIG.values() if spec.name.lower() not in existing]
    await store.insert_many("categories", rows)
    return len(rows)


async def load_products(store: PostgresStore, path: str) -> int:
    with open(path, "r", encoding="utf-8") as f:
        products = json.load(f)
    rows = []
    for p in products:
        rows.append({
            "name": p["name"],
            "description": p.get("description"),
            "price": Decimal(str(p["price"])),
            "stock": Decimal(str(p.get("stock", 0))),
            "images": p.get("images") or [],
            "metadata": p.get("metadata"),
        })
    await store.insert_many("products", rows)
    return len(rows)


async def main(args):
    try:
        await create_schema()
        print("Schema ready")
        store = PostgresStore()
        if args.seed_categories:
            print(f"Inserted {await seed_categories(store)} categories")
        if args.products:
            print(f"Inserted {await load_products(store, args.products)} products from {args.products}")
    finally:
        await close_pool()


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Create the storefront tables (uses DATABASE_URL)")
    ap.add_argument('--print-sql', action='store_true', help='Only print the DDL')
    ap.add_argument('--seed-categories', action='store_true', help='One category per fabric type')
    ap.add_argument('--products', help='JSON file with a list of products to insert')
    args = ap.parse_args()
    if args.print_sql:
        print(DDL)
    else:
        asyncio.run(main(args))
