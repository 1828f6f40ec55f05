"""
Table definitions for the storefront (applied by scripts/init_db.py).

Order totals and line quantities are unscaled ``numeric`` so a stored total
is exactly the sum of price * quantity over its order_items rows.
"""
from __future__ import annotations

from . import get_pool

DDL = """
CREATE EXTENSION IF NOT EXISTS pgcrypto;

CREATE TABLE IF NOT EXISTS profiles (
    id          text PRIMARY KEY,
    name        text,
    email       text,
    role        text NOT NULL DEFAULT 'client' CHECK (role IN ('client', 'admin')),
    phone       text,
    address     text,
    created_at  timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS categories (
    id          text PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name        text NOT NULL,
    image       text
);

CREATE TABLE IF NOT EXISTS products (
    id          text PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name        text NOT NULL,
    description text,
    price       numeric(12, 2) NOT NULL CHECK (price >= 0),
    stock       numeric(12, 2) NOT NULL DEFAULT 0,
    images      jsonb NOT NULL DEFAULT '[]'::jsonb,
    metadata    jsonb,
    created_at  timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS orders (
    id               text PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id          text NOT NULL,
    customer_name    text NOT NULL,
    delivery_address text NOT NULL,
    phone_number     text NOT NULL,
    payment_method   text NOT NULL CHECK (payment_method IN ('online', 'onplace')),
    total_amount     numeric NOT NULL,
    status           text NOT NULL DEFAULT 'pending'
                     CHECK (status IN ('pending', 'validated', 'delivered')),
    created_at       timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS orders_user_id_idx ON orders (user_id);

CREATE TABLE IF NOT EXISTS order_items (
    id           text PRIMARY KEY DEFAULT gen_random_uuid()::text,
    order_id     text NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
    product_id   text NOT NULL,
    product_name text NOT NULL,
    unit         text NOT NULL,
    quantity     numeric NOT NULL CHECK (quantity > 0),
    price        numeric(12, 2) NOT NULL
);
CREATE INDEX IF NOT EXISTS order_items_order_id_idx ON order_items (order_id);
"""


async def create_schema() -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(DDL)
