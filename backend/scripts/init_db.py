#!/usr/bin/env python3
"""
Script: init_db.py
Purpose: Create the InvenHub schema and optionally load sample data

This script:
1. Creates tables and indexes (idempotent, CREATE ... IF NOT EXISTS)
2. With --seed, inserts sample suppliers, products and the default
   admin and staff users when they are missing

Usage:
    cd backend && source venv/bin/activate
    python scripts/init_db.py [--seed] [--drop]

Options:
    --seed    Insert sample data
    --drop    Drop all InvenHub tables first (destroys data)
"""

import argparse
import sys
from pathlib import Path

import psycopg2

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

load_dotenv(BACKEND_DIR / '.env')

from invenhub.core.auth import hash_password
from invenhub.core.config import settings
from invenhub.core.database import get_db_connection


TABLES = [
    'notifications',
    'purchase_order_items',
    'purchase_orders',
    'sale_items',
    'sales',
    'users',
    'products',
    'suppliers',
]

SCHEMA = """
CREATE TABLE IF NOT EXISTS suppliers (
    id SERIAL PRIMARY KEY,
    name VARCHAR(200) NOT NULL,
    contact_person VARCHAR(200) NOT NULL,
    email VARCHAR(255) NOT NULL,
    phone VARCHAR(50) NOT NULL,
    address TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS products (
    id SERIAL PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    barcode VARCHAR(64) NOT NULL UNIQUE,
    category VARCHAR(50) NOT NULL,
    price NUMERIC(12, 2) NOT NULL CHECK (price >= 0),
    cost_price NUMERIC(12, 2) NOT NULL CHECK (cost_price >= 0),
    stock INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
    image_url TEXT,
    supplier_id INTEGER REFERENCES suppliers(id) ON DELETE SET NULL,
    reorder_level INTEGER CHECK (reorder_level >= 0),
    auto_reorder BOOLEAN NOT NULL DEFAULT FALSE,
    target_stock_level INTEGER NOT NULL DEFAULT 0 CHECK (target_stock_level >= 0),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name VARCHAR(200) NOT NULL,
    email VARCHAR(255) NOT NULL UNIQUE,
    password_hash VARCHAR(255) NOT NULL,
    role VARCHAR(20) NOT NULL DEFAULT 'staff' CHECK (role IN ('admin', 'staff', 'guest')),
    avatar TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS sales (
    id SERIAL PRIMARY KEY,
    subtotal NUMERIC(12, 2) NOT NULL CHECK (subtotal >= 0),
    tax_amount NUMERIC(12, 2) NOT NULL DEFAULT 0 CHECK (tax_amount >= 0),
    total_amount NUMERIC(12, 2) NOT NULL CHECK (total_amount >= 0),
    payment_method VARCHAR(20) NOT NULL CHECK (payment_method IN ('cash', 'card', 'online')),
    channel VARCHAR(20) NOT NULL CHECK (channel IN ('in-store', 'online')),
    customer_id VARCHAR(100),
    customer_name VARCHAR(200),
    employee_id VARCHAR(100) NOT NULL,
    timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS sale_items (
    id SERIAL PRIMARY KEY,
    sale_id INTEGER NOT NULL REFERENCES sales(id) ON DELETE CASCADE,
    product_id INTEGER REFERENCES products(id) ON DELETE SET NULL,
    product_name VARCHAR(255) NOT NULL,
    product_category VARCHAR(50) NOT NULL,
    product_price NUMERIC(12, 2) NOT NULL,
    product_barcode VARCHAR(64) NOT NULL,
    product_cost_price NUMERIC(12, 2) NOT NULL DEFAULT 0,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    price_at_sale NUMERIC(12, 2) NOT NULL CHECK (price_at_sale >= 0)
);

CREATE TABLE IF NOT EXISTS purchase_orders (
    id SERIAL PRIMARY KEY,
    supplier_id INTEGER NOT NULL REFERENCES suppliers(id) ON DELETE RESTRICT,
    status VARCHAR(20) NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'ordered', 'received', 'canceled')),
    total_amount NUMERIC(12, 2) NOT NULL CHECK (total_amount >= 0),
    order_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    expected_delivery_date TIMESTAMPTZ,
    delivered_date TIMESTAMPTZ,
    is_auto_generated BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS purchase_order_items (
    id SERIAL PRIMARY KEY,
    purchase_order_id INTEGER NOT NULL REFERENCES purchase_orders(id) ON DELETE CASCADE,
    product_id INTEGER REFERENCES products(id) ON DELETE SET NULL,
    product_name VARCHAR(255),
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    unit_price NUMERIC(12, 2) NOT NULL CHECK (unit_price >= 0)
);

CREATE TABLE IF NOT EXISTS notifications (
    id SERIAL PRIMARY KEY,
    type VARCHAR(20) NOT NULL CHECK (type IN ('info', 'success', 'warning', 'error')),
    title VARCHAR(200) NOT NULL,
    message TEXT NOT NULL,
    link VARCHAR(255),
    dedupe_key VARCHAR(100),
    read BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);
CREATE INDEX IF NOT EXISTS idx_products_supplier ON products(supplier_id);
CREATE INDEX IF NOT EXISTS idx_sales_timestamp ON sales(timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);
CREATE INDEX IF NOT EXISTS idx_purchase_orders_status ON purchase_orders(status);
CREATE INDEX IF NOT EXISTS idx_purchase_order_items_order ON purchase_order_items(purchase_order_id);
CREATE INDEX IF NOT EXISTS idx_purchase_order_items_product ON purchase_order_items(product_id);
CREATE INDEX IF NOT EXISTS idx_notifications_unread ON notifications(read, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_notifications_dedupe ON notifications(dedupe_key) WHERE read = FALSE;
"""

SAMPLE_SUPPLIERS = [
    ('Jungle Threads Ltd', 'Ravi Menon', 'orders@junglethreads.in', '+91 80 4000 1001', '12 MG Road, Bengaluru'),
    ('Tribal Artisans Co-op', 'Sunita Netam', 'sales@tribalartisans.in', '+91 7782 22 1002', 'Kondagaon, Bastar, Chhattisgarh'),
    ('EcoBottle Supplies', 'Arjun Shah', 'hello@ecobottle.in', '+91 22 4000 1003', 'Andheri East, Mumbai'),
    ('Safari Gifts Inc', 'Meera Iyer', 'supply@safarigifts.in', '+91 44 4000 1004', 'T. Nagar, Chennai'),
    ('WildArt Prints', 'Kabir Das', 'prints@wildart.in', '+91 33 4000 1005', 'Park Street, Kolkata'),
    ('Jungle Stationery Co', 'Anita Rao', 'orders@junglestationery.in', '+91 40 4000 1006', 'Banjara Hills, Hyderabad'),
]

# (name, barcode, category, price, cost_price, stock, supplier, reorder_level)
SAMPLE_PRODUCTS = [
    ('Safari Adventure T-Shirt', '123456789001', 'Apparel', 29.99, 12.99, 42, 'Jungle Threads Ltd', 10),
    ('Handcrafted Bastar Art Elephant', '123456789002', 'Bastar Art', 149.99, 89.99, 15, 'Tribal Artisans Co-op', 5),
    ('Jungle Safari Water Bottle', '123456789003', 'Bottles', 24.99, 9.99, 78, 'EcoBottle Supplies', 20),
    ('Animal Keyring Set', '123456789004', 'Keyrings', 12.99, 4.99, 4, 'Safari Gifts Inc', 25),
    ('Safari Landscape Canvas Print', '123456789005', 'Canvas', 79.99, 39.99, 24, 'WildArt Prints', 8),
    ('Wildlife Notebook Set', '123456789006', 'Stationery', 18.99, 7.99, 67, 'Jungle Stationery Co', 15),
]

SAMPLE_USERS = [
    ('Admin User', 'admin@example.com', 'password', 'admin'),
    ('Staff User', 'staff@example.com', 'password', 'staff'),
]


def drop_tables(cursor):
    for table in TABLES:
        cursor.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
        print(f"  dropped {table}")


def seed(cursor):
    supplier_ids = {}
    for name, contact, email, phone, address in SAMPLE_SUPPLIERS:
        cursor.execute("SELECT id FROM suppliers WHERE name = %s", (name,))
        row = cursor.fetchone()
        if row:
            supplier_ids[name] = row[0]
            continue

        cursor.execute("""
            INSERT INTO suppliers (name, contact_person, email, phone, address, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
            RETURNING id
        """, (name, contact, email, phone, address))
        supplier_ids[name] = cursor.fetchone()[0]
        print(f"  supplier: {name}")

    for name, barcode, category, price, cost, stock, supplier, reorder_level in SAMPLE_PRODUCTS:
        cursor.execute("""
            INSERT INTO products (
                name, barcode, category, price, cost_price, stock,
                supplier_id, reorder_level, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT (barcode) DO NOTHING
        """, (name, barcode, category, price, cost, stock, supplier_ids[supplier], reorder_level))
        if cursor.rowcount:
            print(f"  product: {name}")

    for name, email, password, role in SAMPLE_USERS:
        cursor.execute("""
            INSERT INTO users (name, email, password_hash, role, avatar, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT (email) DO NOTHING
        """, (name, email, hash_password(password), role, settings.DEFAULT_AVATAR_URL))
        if cursor.rowcount:
            print(f"  user: {email} ({role})")


def main():
    parser = argparse.ArgumentParser(description="Create the InvenHub database schema")
    parser.add_argument('--seed', action='store_true', help="Insert sample data")
    parser.add_argument('--drop', action='store_true', help="Drop existing tables first")
    args = parser.parse_args()

    conn = get_db_connection()
    cursor = conn.cursor()

    try:
        if args.drop:
            print("Dropping tables...")
            drop_tables(cursor)

        print("Creating schema...")
        cursor.execute(SCHEMA)

        if args.seed:
            print("Seeding sample data...")
            seed(cursor)

        conn.commit()
        print("✅ Database ready")

    except psycopg2.Error as e:
        conn.rollback()
        print(f"❌ Database initialization failed: {e}")
        sys.exit(1)
    finally:
        cursor.close()
        conn.close()


if __name__ == "__main__":
    main()
