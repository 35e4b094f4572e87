import sqlite3
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from data_paths import DATA_ROOT, ensure_data_root

DATA_DIR = DATA_ROOT
DATABASE_FILE = DATA_DIR / 'cafe.db'


def get_db_connection():
    """Establishes a connection to the SQLite database."""
    ensure_data_root()
    conn = sqlite3.connect(str(DATABASE_FILE), timeout=30.0, isolation_level='DEFERRED')
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
    except sqlite3.Error as e:
        logger.warning(f"Could not set PRAGMA settings: {e}")
    conn.row_factory = sqlite3.Row
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the café tables on ``conn`` if they do not exist yet."""
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS menu_categories (
            id TEXT PRIMARY KEY NOT NULL,
            title TEXT NOT NULL,
            note TEXT,
            "order" INTEGER DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS menu_items (
            id TEXT PRIMARY KEY NOT NULL,
            name TEXT NOT NULL,
            price REAL NOT NULL DEFAULT 0,
            image_url TEXT,
            category_id TEXT REFERENCES menu_categories(id) ON DELETE SET NULL,
            "order" INTEGER
        );

        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY NOT NULL,
            table_number INTEGER NOT NULL,
            customer_name TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            payment_method TEXT NOT NULL DEFAULT 'cash',
            total_amount REAL NOT NULL DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS order_items (
            id TEXT PRIMARY KEY NOT NULL,
            order_id TEXT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            item_name TEXT NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 1,
            price REAL NOT NULL DEFAULT 0,
            created_at TEXT
        );

        CREATE TABLE IF NOT EXISTS inventory_items (
            id TEXT PRIMARY KEY NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            quantity REAL NOT NULL DEFAULT 0,
            unit TEXT NOT NULL DEFAULT 'pcs',
            min_quantity REAL NOT NULL DEFAULT 0,
            cost_per_unit REAL NOT NULL DEFAULT 0,
            category TEXT,
            supplier TEXT,
            location TEXT,
            expiry_date TEXT,
            last_ordered_date TEXT,
            reorder_quantity REAL DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_orders_created_at ON orders (created_at);
        CREATE INDEX IF NOT EXISTS idx_order_items_order_id ON order_items (order_id);
    """)


def init_db():
    """Initializes the database schema."""
    conn = get_db_connection()
    try:
        create_schema(conn)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database initialized.")

if __name__ == '__main__':
    init_db()
