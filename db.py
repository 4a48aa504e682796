import duckdb
import logging
import os

DB_FILE = os.getenv("BUDGET_DB_FILE", "budget.duckdb")
LOG_FILE = os.getenv("BUDGET_LOG_FILE", "db_setup.log")

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(
    filename=LOG_FILE,
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)

def log_info(msg):
    logging.info(msg)
    print(msg)

def log_error(msg):
    logging.error(msg)
    print(msg)

# -----------------------------
# Get a DB connection
# -----------------------------
def get_db(path=None):
    """
    Returns a new DuckDB connection (``DB_FILE`` unless a path is given).
    """
    return duckdb.connect(path or DB_FILE)

# -----------------------------
# Initialize database schema
# -----------------------------
def init_db(conn=None):
    own_conn = conn is None
    if own_conn:
        conn = get_db()
    try:
        # Bank balance history; the latest row is the current balance
        conn.execute("CREATE SEQUENCE IF NOT EXISTS bank_balances_id_seq START 1")
        conn.execute("""
        CREATE TABLE IF NOT EXISTS bank_balances (
            id BIGINT PRIMARY KEY DEFAULT nextval('bank_balances_id_seq'),
            user_id VARCHAR NOT NULL,
            amount DECIMAL(12,2) NOT NULL,
            recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)
        log_info("Bank balances table ensured.")

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recurring_income (
            id VARCHAR PRIMARY KEY,
            user_id VARCHAR NOT NULL,
            source VARCHAR NOT NULL,
            amount DECIMAL(12,2) NOT NULL CHECK(amount >= 0),
            frequency VARCHAR NOT NULL,
            custom_days INTEGER,
            next_date DATE NOT NULL
        );
        """)
        log_info("Recurring income table ensured.")

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recurring_expenses (
            id VARCHAR PRIMARY KEY,
            user_id VARCHAR NOT NULL,
            name VARCHAR NOT NULL,
            amount DECIMAL(12,2) NOT NULL CHECK(amount >= 0),
            frequency VARCHAR NOT NULL,
            custom_days INTEGER,
            due_date DATE NOT NULL,
            is_paid BOOLEAN DEFAULT FALSE,
            last_paid_date DATE
        );
        """)
        log_info("Recurring expenses table ensured.")

        conn.execute("""
        CREATE TABLE IF NOT EXISTS goals (
            id VARCHAR PRIMARY KEY,
            user_id VARCHAR NOT NULL,
            name VARCHAR NOT NULL,
            target_amount DECIMAL(12,2) NOT NULL CHECK(target_amount > 0),
            current_amount DECIMAL(12,2) NOT NULL DEFAULT 0 CHECK(current_amount >= 0),
            deadline DATE,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)
        log_info("Goals table ensured.")

        # last_pay_date stays text: older rows may hold MM/DD/YYYY or junk
        conn.execute("""
        CREATE TABLE IF NOT EXISTS user_settings (
            user_id VARCHAR PRIMARY KEY,
            pay_frequency VARCHAR NOT NULL DEFAULT 'biweekly',
            custom_days INTEGER,
            last_pay_date VARCHAR,
            default_currency VARCHAR DEFAULT 'USD',
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)
        log_info("User settings table ensured.")

        conn.execute("CREATE INDEX IF NOT EXISTS idx_income_user ON recurring_income(user_id);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_expenses_user ON recurring_expenses(user_id);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_goals_user ON goals(user_id);")
        log_info("Indexes created/ensured.")

    except Exception as e:
        log_error(f"Error initializing DB: {e}")
        raise
    finally:
        if own_conn:
            conn.close()
            log_info("Database setup complete and connection closed.")
