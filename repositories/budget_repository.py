from db import get_db

# -----------------------------
# Budget Repository
# -----------------------------
# Every query is scoped to a single user_id; rows come back as plain dicts.


def _fetch_dicts(conn, sql, params):
    result = conn.execute(sql, params)
    columns = [col[0] for col in result.description]
    return [dict(zip(columns, row)) for row in result.fetchall()]


def get_current_balance(conn, user_id):
    """Latest recorded bank balance, or 0 when the user never entered one."""
    row = conn.execute(
        """
        SELECT amount
        FROM bank_balances
        WHERE user_id = ?
        ORDER BY recorded_at DESC, id DESC
        LIMIT 1
        """,
        (user_id,)
    ).fetchone()
    return row[0] if row else 0


def get_recurring_income(conn, user_id):
    return _fetch_dicts(conn, """
        SELECT id, source, amount, frequency, custom_days, next_date
        FROM recurring_income
        WHERE user_id = ?
        ORDER BY next_date, id
    """, (user_id,))


def get_recurring_expenses(conn, user_id):
    """
    Return the user's bills ordered by stored due date.

    The order matters: the projector breaks due-date ties by input order.
    """
    return _fetch_dicts(conn, """
        SELECT id, name, amount, frequency, custom_days, due_date, is_paid, last_paid_date
        FROM recurring_expenses
        WHERE user_id = ?
        ORDER BY due_date, id
    """, (user_id,))


def get_goals(conn, user_id):
    return _fetch_dicts(conn, """
        SELECT id, name, target_amount, current_amount, deadline, notes
        FROM goals
        WHERE user_id = ?
        ORDER BY created_at, id
    """, (user_id,))


def get_pay_settings(conn=None, user_id="local"):
    """
    Return the user's pay settings dict, or None if never configured.

    Args:
        conn: Optional database connection. If not provided, opens a new one.
        user_id: Owner of the settings row.
    """
    own_conn = False
    if conn is None:
        conn = get_db()
        own_conn = True

    try:
        rows = _fetch_dicts(conn, """
            SELECT pay_frequency, custom_days, last_pay_date, default_currency
            FROM user_settings
            WHERE user_id = ?
        """, (user_id,))
        return rows[0] if rows else None
    finally:
        if own_conn:
            conn.close()


# -----------------------------
# Writers (seeding / settings screens)
# -----------------------------

def record_balance(conn, user_id, amount):
    conn.execute(
        "INSERT INTO bank_balances (user_id, amount) VALUES (?, ?)",
        (user_id, amount)
    )


def add_recurring_income(conn, user_id, income_id, source, amount, frequency,
                         next_date, custom_days=None):
    conn.execute(
        """
        INSERT INTO recurring_income
        (id, user_id, source, amount, frequency, custom_days, next_date)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (income_id, user_id, source, amount, frequency, custom_days, next_date)
    )


def add_recurring_expense(conn, user_id, expense_id, name, amount, frequency,
                          due_date, custom_days=None, is_paid=False, last_paid_date=None):
    conn.execute(
        """
        INSERT INTO recurring_expenses
        (id, user_id, name, amount, frequency, custom_days, due_date, is_paid, last_paid_date)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (expense_id, user_id, name, amount, frequency, custom_days, due_date, is_paid, last_paid_date)
    )


def add_goal(conn, user_id, goal_id, name, target_amount, current_amount=0,
             deadline=None, notes=None):
    conn.execute(
        """
        INSERT INTO goals
        (id, user_id, name, target_amount, current_amount, deadline, notes)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (goal_id, user_id, name, target_amount, current_amount, deadline, notes)
    )


def save_pay_settings(conn, user_id, pay_frequency, last_pay_date,
                      custom_days=None, default_currency="USD"):
    """Insert or replace the user's single settings row."""
    conn.execute("DELETE FROM user_settings WHERE user_id = ?", (user_id,))
    conn.execute(
        """
        INSERT INTO user_settings
        (user_id, pay_frequency, custom_days, last_pay_date, default_currency)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            user_id,
            pay_frequency,
            custom_days,
            last_pay_date.isoformat() if hasattr(last_pay_date, "isoformat") else last_pay_date,
            default_currency,
        )
    )
