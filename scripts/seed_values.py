"""
Seed the value catalog for a Neighbo database.

Usage:
    alembic upgrade head
    python scripts/seed_values.py
"""
from neighbo.db.seed import seed_values
from neighbo.db.session import SessionLocal


def main():
    session = SessionLocal()
    try:
        inserted = seed_values(session)
        print(f"Seeded {inserted} values.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
