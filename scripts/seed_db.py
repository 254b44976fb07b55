"""
Create tables, the super-admin account and the default plans.

Safe to run repeatedly: existing rows are kept.

    python -m scripts.seed_db
"""
from hrms.config.database import SessionLocal
from hrms.config.settings import settings
from hrms.shared.database.maintenance import create_tables, seed_database


def main():
    create_tables()

    db = SessionLocal()
    try:
        created = seed_database(db)
        print(f"Super-admin created: {bool(created['superadmin'])} ({settings.superadmin_email})")
        print(f"Plans created: {created['plans']}")
    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
