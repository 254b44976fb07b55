"""
Remove abandoned registration sessions and expired login sessions.

Meant for a periodic job (cron, Render cron job):

    python -m scripts.purge_expired
"""
from hrms.config.database import SessionLocal
from hrms.shared.database.maintenance import purge_expired


def main():
    db = SessionLocal()
    try:
        removed = purge_expired(db)
        print(
            f"Removed {removed['registration_sessions']} registration sessions, "
            f"{removed['auth_sessions']} auth sessions"
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
