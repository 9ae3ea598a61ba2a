"""
Project management CLI.

Usage:
    python manage.py migrate
    python manage.py check-db
    python manage.py reset-db
    python manage.py serve
"""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from user_registry.config import ConfigError, load_database_settings
from user_registry.core.database import create_db_engine, create_session_factory
from user_registry.core.logging_config import setup_logging
from user_registry.core.migrations import MigrationError, downgrade_migrations, run_migrations
from user_registry.core.models import User
from user_registry.main import run


def migrate(settings):
    """Apply pending migrations"""
    revision = run_migrations(settings)
    print(f"✅ Database is at revision {revision}\n")


def check_db(settings):
    """Show every user in the database"""
    engine = create_db_engine(settings)
    db = create_session_factory(engine)()

    try:
        users = db.query(User).order_by(User.id).all()

        print(f"\n📊 Users in database: {len(users)}\n")
        print("=" * 60)

        if not users:
            print("⚠️  The database is empty.")
            print("   Register a user with POST /api/user\n")
            return

        for user in users:
            print(f"ID: {user.id}")
            print(f"Email: {user.email}")
            print(f"Created: {user.created_at}")
            print(f"Updated: {user.updated_at}")
            print("-" * 60)

    finally:
        db.close()
        engine.dispose()


def reset_db(settings):
    """Drop the schema and migrate it again from scratch"""
    print("⚠️  WARNING: this deletes every user in the database!")
    confirm = input("Continue? (yes/no): ")

    if confirm.lower() != "yes":
        print("❌ Cancelled")
        return

    downgrade_migrations(settings, "base")
    run_migrations(settings)
    print("✅ Database reset\n")


def main(argv=None):
    """Parse the command and run it"""
    parser = argparse.ArgumentParser(
        description="User Registry API management"
    )

    parser.add_argument(
        "command",
        choices=["migrate", "check-db", "reset-db", "serve"],
        help="Command to run"
    )

    args = parser.parse_args(argv)

    if args.command == "serve":
        run()
        return 0

    setup_logging()

    commands = {
        "migrate": migrate,
        "check-db": check_db,
        "reset-db": reset_db,
    }

    try:
        settings = load_database_settings()
        commands[args.command](settings)
    except (ConfigError, MigrationError, SQLAlchemyError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
