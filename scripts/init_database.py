#!/usr/bin/env python3
"""
Database Initialization Script

Run this script to create the database tables.
"""

import sys

from config.database import configure_database, init_database, backup_database
from config.settings import load_settings

def main():
    """Initialize the database and create a backup."""
    print("Initializing Email Reminder Database...")
    print("=" * 50)

    try:
        settings = load_settings()
        configure_database(settings.database_url)
        init_database()
        print("Database initialized successfully!")

        # Create initial backup (SQLite only)
        backup_path = backup_database()
        if backup_path:
            print(f"Initial backup created: {backup_path}")

        print("\nDatabase Structure:")
        print("   - users: Accounts, login password hashes, encrypted mail passwords")
        print("   - reminders: Scheduled messages with sent/deleted flags")

    except Exception as e:
        print(f"Error initializing database: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
