import sys
import os
import asyncio
from pymongo import ASCENDING, DESCENDING

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import (
    notifications_collection, users_collection, departments_collection,
    projects_collection, project_vendors_collection, tasks_collection,
)
from logging_config import get_logger

logger = get_logger("setup_indexes")

async def create_indexes():
    print("🚀 Starting Index Creation...")

    # --- Users ---
    print("\n📦 Users Collection:")
    # Email is the login key and must be unique
    await users_collection.create_index([("email", ASCENDING)], unique=True)
    print("✅ Created index: (email UNIQUE)")

    await users_collection.create_index([("id", ASCENDING)], unique=True)
    print("✅ Created index: (id UNIQUE)")

    # For completion notices: find({name: X})
    await users_collection.create_index([("name", ASCENDING)])
    print("✅ Created index: (name)")

    # For team views: find({department_id: X})
    await users_collection.create_index([("department_id", ASCENDING)])
    print("✅ Created index: (department_id)")

    # --- Notifications ---
    print("\n📦 Notifications Collection:")
    # Covers unread count and newest-first listing per recipient
    await notifications_collection.create_index([("recipient_id", ASCENDING), ("read", ASCENDING), ("created_at", DESCENDING)])
    print("✅ Created index: (recipient_id, read, created_at DESC)")

    await notifications_collection.create_index([("recipient_id", ASCENDING), ("created_at", DESCENDING)])
    print("✅ Created index: (recipient_id, created_at DESC)")

    # --- Departments / Projects ---
    print("\n📦 Departments & Projects:")
    await departments_collection.create_index([("name", ASCENDING)])
    print("✅ Created index: departments (name)")
    await projects_collection.create_index([("created_at", DESCENDING)])
    print("✅ Created index: projects (created_at DESC)")

    # --- Task records / Vendors ---
    print("\n📦 Task Records & Project Vendors:")
    # Employee view and admin date-range filter, newest first
    await tasks_collection.create_index([("employee", ASCENDING), ("date", DESCENDING)])
    print("✅ Created index: tasks (employee, date DESC)")
    await tasks_collection.create_index([("date", DESCENDING)])
    print("✅ Created index: tasks (date DESC)")
    await project_vendors_collection.create_index([("project", ASCENDING), ("created_at", DESCENDING)])
    print("✅ Created index: project_vendors (project, created_at DESC)")

    print("\n✨ All indexes created successfully!")

if __name__ == "__main__":
    asyncio.run(create_indexes())
