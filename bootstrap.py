import asyncio
import os
import uuid
import certifi
from motor.motor_asyncio import AsyncIOMotorClient
from datetime import datetime

import bcrypt
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ==========================================
# CONFIGURATION
# ==========================================

MONGO_URI = os.getenv("MONGO_URI")
DB_NAME = os.getenv("DB_NAME", "taskdesk")

if not MONGO_URI:
    print("❌ ERROR: MONGO_URI is missing from your .env file!")
    exit(1)

# Initial admin account (override through the environment)
ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "admin@example.com")
ADMIN_NAME = os.getenv("BOOTSTRAP_ADMIN_NAME", "Admin User")
ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
DEPARTMENT_NAME = "Administration"

# ==========================================
# SCRIPT
# ==========================================

async def bootstrap_db():
    print(f"Connecting to MongoDB: {MONGO_URI[:20]}...")
    client = AsyncIOMotorClient(MONGO_URI, tlsCAFile=certifi.where()) if MONGO_URI.startswith("mongodb+srv") else AsyncIOMotorClient(MONGO_URI)
    db = client[DB_NAME]

    users_collection = db["users"]
    departments_collection = db["departments"]

    # 1. Check if admin already exists
    existing_user = await users_collection.find_one({"email": ADMIN_EMAIL})
    if existing_user:
        print(f"User {ADMIN_EMAIL} already exists in the database. Exiting.")
        return

    # 2. Ensure the Administration department
    department = await departments_collection.find_one({"name": DEPARTMENT_NAME})
    if not department:
        department = {
            "id": str(uuid.uuid4()),
            "name": DEPARTMENT_NAME,
            "description": "Administrative department",
            "created_by": None,
            "created_at": datetime.now(),
        }
        await departments_collection.insert_one(department)
        print(f"✅ Created department '{DEPARTMENT_NAME}'")

    # 3. Create the Admin User Document
    user_doc = {
        "id": str(uuid.uuid4()),
        "name": ADMIN_NAME,
        "email": ADMIN_EMAIL,
        "password_hash": bcrypt.hashpw(ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
        "role": "admin",
        "department_id": department["id"],
        "tasks": [],
        "version": 0,
        "created_at": datetime.now(),
        "updated_at": datetime.now(),
    }

    await users_collection.insert_one(user_doc)
    print(f"✅ Successfully inserted Admin account for {ADMIN_EMAIL}")
    print("\n🎉 Bootstrap Complete! Log in and change the admin password.")

if __name__ == "__main__":
    asyncio.run(bootstrap_db())
