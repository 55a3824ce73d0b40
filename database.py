from motor.motor_asyncio import AsyncIOMotorClient
from logging_config import get_logger
from config import config
import certifi

logger = get_logger("database")

uri = config.MONGO_URI
db_name = config.DB_NAME

if uri:
    logger.info(f"MongoDB URI configured: {uri[:20]}...")
else:
    logger.error("MONGO_URI is empty; the database client cannot connect")


class DatabaseProxy:
    """Builds the motor client on first use, so importing the app never opens a socket."""

    def __init__(self):
        self._client = None

    def initialize(self):
        if self._client is not None:
            return
        # Atlas (production) needs an explicit CA bundle
        options = {"tlsCAFile": certifi.where()} if config.ENV == "production" else {}
        self._client = AsyncIOMotorClient(uri, **options)
        logger.info(f"Motor client created for database '{db_name}'")

    def use(self, motor_client):
        """Install an already-built client (tests use an in-memory one)."""
        self._client = motor_client

    def reset(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def __getattr__(self, name):
        self.initialize()
        return getattr(self._client, name)

    def __getitem__(self, name):
        self.initialize()
        return self._client[name]


client = DatabaseProxy()


class DBProxy:
    """The TaskDesk database on whatever client is currently installed."""

    def get_collection(self, name):
        return client[db_name][name]

    def __getattr__(self, attr):
        return self.get_collection(attr)

    def __getitem__(self, key):
        return self.get_collection(key)


db = DBProxy()


class AsyncCollectionProxy:
    """Module-level handle on one collection, looked up at call time."""

    def __init__(self, name):
        self.name = name

    def __getattr__(self, attr):
        return getattr(db.get_collection(self.name), attr)

    def __getitem__(self, key):
        return db.get_collection(self.name)[key]


users_collection = AsyncCollectionProxy("users")
departments_collection = AsyncCollectionProxy("departments")
projects_collection = AsyncCollectionProxy("projects")
project_vendors_collection = AsyncCollectionProxy("project_vendors")
tasks_collection = AsyncCollectionProxy("tasks")
notifications_collection = AsyncCollectionProxy("notifications")
