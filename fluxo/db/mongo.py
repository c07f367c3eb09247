import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from fluxo.core.config import settings

logger = structlog.get_logger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    # Create indexes
    await create_indexes()
    logger.info("Connected to MongoDB", database=settings.MONGODB_DB)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
        logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Obligation list views sort by due date
    await mongodb.db["payables"].create_index("due_date")
    await mongodb.db["receivables"].create_index("due_date")
    await mongodb.db["payables"].create_index("parent_id")
    await mongodb.db["receivables"].create_index("parent_id")

    # Linked ledger lookups (non-unique)
    await mongodb.db["ledger_entries"].create_index([("source_type", 1), ("source_id", 1)])
    await mongodb.db["ledger_entries"].create_index("payment_date")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
