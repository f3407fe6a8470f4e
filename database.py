"""
Database helpers

MongoDB connection bootstrapped from environment variables:
- DATABASE_URL  -> MongoDB connection string
- DATABASE_NAME -> database to use

`db` is None when the connection is not configured; the helpers below raise
in that case so callers fail loudly instead of silently dropping writes.
"""
import os
import logging
from datetime import datetime, timezone
from typing import Union

from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

db = None

if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
    logger.info("Connected to MongoDB database %s", DATABASE_NAME)
else:
    logger.warning("DATABASE_URL / DATABASE_NAME not set, database unavailable")


def _require_db():
    if db is None:
        raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    return db


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document with timestamps and return its id as a string"""
    database = _require_db()
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str):
    """Return every document of a collection in the store's natural order"""
    database = _require_db()
    return list(database[collection_name].find({}))


def update_document(collection_name: str, filter_dict: dict, values: dict) -> int:
    """$set `values` on the first matching document, return the matched count"""
    database = _require_db()
    values = {**values, "updated_at": datetime.now(timezone.utc)}
    result = database[collection_name].update_one(filter_dict, {"$set": values})
    return result.matched_count
