"""Database configuration and session dependency"""

import os

from sqlalchemy import create_engine
from sqlmodel import Session

from church_rsvp.config import config

# Database URL from config
DATABASE_URL = config["database_url"]

# Validate DATABASE_URL exists
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Set DATABASE_URL in the deployment environment or local .env file."
    )

# SQLite connections are shared across the threadpool FastAPI runs sync work in
connect_args = (
    {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
)

# Create engine
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("DEBUG", "false").lower() == "true",
    connect_args=connect_args,
)


def get_db():
    """Get database session"""
    with Session(engine) as session:
        yield session
