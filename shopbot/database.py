# shopbot/database.py
# ------------------------------------------------------------
# SQLAlchemy setup for the storefront (catalog, carts, orders)
# - DATABASE_URL wins when set (tests point it at SQLite)
# - Otherwise the PostgreSQL URL is built from the DB_* parts
# - Table creation happens in the FastAPI startup hook
# ------------------------------------------------------------
from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base, sessionmaker
from decouple import config

DATABASE_URL = config("DATABASE_URL", default="")

DB_USER = config("DB_USER", default="postgres")
DB_PASSWORD = config("DB_PASSWORD", default="")
DB_HOST = config("DB_HOST", default="localhost")
DB_PORT = int(config("DB_PORT", default=5432))
DB_NAME = config("DB_NAME", default="shopbot")


def _database_url():
    if DATABASE_URL:
        return DATABASE_URL
    return URL.create(
        drivername="postgresql+psycopg2",
        username=DB_USER,
        password=DB_PASSWORD or None,
        host=DB_HOST,
        port=DB_PORT,
        database=DB_NAME,
    )


engine = create_engine(_database_url(), pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
