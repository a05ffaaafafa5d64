# db.py - SQLAlchemy engine and session
import os
import re
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv

load_dotenv()


class DatabaseNotConfigured(RuntimeError):
    pass


def _mssql_url(server: str, database: str, user: str, password: str) -> URL:
    host, _, port = server.partition(",")
    return URL.create(
        "mssql+pymssql",
        username=user,
        password=password,
        host=host,
        port=int(port) if port else None,
        database=database,
    )


def parse_sql_connection_string(cs: str) -> Optional[URL]:
    """Turn an ADO-style SQL Server connection string into a SQLAlchemy URL.

    Only Server, Initial Catalog, User ID and Password are read. Returns None
    when any of them is missing.
    """
    def pick(pattern):
        m = re.search(pattern, cs, flags=re.IGNORECASE)
        return m.group(1).strip() if m else None

    server = pick(r"Server=(?:tcp:)?([^;]+)")
    database = pick(r"Initial Catalog=([^;]+)")
    user = pick(r"User ID=([^;]+)")
    password = pick(r"Password=([^;]+)")
    if not (server and database and user and password):
        return None
    return _mssql_url(server, database, user, password)


def resolve_database_url(env=None):
    """DATABASE_URL first, then the discrete Sql* variables, then SqlConnectionString."""
    env = os.environ if env is None else env
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]

    server = env.get("SqlServer")
    database = env.get("SqlDatabase")
    user = env.get("SqlUser")
    password = env.get("SqlPassword")
    if server and database and user and password:
        return _mssql_url(server, database, user, password)

    cs = env.get("SqlConnectionString")
    if not cs:
        return None
    return parse_sql_connection_string(cs)


DATABASE_URL = resolve_database_url()

engine = create_engine(DATABASE_URL, echo=False, future=True, pool_pre_ping=True) if DATABASE_URL else None
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def init_db():
    """Create the Requests table if it does not exist yet."""
    if engine is None:
        raise DatabaseNotConfigured("SQL config not found")
    from models import Base
    Base.metadata.create_all(bind=engine)
