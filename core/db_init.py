"""Create and return a database connection (PostgreSQL or SQLite).
Schema creation is delegated to `services.init_db(conn)` to avoid
duplicated table definitions.
"""
import logging
import os
import sqlite3

import streamlit as st

from core.constants import DB_PATH
from core.seed import seed_catalog
from core.services import init_db as init_schema

logger = logging.getLogger(__name__)


def init_db():
    """Initialize database connection.
    Uses PostgreSQL when `[postgres]` secrets are configured, SQLite otherwise.
    Connection reuse is handled by caching in app.py.
    """
    try:
        has_pg_secrets = hasattr(st, 'secrets') and 'postgres' in st.secrets
    except Exception:
        # No secrets.toml at all
        logger.info("No Streamlit secrets found, using SQLite")
        has_pg_secrets = False

    if has_pg_secrets:
        import psycopg2

        try:
            conn = psycopg2.connect(
                host=st.secrets["postgres"]["host"],
                port=int(st.secrets["postgres"]["port"]),
                database=st.secrets["postgres"]["database"],
                user=st.secrets["postgres"]["user"],
                password=st.secrets["postgres"]["password"],
                sslmode=st.secrets["postgres"].get("sslmode", "require"),
                connect_timeout=10,
                options='-c statement_timeout=30000'  # 30 second query timeout
            )
            conn.autocommit = False
        except Exception as e:
            logger.exception('PostgreSQL connection failed')
            st.error(f"⚠️ PostgreSQL connection failed: {str(e)}")
            # Do not fall back to SQLite when PostgreSQL secrets are provided.
            st.stop()
    else:
        conn = connect_sqlite()

    init_schema(conn)
    seed_catalog(conn)
    return conn


def connect_sqlite(path: str = DB_PATH) -> sqlite3.Connection:
    """Create local SQLite connection (ensures data dir exists)."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return sqlite3.connect(path, check_same_thread=False)
