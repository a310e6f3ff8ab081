"""
Application Initialization Module
Creates the bookkeeping tables on startup
"""
from loguru import logger
import aiofiles
import os

from pgconsole.core.database import db_pool


BOOKKEEPING_DDL = [
    """
    CREATE TABLE IF NOT EXISTS db_connections (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        host TEXT NOT NULL,
        port INTEGER NOT NULL DEFAULT 5432,
        database TEXT NOT NULL,
        username TEXT NOT NULL,
        password TEXT NOT NULL DEFAULT '',
        secure BOOLEAN NOT NULL DEFAULT true,
        is_active BOOLEAN NOT NULL DEFAULT false,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
    )
    """,
    # At most one active connection
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_db_connections_single_active
    ON db_connections (is_active) WHERE is_active
    """,
    """
    CREATE TABLE IF NOT EXISTS db_tables (
        id SERIAL PRIMARY KEY,
        connection_id INTEGER NOT NULL REFERENCES db_connections(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        schema TEXT NOT NULL DEFAULT 'public',
        description TEXT,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        UNIQUE (connection_id, name, schema)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS db_columns (
        id SERIAL PRIMARY KEY,
        table_id INTEGER NOT NULL REFERENCES db_tables(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        nullable BOOLEAN NOT NULL DEFAULT true,
        is_primary BOOLEAN NOT NULL DEFAULT false,
        is_unique BOOLEAN NOT NULL DEFAULT false,
        default_value TEXT,
        description TEXT,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        UNIQUE (table_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS activity_logs (
        id SERIAL PRIMARY KEY,
        connection_id INTEGER NOT NULL REFERENCES db_connections(id) ON DELETE CASCADE,
        table_id INTEGER REFERENCES db_tables(id) ON DELETE SET NULL,
        operation TEXT NOT NULL,
        details TEXT,
        status TEXT NOT NULL,
        user_id INTEGER,
        metadata JSONB,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_activity_logs_connection_created
    ON activity_logs (connection_id, created_at DESC)
    """,
    """
    CREATE TABLE IF NOT EXISTS app_settings (
        id SERIAL PRIMARY KEY,
        key VARCHAR(100) NOT NULL UNIQUE,
        value JSONB NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
    )
    """,
]


class AppInitializer:
    """Handles application initialization tasks"""

    @staticmethod
    async def initialize_database() -> None:
        """
        Create bookkeeping tables, preferring init.sql next to the package
        """
        try:
            init_sql_path = os.path.join(os.path.dirname(__file__), '..', 'init.sql')

            if os.path.exists(init_sql_path):
                async with aiofiles.open(init_sql_path, 'r') as f:
                    init_sql = await f.read()

                await db_pool.execute(init_sql)
                logger.info("Database initialized from init.sql")
            else:
                await AppInitializer._execute_embedded_sql()

        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    @staticmethod
    async def _execute_embedded_sql() -> None:
        """Execute embedded initialization SQL"""
        async with db_pool.transaction() as conn:
            for statement in BOOKKEEPING_DDL:
                await conn.execute(statement)

        logger.info("Embedded SQL initialization complete")

    @staticmethod
    async def check_dependencies() -> dict:
        """Check that the bookkeeping database answers"""
        status = {"database": False}

        try:
            await db_pool.fetchval("SELECT 1")
            status["database"] = True
        except Exception as e:
            logger.error(f"Dependency check failed: {e}")

        return status


# Global initializer instance
app_initializer = AppInitializer()
