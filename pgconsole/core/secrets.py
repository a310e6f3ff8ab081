"""
Secrets file persistence for the setup wizard
"""
from typing import Any, Dict, Optional
from loguru import logger
import aiofiles
import json
import os

from pgconsole.core.config import settings


def generate_connection_string(params: Any) -> str:
    password = params.password or ""
    return (
        f"postgresql://{params.username}:{password}"
        f"@{params.host}:{params.port}/{params.database}"
    )


async def save_to_secrets_file(params: Any, path: Optional[str] = None) -> bool:
    """Write connection details as PG* keys; returns False when the write fails"""
    secrets_path = path or settings.SECRETS_FILE
    logger.info(f"Saving secrets to {secrets_path}")

    secrets = {
        "PGHOST": params.host,
        "PGPORT": str(params.port),
        "PGDATABASE": params.database,
        "PGUSER": params.username,
        "PGPASSWORD": params.password or "",
        "DATABASE_URL": generate_connection_string(params),
    }

    try:
        async with aiofiles.open(secrets_path, 'w') as f:
            await f.write(json.dumps(secrets, indent=2))
    except OSError as e:
        logger.error(f"Failed to save secrets file: {e}")
        return False

    logger.info("Secrets saved successfully")
    return True


async def load_from_secrets_file(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Read the secrets file, None when it is absent or unreadable"""
    secrets_path = path or settings.SECRETS_FILE

    if not os.path.exists(secrets_path):
        logger.debug("Secrets file not found")
        return None

    try:
        async with aiofiles.open(secrets_path, 'r') as f:
            secrets = json.loads(await f.read())
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load secrets file: {e}")
        return None

    return {
        "host": secrets.get("PGHOST"),
        "port": secrets.get("PGPORT"),
        "database": secrets.get("PGDATABASE"),
        "username": secrets.get("PGUSER"),
        "password": secrets.get("PGPASSWORD"),
        "connection_string": secrets.get("DATABASE_URL"),
    }
