"""
Settings Store - small JSON application preferences keyed by name
"""
from typing import Any, Optional
from loguru import logger
import json

from pgconsole.core.database import db_pool
from pgconsole.schemas.settings_models import AppSetting


class SettingsStore:

    async def get_setting(self, key: str) -> Optional[AppSetting]:
        row = await db_pool.fetchrow("SELECT * FROM app_settings WHERE key = $1", key)
        return AppSetting.model_validate(dict(row)) if row else None

    async def set_setting(self, key: str, value: Any) -> AppSetting:
        """Upsert; last writer wins"""
        logger.info(f"Setting key: {key}")

        # Bound as text so a JSON null is stored as a jsonb null, not SQL NULL
        query = """
            INSERT INTO app_settings (key, value)
            VALUES ($1, $2::text::jsonb)
            ON CONFLICT (key)
            DO UPDATE SET
                value = EXCLUDED.value,
                updated_at = NOW()
            RETURNING *
        """
        row = await db_pool.fetchrow(query, key, json.dumps(value, default=str))
        return AppSetting.model_validate(dict(row))


# Global settings store instance
settings_store = SettingsStore()
