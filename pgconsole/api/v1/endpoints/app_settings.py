"""
Application Settings API Endpoints
"""
from fastapi import APIRouter

from pgconsole.core.errors import NotFoundError
from pgconsole.schemas.settings_models import AppSetting, SettingUpdate
from pgconsole.services.settings_store import settings_store

router = APIRouter()


@router.get("/{key}", response_model=AppSetting)
async def get_setting(key: str):
    setting = await settings_store.get_setting(key)
    if not setting:
        raise NotFoundError("Setting not found")
    return setting


@router.post("", response_model=AppSetting)
async def set_setting(request: SettingUpdate):
    """
    Create or overwrite a setting
    """
    return await settings_store.set_setting(request.key, request.value)
