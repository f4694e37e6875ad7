from fastapi import Depends

from microhabit.core.storage import get_store
from microhabit.services.ai_agent_service import AIAgentService
from microhabit.services.app_service import AppService
from microhabit.services.storage_service import StorageService


def get_storage_service() -> StorageService:
    return StorageService(get_store())


def get_ai_agent_service(
    storage: StorageService = Depends(get_storage_service),
) -> AIAgentService:
    return AIAgentService(storage)


def get_app_service(
    storage: StorageService = Depends(get_storage_service),
    agent: AIAgentService = Depends(get_ai_agent_service),
) -> AppService:
    return AppService(storage=storage, agent=agent)
