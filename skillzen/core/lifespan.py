from contextlib import asynccontextmanager
import logging

from skillzen.services.quota_service import get_quota_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    manager = get_quota_manager()
    # Seeding replaces persisted quota with fresh windows, so it runs once per process.
    manager.initialize_api_keys()
    logger.info("quota_keys_initialized has_backup=%s", manager.has_backup_api_key())
    yield
    manager.close()
