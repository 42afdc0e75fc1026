"""
Status Router - Store diagnostics and AI connection test.
"""
from fastapi import APIRouter

from ..api.dto import ConnectionTestDTO, StoreStatusDTO
from ..api.mappers import StoreStatusMapper
from ..core import config
from .dependencies import get_ai_config, get_gateway, get_metadata_extractor, set_working_model
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/status/storage", response_model=StoreStatusDTO)
async def get_storage_status():
    """Provisioning state of the synchronized store."""
    gateway = get_gateway()
    diagnosis = await gateway.diagnose() if gateway is not None else None
    return StoreStatusMapper.to_dto(config.STORAGE_TYPE, diagnosis)


@router.post("/status/ai/test", response_model=ConnectionTestDTO)
async def test_ai_connection():
    """
    Try the AI provider with each candidate model.
    The first model that answers is used for later enrichment.
    """
    extractor = get_metadata_extractor()
    result = await extractor.test_connection(get_ai_config(), config.CLAUDE_CANDIDATE_MODELS)
    if result.ok:
        set_working_model(result.model)
        logger.info(f"AI connection test succeeded, using model {result.model}")
    else:
        logger.warning(f"AI connection test failed: {result.error}")
    return ConnectionTestDTO(ok=result.ok, model=result.model, error=result.error)
