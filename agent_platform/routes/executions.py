from typing import Optional
from fastapi import APIRouter, Depends, Query
from agent_platform.dependencies import get_persistence
from agent_platform.schemas import ExecutionResponse
from agent_platform.services.persistence import DEFAULT_EXECUTION_LIMIT, PersistenceService

router = APIRouter(prefix="/executions", tags=["executions"])


@router.get("", response_model=list[ExecutionResponse])
async def list_executions(
    agent_id: Optional[str] = Query(None, alias="agentId"),
    limit: int = Query(DEFAULT_EXECUTION_LIMIT, ge=1, le=1000),
    persistence: PersistenceService = Depends(get_persistence),
):
    return await persistence.get_executions(agent_id, limit)
