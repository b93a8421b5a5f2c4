from fastapi import APIRouter, Depends, HTTPException
from agent_platform.config import Settings
from agent_platform.dependencies import get_app_settings, get_executor, get_persistence
from agent_platform.engine.executor import AgentExecutor
from agent_platform.schemas import (
    AgentCreate,
    AgentCreatedResponse,
    AgentResponse,
    AgentUpdate,
    ExecuteRequest,
    ExecuteResponse,
    MessageResponse,
)
from agent_platform.services.persistence import PersistenceService

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("", response_model=list[AgentResponse])
async def list_agents(persistence: PersistenceService = Depends(get_persistence)):
    return await persistence.get_all_agents()


@router.post("", response_model=AgentCreatedResponse)
async def create_agent(
    payload: AgentCreate,
    persistence: PersistenceService = Depends(get_persistence),
    settings: Settings = Depends(get_app_settings),
):
    fields = payload.model_dump(by_alias=True)
    fields["model"] = payload.model or settings.DEFAULT_MODEL
    fields["status"] = "inactive"
    agent_id = await persistence.create_agent(fields)
    return AgentCreatedResponse(agent_id=agent_id, message="Agent created")


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: str, persistence: PersistenceService = Depends(get_persistence)):
    agent = await persistence.get_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent


@router.put("/{agent_id}", response_model=MessageResponse)
async def update_agent(
    agent_id: str,
    payload: AgentUpdate,
    persistence: PersistenceService = Depends(get_persistence),
):
    if not await persistence.update_agent(agent_id, payload.changes()):
        raise HTTPException(status_code=404, detail="Agent not found")
    return MessageResponse(message="Agent updated")


@router.delete("/{agent_id}", response_model=MessageResponse)
async def delete_agent(agent_id: str, persistence: PersistenceService = Depends(get_persistence)):
    if not await persistence.delete_agent(agent_id):
        raise HTTPException(status_code=404, detail="Agent not found")
    return MessageResponse(message="Agent deleted")


@router.post("/{agent_id}/activate", response_model=MessageResponse)
async def activate_agent(agent_id: str, persistence: PersistenceService = Depends(get_persistence)):
    if not await persistence.update_agent(agent_id, {"status": "active"}):
        raise HTTPException(status_code=404, detail="Agent not found")
    return MessageResponse(message="Agent activated")


@router.post("/{agent_id}/deactivate", response_model=MessageResponse)
async def deactivate_agent(agent_id: str, persistence: PersistenceService = Depends(get_persistence)):
    if not await persistence.update_agent(agent_id, {"status": "inactive"}):
        raise HTTPException(status_code=404, detail="Agent not found")
    return MessageResponse(message="Agent deactivated")


@router.post("/{agent_id}/execute", response_model=ExecuteResponse)
async def execute_agent(
    agent_id: str,
    payload: ExecuteRequest,
    executor: AgentExecutor = Depends(get_executor),
):
    return await executor.execute(agent_id, payload.input)
