"""
Medication API endpoints - Reminder CRUD and the live list stream.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import StreamingResponse

from ..core.container import ServiceContainer
from ..models import MedicationCreate, MedicationList
from .deps import get_container, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/medications", tags=["medications"])

KEEPALIVE_SECONDS = 15.0


@router.get("", response_model=MedicationList)
async def list_medications(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """Current synced list, newest first."""
    sync = await container.medication_sync(user_id)
    records = sync.records
    return MedicationList(medications=records, count=len(records))


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_medication(
    medication: MedicationCreate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """
    Add a reminder.

    Returns:
        The new record id
    """
    record_id = await container.medications.create(
        user_id, medication.name, medication.dose, medication.time
    )
    return {"id": record_id}


@router.post("/{record_id}/toggle")
async def toggle_medication(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """Flip the taken flag of a reminder."""
    is_taken = await container.medications.toggle_taken(user_id, record_id)
    return {"id": record_id, "isTaken": is_taken}


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medication(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """Remove a reminder."""
    await container.medications.delete(user_id, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stream")
async def stream_medications(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """
    Server-Sent Events stream of the user's list.
    Each event carries the complete list; the subscription ends with the connection.
    """
    queue: asyncio.Queue = asyncio.Queue()
    subscription = await container.medications.subscribe(user_id, queue.put_nowait)

    async def event_generator():
        try:
            while not await request.is_disconnected():
                try:
                    records = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue

                # Only the newest snapshot matters
                while not queue.empty():
                    records = queue.get_nowait()

                payload = MedicationList(medications=records, count=len(records))
                yield f"data: {json.dumps(payload.model_dump(mode='json', by_alias=True), ensure_ascii=False)}\n\n"
        finally:
            subscription.cancel()
            logger.debug(f"Medication stream closed for user {user_id}")

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )
