"""Realtime routes: watch control over HTTP plus the /ws channel."""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..errors import ValidationError
from ..schemas import ErrorDetail, WatchedPathsResponse, WatchRequest, WatchResponse
from ..services import RealtimePipeline
from ..utils import get_pipeline, ws_channel, ws_pipeline

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorDetail},
    404: {"model": ErrorDetail},
}

router = APIRouter()


@router.post("/api/realtime/watch", response_model=WatchResponse, responses=ERROR_RESPONSES)
async def watch(req: WatchRequest, pipeline: RealtimePipeline = Depends(get_pipeline)) -> WatchResponse:
    if not req.path:
        raise ValidationError("path is required")
    added = await pipeline.add_path(req.path)
    message = "Started watching path" if added else "Path is already being watched"
    return WatchResponse(message=message, path=req.path)


@router.delete("/api/realtime/watch", response_model=WatchResponse, responses=ERROR_RESPONSES)
async def unwatch(req: WatchRequest, pipeline: RealtimePipeline = Depends(get_pipeline)) -> WatchResponse:
    if not req.path:
        raise ValidationError("path is required")
    removed = await pipeline.remove_path(req.path)
    message = "Stopped watching path" if removed else "Path was not being watched"
    return WatchResponse(message=message, path=req.path)


@router.get("/api/realtime/watched-paths", response_model=WatchedPathsResponse)
def watched_paths(pipeline: RealtimePipeline = Depends(get_pipeline)) -> WatchedPathsResponse:
    return WatchedPathsResponse(paths=pipeline.watched_paths())


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket) -> None:
    """Control channel; every connection also receives realtime_analysis broadcasts."""
    pipeline = ws_pipeline(websocket)
    channel = ws_channel(websocket)
    await websocket.accept()
    sub = channel.subscribe(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            # binary frames carry no text and get the malformed-message reply
            raw = message.get("text")
            reply = await pipeline.handle_message(raw)
            await websocket.send_json(reply)
    except WebSocketDisconnect:
        logger.debug("Client %s disconnected", sub.id)
    finally:
        channel.unsubscribe(sub)
