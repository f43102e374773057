import asyncio
import json
import logging
import uuid
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from game import SessionManager

logging.basicConfig(level=logging.INFO)
log = logging.getLogger("shifting-maze")

app = FastAPI(title="Shifting Maze Server", version="0.1.0")
sessions = SessionManager()

# Dev-friendly CORS for browser clients; restrict origins in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

def _safe_json_loads(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

@app.websocket("/ws")
async def ws_endpoint(ws: WebSocket):
    await ws.accept()
    player_id = f"p-{uuid.uuid4().hex[:10]}"
    room = None

    try:
        # 1) Require JOIN first (with timeout)
        try:
            raw = await asyncio.wait_for(ws.receive_text(), timeout=10)
        except asyncio.TimeoutError:
            await ws.send_text(json.dumps({"type": "error", "message": "JOIN timeout"}))
            await ws.close(code=1000)
            return

        msg = _safe_json_loads(raw)
        if msg.get("type") != "join":
            await ws.send_text(json.dumps({"type": "error", "message": "First message must be {type:'join'}"}))
            await ws.close(code=1003)
            return

        # 2) Build the maze for this client
        try:
            room = await sessions.join(ws=ws, player_id=player_id, overrides=msg)
        except (TypeError, ValueError) as e:
            await ws.send_text(json.dumps({"type": "error", "message": f"Bad join: {e}"}))
            await ws.close(code=1003)
            return

        await room.send_start()
        room.start()
        log.info("Player %s joined room %s", player_id, room.room_id)

        # 3) Main loop: forward client intents to the room
        while True:
            raw = await ws.receive_text()
            msg = _safe_json_loads(raw)
            if not msg:
                await ws.send_text(json.dumps({"type": "error", "message": "Invalid JSON"}))
                continue

            await room.handle_client_msg(msg)

    except WebSocketDisconnect:
        log.info("Player %s disconnected", player_id)
        await sessions.disconnect(player_id)

    except Exception as e:
        log.exception("Server error for player %s: %s", player_id, e)
        await sessions.disconnect(player_id)
        try:
            await ws.send_text(json.dumps({"type": "error", "message": f"Server error: {type(e).__name__}"}))
            await ws.close(code=1011)
        except Exception as close_err:
            log.debug("Player %s: close after error failed: %s", player_id, close_err)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080)
