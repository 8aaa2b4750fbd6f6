"""
Shared API state - Socket.io server used to push project/layout events.
Initialized by main.py after creating app and sio.
"""

from typing import Any

# Set by main.py
sio: Any = None


def init_api_state(sio_instance):
    global sio
    sio = sio_instance


async def emit(event: str, payload: dict) -> None:
    """Emit to all connected viewers; no-op before init."""
    if sio is not None:
        await sio.emit(event, payload)
