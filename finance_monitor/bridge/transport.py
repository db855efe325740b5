"""
Stdio Transport

JSON-lines protocol between the UI process and the bridge:

    request:  {"id": 7, "channel": "get-tasks", "payload": "3f2a..."}
    response: {"id": 7, "response": {"success": true, "tasks": [...]}}

One request per line in, one response per line out, in order. Logging goes
to stderr so stdout only ever carries responses.
"""

import asyncio
import json
import sys
from typing import Any, Optional, TextIO

from finance_monitor.bridge.dispatcher import ServiceBridge, failure_envelope


async def handle_line(bridge: ServiceBridge, line: str) -> dict[str, Any]:
    """Decode one request line, invoke the bridge, and build the response."""
    try:
        message = json.loads(line)
    except ValueError as e:
        return {"id": None, "response": failure_envelope(f"Malformed request: {e}")}

    if not isinstance(message, dict):
        return {"id": None, "response": failure_envelope("Malformed request: expected a JSON object")}

    request_id = message.get("id")
    channel = message.get("channel")
    if not isinstance(channel, str) or not channel:
        return {"id": request_id, "response": failure_envelope("Malformed request: missing channel")}

    envelope = await bridge.invoke(channel, message.get("payload"))
    return {"id": request_id, "response": envelope}


async def serve(
    bridge: ServiceBridge,
    reader: Optional[TextIO] = None,
    writer: Optional[TextIO] = None,
) -> int:
    """
    Answer requests until the reader reaches end of input.

    Returns:
        Number of requests answered
    """
    reader = reader or sys.stdin
    writer = writer or sys.stdout
    answered = 0

    while True:
        line = await asyncio.to_thread(reader.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue

        response = await handle_line(bridge, line)
        writer.write(json.dumps(response) + "\n")
        writer.flush()
        answered += 1

    return answered


def main() -> None:
    """Console entry point: serve the default data directory on stdin/stdout."""
    from finance_monitor.config import first_settings_error
    from finance_monitor.orchestrator import create_app_components

    error = first_settings_error()
    if error:
        sys.exit(error)

    bridge, _, _ = create_app_components()
    asyncio.run(serve(bridge))


if __name__ == "__main__":
    main()
