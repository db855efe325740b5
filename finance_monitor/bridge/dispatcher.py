"""
Service Bridge

Routes named channel calls to async handlers and wraps every outcome in the
envelope the UI expects:

    {"success": True, ...payload}
    {"success": False, "error": "message"}

Flow for one call:
1. Look up the channel
2. Validate the payload into the channel's request model
3. Run the handler with the bridge lock held
4. Wrap the result; any exception becomes a failure envelope

Nothing raised by a handler crosses the boundary.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from pydantic import ValidationError

from finance_monitor.audit import AuditLogger, create_correlation_id
from finance_monitor.bridge.requests import BridgeRequest, EmptyRequest
from finance_monitor.models.records import StorageResult


Handler = Callable[[Any, UUID], Awaitable[dict[str, Any]]]


class BridgeError(Exception):
    """Base exception for bridge failures."""
    pass


class UnknownChannelError(BridgeError):
    """No handler is registered for the channel."""
    pass


class OperationFailedError(BridgeError):
    """A storage operation reported failure through its result."""
    pass


def success_envelope(**payload: Any) -> dict[str, Any]:
    return {"success": True, **payload}


def failure_envelope(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def describe_error(error: Exception) -> str:
    """Message shown to the UI for an exception raised during a call."""
    if isinstance(error, ValidationError):
        problems = []
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ()))
            problems.append(f"{location}: {detail['msg']}" if location else detail["msg"])
        return "Invalid request: " + "; ".join(problems)
    return str(error) or type(error).__name__


def ensure(result: StorageResult) -> StorageResult:
    """
    Pass a successful result through.

    Raises:
        OperationFailedError: Carrying the result message when it failed
    """
    if not result:
        raise OperationFailedError(result.message or "Operation failed")
    return result


class ServiceBridge:
    """
    Channel registry and dispatcher.

    Calls are serialised through one asyncio.Lock so two calls never
    interleave their read-modify-write cycles on the same file.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._handlers: dict[str, tuple[type[BridgeRequest], Handler]] = {}
        self._lock = asyncio.Lock()
        self._audit = audit_logger or AuditLogger("finance_monitor.bridge")

    @property
    def channels(self) -> list[str]:
        return sorted(self._handlers)

    def handle(
        self,
        channel: str,
        request_model: type[BridgeRequest] = EmptyRequest,
    ) -> Callable[[Handler], Handler]:
        """Register the decorated coroutine as the handler for a channel."""
        def decorator(func: Handler) -> Handler:
            if channel in self._handlers:
                raise BridgeError(f"Channel already registered: {channel}")
            self._handlers[channel] = (request_model, func)
            return func
        return decorator

    async def invoke(self, channel: str, payload: Any = None) -> dict[str, Any]:
        """
        Execute one channel call.

        Args:
            channel: Channel name, e.g. "add-transaction"
            payload: Request data as sent by the UI

        Returns:
            The success or failure envelope
        """
        correlation_id = create_correlation_id()

        try:
            if channel not in self._handlers:
                raise UnknownChannelError(f"Unknown channel: {channel}")
            request_model, handler = self._handlers[channel]

            request = request_model.from_payload(payload)

            async with self._lock:
                result = await handler(request, correlation_id)

            return success_envelope(**(result or {}))

        except Exception as e:
            self._audit.log_bridge_failure(channel, e, correlation_id)
            return failure_envelope(describe_error(e))
