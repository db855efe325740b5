"""
Service Bridge Package

Named request/response channels over the storage and query layers, plus the
stdio transport a UI process talks to.
"""

from finance_monitor.bridge.dispatcher import (
    BridgeError,
    OperationFailedError,
    ServiceBridge,
    UnknownChannelError,
    describe_error,
    failure_envelope,
    success_envelope,
)
from finance_monitor.bridge.handlers import RECORD_CHANNELS, register_handlers
from finance_monitor.bridge.transport import handle_line, serve

__all__ = [
    "BridgeError",
    "OperationFailedError",
    "RECORD_CHANNELS",
    "ServiceBridge",
    "UnknownChannelError",
    "describe_error",
    "failure_envelope",
    "handle_line",
    "register_handlers",
    "serve",
    "success_envelope",
]
