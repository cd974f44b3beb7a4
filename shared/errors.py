"""
errors.py – the four failure kinds the trader distinguishes
"""

from __future__ import annotations

from typing import Any, Optional


class TraderError(Exception):
    """Base class for everything raised on purpose inside the trader."""


class ConfigError(TraderError):
    """A required startup parameter is missing or unusable (fatal)."""


class ValidationError(TraderError):
    """An inbound record is malformed; the event is dropped."""

    def __init__(self, message: str, record: Any = None) -> None:
        super().__init__(message)
        self.record = record


class ProtocolError(TraderError):
    """Deriv answered an outstanding request with an `error` object."""

    def __init__(self, message: str, code: str = "",
                 msg_type: str = "", req_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.msg_type = msg_type
        self.req_id = req_id


class TransportError(TraderError):
    """Socket is not usable (not open yet, closed, send failed)."""


__all__ = [
    "TraderError",
    "ConfigError",
    "ValidationError",
    "ProtocolError",
    "TransportError",
]
