# app/errors.py
from __future__ import annotations


class TypecacheError(Exception):
    """Base class for errors raised outside the typing engine."""


class StoreError(TypecacheError):
    """Local record store could not be read or written."""


class ApiError(TypecacheError):
    """Transport or HTTP failure talking to the attempts API."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ValidationError(TypecacheError):
    """An attempt was rejected by the store (bad payload or implausible speed)."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code
