"""Service objects: one business operation per class with collected errors.

A service is built from keyword attributes, runs ``perform()`` once, keeps
its return value in ``result`` and reports problems through ``errors``
rather than raising::

    service = InvoiceCreation.call(order=order, kind="debit")
    if service.successful:
        invoice = service.result

Callers can also hand over named callbacks that the service triggers at
well-defined points::

    InvoiceCreation.call(
        order=order,
        kind="debit",
        callbacks=lambda on: on("created", notify_accounting),
    )
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServiceError:
    """A failure recorded by a service, with the call site that recorded it."""

    type: str
    message: str
    caller_info: str | None = None


@dataclass(frozen=True)
class ServiceMessage:
    """An informational note recorded by a service."""

    message: str
    time: datetime = field(default_factory=lambda: datetime.now(UTC))


class ServiceCallbackMissing(AttributeError):
    """A service triggered a callback that the caller did not register."""


class ServiceCallbacks:
    """Named callbacks registered by the caller of a service."""

    def __init__(self, register: Callable[[Callable], Any] | None = None):
        self._callbacks: dict[str, Callable] = {}
        if register is not None:
            register(self.on)

    def on(self, name: str, callback: Callable) -> Callable:
        self._callbacks[name] = callback
        return callback

    def registered(self, name: str) -> bool:
        return name in self._callbacks

    def call(self, name: str, *args):
        if name not in self._callbacks:
            raise ServiceCallbackMissing(f'The callback "{name}" is not defined.')
        return self._callbacks[name](*args)


class Service:
    """Base class for service objects. Subclasses implement ``perform``."""

    def __init__(self, callbacks: Callable | None = None, verbose: bool = False, **attributes):
        for name, value in attributes.items():
            setattr(self, name, value)
        self.verbose = verbose
        self.errors: list[ServiceError] = []
        self.messages: list[ServiceMessage] = []
        self.result = None
        self._callbacks = ServiceCallbacks(callbacks)

    @classmethod
    def call(cls, callbacks: Callable | None = None, **attributes) -> "Service":
        return cls(callbacks=callbacks, **attributes).execute()

    def execute(self) -> "Service":
        self.result = self.perform()
        return self

    def perform(self):
        raise NotImplementedError(f"{self.__class__.__name__} must implement perform()")

    @property
    def error(self) -> ServiceError | None:
        return self.errors[0] if self.errors else None

    @property
    def successful(self) -> bool:
        return not self.errors

    def append_error(self, error_type: str, message: str, verbose: bool | None = None) -> ServiceError:
        caller = inspect.stack()[1]
        caller_info = f"{caller.filename}:{caller.lineno}:in {caller.function}"
        error = ServiceError(type=error_type, message=message, caller_info=caller_info)
        self.errors.append(error)
        if self.verbose if verbose is None else verbose:
            logger.warning("service.error", service=self.__class__.__name__, error_type=error_type, message=message, caller=caller_info)
        return error

    def append_message(self, message: str, verbose: bool | None = None) -> ServiceMessage:
        note = ServiceMessage(message=message)
        self.messages.append(note)
        if self.verbose if verbose is None else verbose:
            logger.info("service.message", service=self.__class__.__name__, message=message)
        return note

    def has_callback(self, name: str) -> bool:
        return self._callbacks.registered(name)

    def call_back(self, name: str, *args):
        return self._callbacks.call(name, *args)
