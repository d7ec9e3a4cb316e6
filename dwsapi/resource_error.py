"""Error information recorded in resource statuses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum


class ResourceErrorSeverity(str, Enum):
    """How likely an operation is to succeed on retry."""

    MINOR = "Minor"
    MAJOR = "Major"
    FATAL = "Fatal"

    def __str__(self) -> str:
        return self.value


class ResourceErrorType(str, Enum):
    """Where an error originates."""

    INTERNAL = "Internal"
    WLM = "WLM"
    USER = "User"

    def __str__(self) -> str:
        return self.value


def _format(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


class ResourceErrorInfo(Exception):
    """An error with a severity, a type and user and debug messages."""

    def __init__(
        self,
        debug_message: str = "",
        user_message: str = "",
        type: ResourceErrorType = ResourceErrorType.INTERNAL,
        severity: ResourceErrorSeverity = ResourceErrorSeverity.MINOR,
    ) -> None:
        super().__init__(debug_message)
        self.debug_message = debug_message
        self.user_message = user_message
        self.type = type
        self.severity = severity

    def with_user_message(self, format: str, *args) -> ResourceErrorInfo:
        """Set the user message unless a lower layer already set one."""
        if not self.user_message:
            self.user_message = _format(format, args)
        return self

    def with_error(self, err: BaseException | None) -> ResourceErrorInfo:
        """Fold a child error into this one."""
        if err is None:
            return self

        messages = [self.debug_message] if self.debug_message else []
        if isinstance(err, ResourceErrorInfo):
            self.severity = err.severity
            self.user_message = err.user_message
            self.type = err.type
            messages.append(err.debug_message or err.user_message)
        else:
            messages.append(str(err))

        self.debug_message = ": ".join(messages)
        return self

    def with_fatal(self) -> ResourceErrorInfo:
        self.severity = ResourceErrorSeverity.FATAL
        return self

    def with_major(self) -> ResourceErrorInfo:
        if self.severity != ResourceErrorSeverity.FATAL:
            self.severity = ResourceErrorSeverity.MAJOR
        return self

    def with_minor(self) -> ResourceErrorInfo:
        if self.severity not in (ResourceErrorSeverity.FATAL, ResourceErrorSeverity.MAJOR):
            self.severity = ResourceErrorSeverity.MINOR
        return self

    def with_internal(self) -> ResourceErrorInfo:
        self.type = ResourceErrorType.INTERNAL
        return self

    def with_wlm(self) -> ResourceErrorInfo:
        self.type = ResourceErrorType.WLM
        return self

    def with_user(self) -> ResourceErrorInfo:
        self.type = ResourceErrorType.USER
        return self

    def get_user_message(self) -> str:
        return f"{self.type.value} error: {self.user_message}"

    def __str__(self) -> str:
        message = self.debug_message or self.user_message
        return f"{self.type.value.lower()} error: {message}"


def new_resource_error(format: str, *args) -> ResourceErrorInfo:
    """Create a minor internal error with a formatted debug message."""
    return ResourceErrorInfo(debug_message=_format(format, args))


@dataclass
class ResourceError:
    """Holder for the error information of a resource status."""

    error: ResourceErrorInfo | None = None

    def set_resource_error(self, err: BaseException | None) -> None:
        self.error = None if err is None else new_resource_error("").with_error(err)

    def set_resource_error_and_log(self, err: BaseException | None, log: logging.Logger) -> None:
        self.set_resource_error(err)
        if err is None:
            return

        if isinstance(err, ResourceErrorInfo):
            if err.severity == ResourceErrorSeverity.FATAL:
                log.error("Fatal error: %s", err)
                return
            log.info("Recoverable Error: Severity=%s Message=%s", err.severity.value, err)
            return

        log.info("Recoverable Error: Message=%s", err)