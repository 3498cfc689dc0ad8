"""Pluggable logging of models, policies, roles and enforcement results."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

_std_logger = logging.getLogger("policyguard")


def _fmt(value: Any) -> str:
    """Render a value the compact way logs show it: lists as ``[a b c]``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_fmt(item) for item in value) + "]"
    if value is None:
        return "[]"
    return str(value)


class Logger(ABC):
    """Interface every logger used by the package implements."""

    @abstractmethod
    def enable_log(self, enable: bool) -> None:
        """Turn output on or off."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Return whether output is on."""

    @abstractmethod
    def log_model(self, model: Sequence[Sequence[str]]) -> None:
        """Log the model's definitions."""

    @abstractmethod
    def log_enforce(
        self,
        matcher: str,
        request: Sequence[Any],
        result: bool,
        explains: Sequence[Sequence[str]],
    ) -> None:
        """Log one enforcement decision."""

    @abstractmethod
    def log_role(self, roles: Sequence[str]) -> None:
        """Log role information."""

    @abstractmethod
    def log_policy(self, policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
        """Log the policy rules."""

    @abstractmethod
    def log_error(self, err: BaseException, *args: str) -> None:
        """Log an error with optional messages."""


class DefaultLogger(Logger):
    """Logger writing to the standard ``policyguard`` logger; off by default."""

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled

    def enable_log(self, enable: bool) -> None:
        self._enabled = bool(enable)

    def is_enabled(self) -> bool:
        return self._enabled

    def log_model(self, model: Sequence[Sequence[str]]) -> None:
        if not self._enabled:
            return
        lines = "".join(f"{_fmt(list(entry))}\n" for entry in model or ())
        _std_logger.info("Model: %s", lines)

    def log_enforce(
        self,
        matcher: str,
        request: Sequence[Any],
        result: bool,
        explains: Sequence[Sequence[str]],
    ) -> None:
        if not self._enabled:
            return
        request_text = ", ".join(_fmt(value) for value in request or ())
        text = f"Request: {request_text} ---> {_fmt(result)}\nHit Policy: "
        explains = list(explains or ())
        if explains:
            text += ", ".join(_fmt(list(rule)) for rule in explains) + " \n"
        _std_logger.info("%s", text)

    def log_policy(self, policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
        if not self._enabled:
            return
        lines = "".join(
            f"{key} : {_fmt([list(rule) for rule in rules or ()])}\n"
            for key, rules in (policy or {}).items()
        )
        _std_logger.info("Policy: %s", lines)

    def log_role(self, roles: Sequence[str]) -> None:
        if not self._enabled:
            return
        _std_logger.info("Roles: %s", "\n".join(roles or ()))

    def log_error(self, err: BaseException, *args: str) -> None:
        if not self._enabled:
            return
        _std_logger.info("%s %s", _fmt(list(args)), err)


_registry: dict[str, Logger] = {"current": DefaultLogger()}


def set_logger(logger: Logger) -> Logger:
    """Replace the package-wide logger and return the one it replaced."""
    previous = _registry["current"]
    _registry["current"] = logger
    return previous


def get_logger() -> Logger:
    """Return the package-wide logger."""
    return _registry["current"]


def log_model(model: Sequence[Sequence[str]]) -> None:
    """Log model information through the current logger."""
    get_logger().log_model(model)


def log_enforce(
    matcher: str,
    request: Sequence[Any],
    result: bool,
    explains: Sequence[Sequence[str]],
) -> None:
    """Log an enforcement decision through the current logger."""
    get_logger().log_enforce(matcher, request, result, explains)


def log_role(roles: Sequence[str]) -> None:
    """Log role information through the current logger."""
    get_logger().log_role(roles)


def log_policy(policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
    """Log policy information through the current logger."""
    get_logger().log_policy(policy)


def log_error(err: BaseException, *args: str) -> None:
    """Log an error through the current logger."""
    get_logger().log_error(err, *args)