"""Exceptions raised by the access-control model and its role handling."""

from __future__ import annotations


class PolicyGuardError(Exception):
    """Base class for all errors raised by this package."""

    default_message = "policy error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class NameNotFoundError(PolicyGuardError, LookupError):
    """A user or role name is not known to the role manager."""

    default_message = "error: name does not exist"


class DomainParameterError(PolicyGuardError, ValueError):
    """More than one domain was passed where at most one is allowed."""

    default_message = "error: domain should be 1 parameter"


class LinkNotFoundError(PolicyGuardError, LookupError):
    """There is no link between the two names."""

    default_message = "error: link between name1 and name2 does not exist"


class UseDomainParameterError(PolicyGuardError, ValueError):
    """More than one use-domain flag was passed."""

    default_message = "error: useDomain should be 1 parameter"


class InvalidFieldValuesError(PolicyGuardError, ValueError):
    """A filtered operation was called without any field values."""

    default_message = "fieldValues requires at least one parameter"


class ObjectConditionError(PolicyGuardError, ValueError):
    """An object does not carry the prefix the object condition requires."""

    default_message = "need to meet the prefix required by the object condition"


class EmptyConditionError(PolicyGuardError, ValueError):
    """An allowed-object query produced an empty condition."""

    default_message = "GetAllowedObjectConditions have an empty condition"