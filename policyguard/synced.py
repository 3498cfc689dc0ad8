"""An enforcer whose rule queries and changes are safe to call from many threads."""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from .management import ManagementEnforcer
from .policy import PolicyModel

Rules = Sequence[Sequence[str]]

_F = TypeVar("_F", bound=Callable[..., Any])


def _locked(func: _F) -> _F:
    """Run the method while holding the enforcer's lock."""

    @functools.wraps(func)
    def wrapper(self: SyncedEnforcer, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class SyncedEnforcer(ManagementEnforcer):
    """A :class:`ManagementEnforcer` that serialises every call with one lock.

    The lock is reentrant, so methods that call other methods of the
    enforcer, and callers that hold :attr:`lock` themselves, do not block.
    """

    def __init__(self, model: PolicyModel, **kwargs: Any) -> None:
        super().__init__(model, **kwargs)
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """The lock guarding the enforcer; hold it to group several calls."""
        return self._lock

    @_locked
    def clear_policy(self) -> None:
        super().clear_policy()

    # Queries.

    @_locked
    def get_all_subjects(self) -> list[str]:
        return super().get_all_subjects()

    @_locked
    def get_all_named_subjects(self, ptype: str) -> list[str]:
        return super().get_all_named_subjects(ptype)

    @_locked
    def get_all_objects(self) -> list[str]:
        return super().get_all_objects()

    @_locked
    def get_all_named_objects(self, ptype: str) -> list[str]:
        return super().get_all_named_objects(ptype)

    @_locked
    def get_all_actions(self) -> list[str]:
        return super().get_all_actions()

    @_locked
    def get_all_named_actions(self, ptype: str) -> list[str]:
        return super().get_all_named_actions(ptype)

    @_locked
    def get_all_roles(self) -> list[str]:
        return super().get_all_roles()

    @_locked
    def get_all_named_roles(self, ptype: str) -> list[str]:
        return super().get_all_named_roles(ptype)

    @_locked
    def get_policy(self) -> list[list[str]]:
        return super().get_policy()

    @_locked
    def get_filtered_policy(self, field_index: int, *field_values: str) -> list[list[str]]:
        return super().get_filtered_policy(field_index, *field_values)

    @_locked
    def get_named_policy(self, ptype: str) -> list[list[str]]:
        return super().get_named_policy(ptype)

    @_locked
    def get_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        return super().get_filtered_named_policy(ptype, field_index, *field_values)

    @_locked
    def get_grouping_policy(self) -> list[list[str]]:
        return super().get_grouping_policy()

    @_locked
    def get_filtered_grouping_policy(
        self, field_index: int, *field_values: str
    ) -> list[list[str]]:
        return super().get_filtered_grouping_policy(field_index, *field_values)

    @_locked
    def get_named_grouping_policy(self, ptype: str) -> list[list[str]]:
        return super().get_named_grouping_policy(ptype)

    @_locked
    def get_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        return super().get_filtered_named_grouping_policy(ptype, field_index, *field_values)

    # Policy rules.

    @_locked
    def has_policy(self, *params: Any) -> bool:
        return super().has_policy(*params)

    @_locked
    def has_named_policy(self, ptype: str, *params: Any) -> bool:
        return super().has_named_policy(ptype, *params)

    @_locked
    def add_policy(self, *params: Any) -> bool:
        return super().add_policy(*params)

    @_locked
    def add_policies(self, rules: Rules) -> bool:
        return super().add_policies(rules)

    @_locked
    def add_policies_ex(self, rules: Rules) -> bool:
        return super().add_policies_ex(rules)

    @_locked
    def add_named_policy(self, ptype: str, *params: Any) -> bool:
        return super().add_named_policy(ptype, *params)

    @_locked
    def add_named_policies(self, ptype: str, rules: Rules) -> bool:
        return super().add_named_policies(ptype, rules)

    @_locked
    def add_named_policies_ex(self, ptype: str, rules: Rules) -> bool:
        return super().add_named_policies_ex(ptype, rules)

    @_locked
    def remove_policy(self, *params: Any) -> bool:
        return super().remove_policy(*params)

    @_locked
    def update_policy(self, old_policy: Sequence[str], new_policy: Sequence[str]) -> bool:
        return super().update_policy(old_policy, new_policy)

    @_locked
    def update_named_policy(
        self, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        return super().update_named_policy(ptype, old_rule, new_rule)

    @_locked
    def update_policies(self, old_policies: Rules, new_policies: Rules) -> bool:
        return super().update_policies(old_policies, new_policies)

    @_locked
    def update_named_policies(self, ptype: str, old_rules: Rules, new_rules: Rules) -> bool:
        return super().update_named_policies(ptype, old_rules, new_rules)

    @_locked
    def update_filtered_policies(
        self, new_policies: Rules, field_index: int, *field_values: str
    ) -> bool:
        return super().update_filtered_policies(new_policies, field_index, *field_values)

    @_locked
    def update_filtered_named_policies(
        self, ptype: str, new_policies: Rules, field_index: int, *field_values: str
    ) -> bool:
        return super().update_filtered_named_policies(
            ptype, new_policies, field_index, *field_values
        )

    @_locked
    def remove_policies(self, rules: Rules) -> bool:
        return super().remove_policies(rules)

    @_locked
    def remove_filtered_policy(self, field_index: int, *field_values: str) -> bool:
        return super().remove_filtered_policy(field_index, *field_values)

    @_locked
    def remove_named_policy(self, ptype: str, *params: Any) -> bool:
        return super().remove_named_policy(ptype, *params)

    @_locked
    def remove_named_policies(self, ptype: str, rules: Rules) -> bool:
        return super().remove_named_policies(ptype, rules)

    @_locked
    def remove_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        return super().remove_filtered_named_policy(ptype, field_index, *field_values)

    # Grouping rules.

    @_locked
    def has_grouping_policy(self, *params: Any) -> bool:
        return super().has_grouping_policy(*params)

    @_locked
    def has_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        return super().has_named_grouping_policy(ptype, *params)

    @_locked
    def add_grouping_policy(self, *params: Any) -> bool:
        return super().add_grouping_policy(*params)

    @_locked
    def add_grouping_policies(self, rules: Rules) -> bool:
        return super().add_grouping_policies(rules)

    @_locked
    def add_grouping_policies_ex(self, rules: Rules) -> bool:
        return super().add_grouping_policies_ex(rules)

    @_locked
    def add_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        return super().add_named_grouping_policy(ptype, *params)

    @_locked
    def add_named_grouping_policies(self, ptype: str, rules: Rules) -> bool:
        return super().add_named_grouping_policies(ptype, rules)

    @_locked
    def add_named_grouping_policies_ex(self, ptype: str, rules: Rules) -> bool:
        return super().add_named_grouping_policies_ex(ptype, rules)

    @_locked
    def remove_grouping_policy(self, *params: Any) -> bool:
        return super().remove_grouping_policy(*params)

    @_locked
    def remove_grouping_policies(self, rules: Rules) -> bool:
        return super().remove_grouping_policies(rules)

    @_locked
    def remove_filtered_grouping_policy(self, field_index: int, *field_values: str) -> bool:
        return super().remove_filtered_grouping_policy(field_index, *field_values)

    @_locked
    def remove_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        return super().remove_named_grouping_policy(ptype, *params)

    @_locked
    def remove_named_grouping_policies(self, ptype: str, rules: Rules) -> bool:
        return super().remove_named_grouping_policies(ptype, rules)

    @_locked
    def update_grouping_policy(self, old_rule: Sequence[str], new_rule: Sequence[str]) -> bool:
        return super().update_grouping_policy(old_rule, new_rule)

    @_locked
    def update_grouping_policies(self, old_rules: Rules, new_rules: Rules) -> bool:
        return super().update_grouping_policies(old_rules, new_rules)

    @_locked
    def update_named_grouping_policy(
        self, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        return super().update_named_grouping_policy(ptype, old_rule, new_rule)

    @_locked
    def update_named_grouping_policies(
        self, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        return super().update_named_grouping_policies(ptype, old_rules, new_rules)

    @_locked
    def remove_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        return super().remove_filtered_named_grouping_policy(ptype, field_index, *field_values)

    # Changes that do not notify the watcher.

    @_locked
    def self_add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        return super().self_add_policy(sec, ptype, rule)

    @_locked
    def self_add_policies(self, sec: str, ptype: str, rules: Rules) -> bool:
        return super().self_add_policies(sec, ptype, rules)

    @_locked
    def self_add_policies_ex(self, sec: str, ptype: str, rules: Rules) -> bool:
        return super().self_add_policies_ex(sec, ptype, rules)

    @_locked
    def self_remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        return super().self_remove_policy(sec, ptype, rule)

    @_locked
    def self_remove_policies(self, sec: str, ptype: str, rules: Rules) -> bool:
        return super().self_remove_policies(sec, ptype, rules)

    @_locked
    def self_remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        return super().self_remove_filtered_policy(sec, ptype, field_index, *field_values)

    @_locked
    def self_update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        return super().self_update_policy(sec, ptype, old_rule, new_rule)

    @_locked
    def self_update_policies(
        self, sec: str, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        return super().self_update_policies(sec, ptype, old_rules, new_rules)