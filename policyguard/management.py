"""Public API for reading and changing policy and grouping rules."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .internal import PolicyManager

SUBJECT_INDEX = "sub"
OBJECT_INDEX = "obj"
ACTION_INDEX = "act"

Rules = Sequence[Sequence[str]]


def _rule_from(params: Sequence[Any]) -> list[str]:
    """Build a rule from either one sequence of fields or the fields themselves."""
    if not params:
        raise ValueError("a rule needs at least one field")
    if len(params) == 1 and isinstance(params[0], (list, tuple)):
        return list(params[0])
    rule: list[str] = []
    for param in params:
        if not isinstance(param, str):
            raise TypeError(f"rule fields must be strings, got {type(param).__name__}")
        rule.append(param)
    return rule


class ManagementEnforcer(PolicyManager):
    """Queries and changes the rules of the model with the usual shortcuts.

    Methods without a ``ptype`` work on the default types ``p`` and ``g``.
    Methods that take ``*args`` as a rule accept either the fields one by
    one or a single list of fields.
    """

    # Queries over the whole policy.

    def get_all_subjects(self) -> list[str]:
        """Return the subjects that appear in any policy type."""
        return self.model.get_values_for_field_in_policy_all_types_by_name("p", SUBJECT_INDEX)

    def get_all_named_subjects(self, ptype: str) -> list[str]:
        """Return the subjects that appear in policy type ``ptype``."""
        index = self.model.get_field_index(ptype, SUBJECT_INDEX)
        return self.model.get_values_for_field_in_policy("p", ptype, index)

    def get_all_objects(self) -> list[str]:
        """Return the objects that appear in any policy type."""
        return self.model.get_values_for_field_in_policy_all_types_by_name("p", OBJECT_INDEX)

    def get_all_named_objects(self, ptype: str) -> list[str]:
        """Return the objects that appear in policy type ``ptype``."""
        index = self.model.get_field_index(ptype, OBJECT_INDEX)
        return self.model.get_values_for_field_in_policy("p", ptype, index)

    def get_all_actions(self) -> list[str]:
        """Return the actions that appear in any policy type."""
        return self.model.get_values_for_field_in_policy_all_types_by_name("p", ACTION_INDEX)

    def get_all_named_actions(self, ptype: str) -> list[str]:
        """Return the actions that appear in policy type ``ptype``."""
        index = self.model.get_field_index(ptype, ACTION_INDEX)
        return self.model.get_values_for_field_in_policy("p", ptype, index)

    def get_all_roles(self) -> list[str]:
        """Return the roles that appear in any grouping type."""
        return self.model.get_values_for_field_in_policy_all_types("g", 1)

    def get_all_named_roles(self, ptype: str) -> list[str]:
        """Return the roles that appear in grouping type ``ptype``."""
        return self.model.get_values_for_field_in_policy("g", ptype, 1)

    def get_policy(self) -> list[list[str]]:
        """Return all rules of policy type ``p``."""
        return self.get_named_policy("p")

    def get_filtered_policy(self, field_index: int, *field_values: str) -> list[list[str]]:
        """Return the rules of ``p`` matching the field filter."""
        return self.get_filtered_named_policy("p", field_index, *field_values)

    def get_named_policy(self, ptype: str) -> list[list[str]]:
        """Return all rules of policy type ``ptype``."""
        return self.model.get_policy("p", ptype)

    def get_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the rules of ``ptype`` matching the field filter."""
        return self.model.get_filtered_policy("p", ptype, field_index, *field_values)

    def get_grouping_policy(self) -> list[list[str]]:
        """Return all rules of grouping type ``g``."""
        return self.get_named_grouping_policy("g")

    def get_filtered_grouping_policy(
        self, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the rules of ``g`` matching the field filter."""
        return self.get_filtered_named_grouping_policy("g", field_index, *field_values)

    def get_named_grouping_policy(self, ptype: str) -> list[list[str]]:
        """Return all rules of grouping type ``ptype``."""
        return self.model.get_policy("g", ptype)

    def get_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the grouping rules of ``ptype`` matching the field filter."""
        return self.model.get_filtered_policy("g", ptype, field_index, *field_values)

    # Policy rules.

    def has_policy(self, *params: Any) -> bool:
        """Return whether the rule exists in ``p``."""
        return self.has_named_policy("p", *params)

    def has_named_policy(self, ptype: str, *params: Any) -> bool:
        """Return whether the rule exists in ``ptype``."""
        return self.model.has_policy("p", ptype, _rule_from(params))

    def add_policy(self, *params: Any) -> bool:
        """Add a rule to ``p``; return False if it already exists."""
        return self.add_named_policy("p", *params)

    def add_policies(self, rules: Rules) -> bool:
        """Add rules to ``p``; return False, adding none, if any exists."""
        return self.add_named_policies("p", rules)

    def add_policies_ex(self, rules: Rules) -> bool:
        """Add the rules to ``p`` that do not exist yet."""
        return self.add_named_policies_ex("p", rules)

    def add_named_policy(self, ptype: str, *params: Any) -> bool:
        """Add a rule to ``ptype``; return False if it already exists."""
        return self._add_policy("p", ptype, _rule_from(params))

    def add_named_policies(self, ptype: str, rules: Rules) -> bool:
        """Add rules to ``ptype``; return False, adding none, if any exists."""
        return self._add_policies("p", ptype, rules, False)

    def add_named_policies_ex(self, ptype: str, rules: Rules) -> bool:
        """Add the rules to ``ptype`` that do not exist yet."""
        return self._add_policies("p", ptype, rules, True)

    def remove_policy(self, *params: Any) -> bool:
        """Remove a rule from ``p``; return whether it existed."""
        return self.remove_named_policy("p", *params)

    def update_policy(self, old_policy: Sequence[str], new_policy: Sequence[str]) -> bool:
        """Replace a rule of ``p``; return whether the old rule existed."""
        return self.update_named_policy("p", old_policy, new_policy)

    def update_named_policy(
        self, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace a rule of ``ptype``; return whether the old rule existed."""
        return self._update_policy("p", ptype, old_rule, new_rule)

    def update_policies(self, old_policies: Rules, new_policies: Rules) -> bool:
        """Replace rules of ``p`` pairwise; all or nothing."""
        return self.update_named_policies("p", old_policies, new_policies)

    def update_named_policies(self, ptype: str, old_rules: Rules, new_rules: Rules) -> bool:
        """Replace rules of ``ptype`` pairwise; all or nothing."""
        return self._update_policies("p", ptype, old_rules, new_rules)

    def update_filtered_policies(
        self, new_policies: Rules, field_index: int, *field_values: str
    ) -> bool:
        """Replace the rules of ``p`` the adapter selects by the field filter."""
        return self.update_filtered_named_policies("p", new_policies, field_index, *field_values)

    def update_filtered_named_policies(
        self, ptype: str, new_policies: Rules, field_index: int, *field_values: str
    ) -> bool:
        """Replace the rules of ``ptype`` the adapter selects by the field filter."""
        return self._update_filtered_policies("p", ptype, new_policies, field_index, *field_values)

    def remove_policies(self, rules: Rules) -> bool:
        """Remove rules from ``p``; return False if none of them exists."""
        return self.remove_named_policies("p", rules)

    def remove_filtered_policy(self, field_index: int, *field_values: str) -> bool:
        """Remove the rules of ``p`` matching the field filter."""
        return self.remove_filtered_named_policy("p", field_index, *field_values)

    def remove_named_policy(self, ptype: str, *params: Any) -> bool:
        """Remove a rule from ``ptype``; return whether it existed."""
        return self._remove_policy("p", ptype, _rule_from(params))

    def remove_named_policies(self, ptype: str, rules: Rules) -> bool:
        """Remove rules from ``ptype``; return False if none of them exists."""
        return self._remove_policies("p", ptype, rules)

    def remove_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove the rules of ``ptype`` matching the field filter."""
        return self._remove_filtered_policy("p", ptype, field_index, field_values)

    # Grouping rules.

    def has_grouping_policy(self, *params: Any) -> bool:
        """Return whether the grouping rule exists in ``g``."""
        return self.has_named_grouping_policy("g", *params)

    def has_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Return whether the grouping rule exists in ``ptype``."""
        return self.model.has_policy("g", ptype, _rule_from(params))

    def add_grouping_policy(self, *params: Any) -> bool:
        """Add a grouping rule to ``g``; return False if it already exists."""
        return self.add_named_grouping_policy("g", *params)

    def add_grouping_policies(self, rules: Rules) -> bool:
        """Add grouping rules to ``g``; return False, adding none, if any exists."""
        return self.add_named_grouping_policies("g", rules)

    def add_grouping_policies_ex(self, rules: Rules) -> bool:
        """Add the grouping rules to ``g`` that do not exist yet."""
        return self.add_named_grouping_policies_ex("g", rules)

    def add_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Add a grouping rule to ``ptype``; return False if it already exists."""
        return self._add_policy("g", ptype, _rule_from(params))

    def add_named_grouping_policies(self, ptype: str, rules: Rules) -> bool:
        """Add grouping rules to ``ptype``; return False, adding none, if any exists."""
        return self._add_policies("g", ptype, rules, False)

    def add_named_grouping_policies_ex(self, ptype: str, rules: Rules) -> bool:
        """Add the grouping rules to ``ptype`` that do not exist yet."""
        return self._add_policies("g", ptype, rules, True)

    def remove_grouping_policy(self, *params: Any) -> bool:
        """Remove a grouping rule from ``g``; return whether it existed."""
        return self.remove_named_grouping_policy("g", *params)

    def remove_grouping_policies(self, rules: Rules) -> bool:
        """Remove grouping rules from ``g``; return False if none exists."""
        return self.remove_named_grouping_policies("g", rules)

    def remove_filtered_grouping_policy(self, field_index: int, *field_values: str) -> bool:
        """Remove the grouping rules of ``g`` matching the field filter."""
        return self.remove_filtered_named_grouping_policy("g", field_index, *field_values)

    def remove_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Remove a grouping rule from ``ptype``; return whether it existed."""
        return self._remove_policy("g", ptype, _rule_from(params))

    def remove_named_grouping_policies(self, ptype: str, rules: Rules) -> bool:
        """Remove grouping rules from ``ptype``; return False if none exists."""
        return self._remove_policies("g", ptype, rules)

    def update_grouping_policy(self, old_rule: Sequence[str], new_rule: Sequence[str]) -> bool:
        """Replace a grouping rule of ``g``."""
        return self.update_named_grouping_policy("g", old_rule, new_rule)

    def update_grouping_policies(self, old_rules: Rules, new_rules: Rules) -> bool:
        """Replace grouping rules of ``g`` pairwise; all or nothing."""
        return self.update_named_grouping_policies("g", old_rules, new_rules)

    def update_named_grouping_policy(
        self, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace a grouping rule of ``ptype``."""
        return self._update_policy("g", ptype, old_rule, new_rule)

    def update_named_grouping_policies(
        self, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        """Replace grouping rules of ``ptype`` pairwise; all or nothing."""
        return self._update_policies("g", ptype, old_rules, new_rules)

    def remove_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove the grouping rules of ``ptype`` matching the field filter."""
        return self._remove_filtered_policy("g", ptype, field_index, field_values)

    # Changes that do not notify the watcher.

    def self_add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Add a rule without notifying the watcher."""
        return self._add_policy_without_notify(sec, ptype, rule)

    def self_add_policies(self, sec: str, ptype: str, rules: Rules) -> bool:
        """Add rules, all or none, without notifying the watcher."""
        return self._add_policies_without_notify(sec, ptype, rules, False)

    def self_add_policies_ex(self, sec: str, ptype: str, rules: Rules) -> bool:
        """Add the new rules among ``rules`` without notifying the watcher."""
        return self._add_policies_without_notify(sec, ptype, rules, True)

    def self_remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Remove a rule without notifying the watcher."""
        return self._remove_policy_without_notify(sec, ptype, rule)

    def self_remove_policies(self, sec: str, ptype: str, rules: Rules) -> bool:
        """Remove rules without notifying the watcher."""
        return self._remove_policies_without_notify(sec, ptype, rules)

    def self_remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove the rules matching the field filter without notifying the watcher."""
        return self._remove_filtered_policy_without_notify(sec, ptype, field_index, field_values)

    def self_update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace a rule without notifying the watcher."""
        return self._update_policy_without_notify(sec, ptype, old_rule, new_rule)

    def self_update_policies(
        self, sec: str, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        """Replace rules pairwise without notifying the watcher."""
        return self._update_policies_without_notify(sec, ptype, old_rules, new_rules)