"""Policy rule storage and queries on top of the access-control model."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .assertion import Assertion, PolicyOp
from .model import PRIORITY_INDEX, Model

DEFAULT_SEP = ","
"""Separator used to join a rule into its lookup key."""

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _key(rule: Sequence[str]) -> str:
    return DEFAULT_SEP.join(rule)


def _to_int(text: str) -> int | None:
    """Parse a plain decimal integer, or return None when ``text`` is not one."""
    if _INT_RE.fullmatch(text) is None:
        return None
    return int(text)


def _show(rule: Sequence[str]) -> str:
    return "[" + " ".join(rule) + "]"


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _matches(rule: Sequence[str], field_index: int, field_values: Sequence[str]) -> bool:
    return all(
        value == "" or rule[field_index + offset] == value
        for offset, value in enumerate(field_values)
    )


class PolicyModel(Model):
    """A model that also holds and manages the policy and grouping rules."""

    def build_incremental_role_links(
        self,
        rm_map: Mapping[str, Any],
        op: PolicyOp,
        sec: str,
        ptype: str,
        rules: Iterable[Sequence[str]],
    ) -> None:
        """Apply added or removed grouping rules to the matching role manager."""
        rm = rm_map.get(ptype)
        if sec == "g" and rm is not None:
            self.get_assertion(sec, ptype).build_incremental_role_links(rm, op, rules)

    def build_role_links(self, rm_map: Mapping[str, Any]) -> None:
        """Load every grouping rule into its role manager."""
        self.print_policy()
        for ptype, ast in self.get("g", {}).items():
            rm = rm_map.get(ptype)
            if rm is not None:
                ast.build_role_links(rm)

    def build_incremental_conditional_role_links(
        self,
        cond_rm_map: Mapping[str, Any],
        op: PolicyOp,
        sec: str,
        ptype: str,
        rules: Iterable[Sequence[str]],
    ) -> None:
        """Apply added or removed grouping rules to the conditional role manager."""
        cond_rm = cond_rm_map.get(ptype)
        if sec == "g" and cond_rm is not None:
            self.get_assertion(sec, ptype).build_incremental_conditional_role_links(
                cond_rm, op, rules
            )

    def build_conditional_role_links(self, cond_rm_map: Mapping[str, Any]) -> None:
        """Load every grouping rule into its conditional role manager."""
        self.print_policy()
        for ptype, ast in self.get("g", {}).items():
            cond_rm = cond_rm_map.get(ptype)
            if cond_rm is not None:
                ast.build_conditional_role_links(cond_rm)

    def print_policy(self) -> None:
        """Send all policy and grouping rules to the logger if it is enabled."""
        if not self.logger.is_enabled():
            return
        policy: dict[str, list[list[str]]] = {}
        for sec in ("p", "g"):
            for key, ast in self.get(sec, {}).items():
                policy.setdefault(key, []).extend(ast.policy)
        self.logger.log_policy(policy)

    def clear_policy(self) -> None:
        """Remove every policy and grouping rule."""
        for sec in ("p", "g"):
            for ast in self.get(sec, {}).values():
                ast.policy = []
                ast.policy_map = {}

    def get_policy(self, sec: str, ptype: str) -> list[list[str]]:
        """Return all rules of a policy type."""
        return [list(rule) for rule in self.get_assertion(sec, ptype).policy]

    def get_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the rules whose fields from ``field_index`` on match the values.

        An empty string among the values matches any field.
        """
        ast = self.get_assertion(sec, ptype)
        return [
            list(rule) for rule in ast.policy if _matches(rule, field_index, field_values)
        ]

    def has_policy_ex(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Like :meth:`has_policy`, but reject a rule of the wrong size."""
        ast = self.get_assertion(sec, ptype)
        expected = len(ast.tokens)
        if (sec == "p" and len(rule) != expected) or (sec == "g" and len(rule) < expected):
            raise ValueError(
                f"invalid policy rule size: expected {expected}, "
                f"got {len(rule)}, rule: {_show(rule)}"
            )
        return self.has_policy(sec, ptype, rule)

    def has_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Return whether the rule exists."""
        return _key(rule) in self.get_assertion(sec, ptype).policy_map

    def has_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Return whether any of the rules exists."""
        return any(self.has_policy(sec, ptype, rule) for rule in rules)

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        """Append a rule, keeping rules ordered by priority when the type has one."""
        ast = self.get_assertion(sec, ptype)
        rule = list(rule)
        ast.policy.append(rule)
        ast.policy_map[_key(rule)] = len(ast.policy) - 1

        if sec != "p" or PRIORITY_INDEX not in ast.field_index_map:
            return
        priority_index = ast.field_index_map[PRIORITY_INDEX]
        inserted = _to_int(rule[priority_index])
        if inserted is None:
            return
        position = len(ast.policy) - 1
        while position > 0:
            previous_rule = ast.policy[position - 1]
            previous = _to_int(previous_rule[priority_index])
            if previous is None or previous <= inserted:
                break
            ast.policy[position] = previous_rule
            ast.policy_map[_key(previous_rule)] += 1
            position -= 1
        ast.policy[position] = rule
        ast.policy_map[_key(rule)] = position

    def add_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> None:
        """Add the rules, skipping those already present."""
        self.add_policies_with_affected(sec, ptype, rules)

    def add_policies_with_affected(
        self, sec: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> list[list[str]]:
        """Add the rules that are not present yet and return them."""
        ast = self.get_assertion(sec, ptype)
        affected: list[list[str]] = []
        for rule in rules:
            if _key(rule) in ast.policy_map:
                continue
            affected.append(list(rule))
            self.add_policy(sec, ptype, rule)
        return affected

    @staticmethod
    def _remove_at(ast: Assertion, index: int, key: str) -> None:
        del ast.policy[index]
        del ast.policy_map[key]
        for position in range(index, len(ast.policy)):
            ast.policy_map[_key(ast.policy[position])] = position

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Remove a rule; return whether it was present."""
        ast = self.get_assertion(sec, ptype)
        key = _key(rule)
        index = ast.policy_map.get(key)
        if index is None:
            return False
        self._remove_at(ast, index, key)
        return True

    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace a rule in place; return whether the old rule was present."""
        ast = self.get_assertion(sec, ptype)
        old_key = _key(old_rule)
        index = ast.policy_map.get(old_key)
        if index is None:
            return False
        ast.policy[index] = list(new_rule)
        del ast.policy_map[old_key]
        ast.policy_map[_key(new_rule)] = index
        return True

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> bool:
        """Replace rules pairwise; on a missing old rule undo all and return False."""
        ast = self.get_assertion(sec, ptype)
        modified: list[tuple[int, int]] = []
        for position, old_rule in enumerate(old_rules):
            old_key = _key(old_rule)
            index = ast.policy_map.get(old_key)
            if index is None:
                for done_index, done_position in reversed(modified):
                    ast.policy[done_index] = list(old_rules[done_position])
                    ast.policy_map.pop(_key(new_rules[done_position]), None)
                    ast.policy_map[_key(old_rules[done_position])] = done_index
                return False
            new_rule = list(new_rules[position])
            ast.policy[index] = new_rule
            del ast.policy_map[old_key]
            ast.policy_map[_key(new_rule)] = index
            modified.append((index, position))
        return True

    def remove_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Remove the rules; return whether any was present."""
        return bool(self.remove_policies_with_affected(sec, ptype, rules))

    def remove_policies_with_affected(
        self, sec: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> list[list[str]]:
        """Remove the rules that are present and return them."""
        ast = self.get_assertion(sec, ptype)
        affected: list[list[str]] = []
        for rule in rules:
            key = _key(rule)
            index = ast.policy_map.get(key)
            if index is None:
                continue
            affected.append(list(rule))
            self._remove_at(ast, index, key)
        return affected

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Remove the rules matching the field filter and return them.

        An empty string among the values matches any field; the result is
        empty when nothing was removed.
        """
        ast = self.get_assertion(sec, ptype)
        kept: list[list[str]] = []
        removed: list[list[str]] = []
        for rule in ast.policy:
            (removed if _matches(rule, field_index, field_values) else kept).append(rule)
        ast.policy_map = {_key(rule): index for index, rule in enumerate(kept)}
        if removed:
            ast.policy = kept
        return removed

    def get_values_for_field_in_policy(
        self, sec: str, ptype: str, field_index: int
    ) -> list[str]:
        """Return the distinct values of one field over the rules, in first-seen order."""
        ast = self.get_assertion(sec, ptype)
        return _unique(rule[field_index] for rule in ast.policy)

    def get_values_for_field_in_policy_all_types(
        self, sec: str, field_index: int
    ) -> list[str]:
        """Return the distinct values of one field over every type of a section."""
        values: list[str] = []
        for ptype in self.get(sec, {}):
            values.extend(self.get_values_for_field_in_policy(sec, ptype, field_index))
        return _unique(values)

    def get_values_for_field_in_policy_all_types_by_name(
        self, sec: str, field: str
    ) -> list[str]:
        """Return the distinct values of a named field over every type of a section.

        Types that do not define the field are skipped.
        """
        values: list[str] = []
        for ptype in self.get(sec, {}):
            try:
                index = self.get_field_index(ptype, field)
            except LookupError:
                continue
            values.extend(self.get_values_for_field_in_policy(sec, ptype, index))
        return _unique(values)