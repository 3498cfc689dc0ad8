"""Assertions: the single definitions that make up a section of a model."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .log import Logger

_TOO_FEW_UNDERSCORES = 'the number of "_" in role definition should be at least 2'
_RULE_TOO_SHORT = "grouping policy elements do not meet role definition"


class PolicyOp(enum.IntEnum):
    """Kind of incremental change applied to role links."""

    ADD = 0
    REMOVE = 1


@dataclass
class Assertion:
    """One definition of a model section, for example ``r = sub, obj, act``."""

    key: str = ""
    value: str = ""
    tokens: list[str] = field(default_factory=list)
    params_tokens: list[str] = field(default_factory=list)
    policy: list[list[str]] = field(default_factory=list)
    policy_map: dict[str, int] = field(default_factory=dict)
    rm: Any = None
    cond_rm: Any = None
    field_index_map: dict[str, int] = field(default_factory=dict)
    logger: Logger | None = None

    def _role_arity(self) -> int:
        count = self.value.count("_")
        if count < 2:
            raise ValueError(_TOO_FEW_UNDERSCORES)
        return count

    @staticmethod
    def _fit(rule: Sequence[str], count: int) -> list[str]:
        if len(rule) < count:
            raise ValueError(_RULE_TOO_SHORT)
        return list(rule[:count])

    def build_incremental_role_links(
        self, rm: Any, op: PolicyOp, rules: Iterable[Sequence[str]]
    ) -> None:
        """Add or delete the links of ``rules`` in the role manager."""
        self.rm = rm
        count = self._role_arity()
        for raw in rules:
            rule = self._fit(raw, count)
            if op is PolicyOp.ADD:
                rm.add_link(rule[0], rule[1], *rule[2:])
            elif op is PolicyOp.REMOVE:
                rm.delete_link(rule[0], rule[1], *rule[2:])

    def build_role_links(self, rm: Any) -> None:
        """Add a link to the role manager for every rule of this assertion."""
        self.rm = rm
        count = self._role_arity()
        for raw in self.policy:
            rule = self._fit(raw, count)
            rm.add_link(rule[0], rule[1], *rule[2:])

    def build_incremental_conditional_role_links(
        self, cond_rm: Any, op: PolicyOp, rules: Iterable[Sequence[str]]
    ) -> None:
        """Add or delete conditional links of ``rules`` in the role manager."""
        self.cond_rm = cond_rm
        count = self._role_arity()
        for raw in rules:
            rule = self._fit(raw, count)
            if op is PolicyOp.ADD:
                self._add_conditional_role_link(rule, rule[2 : len(self.tokens)])
            elif op is PolicyOp.REMOVE:
                cond_rm.delete_link(rule[0], rule[1], *rule[2:])

    def build_conditional_role_links(self, cond_rm: Any) -> None:
        """Add a conditional link for every rule of this assertion."""
        self.cond_rm = cond_rm
        count = self._role_arity()
        for raw in self.policy:
            rule = self._fit(raw, count)
            self._add_conditional_role_link(rule, rule[2 : len(self.tokens)])

    def _add_conditional_role_link(
        self, rule: Sequence[str], domain_rule: Sequence[str]
    ) -> None:
        params = rule[len(self.tokens) :]
        if not domain_rule:
            self.cond_rm.add_link(rule[0], rule[1])
            self.cond_rm.set_link_condition_func_params(rule[0], rule[1], *params)
        else:
            domain = domain_rule[0]
            self.cond_rm.add_link(rule[0], rule[1], domain)
            self.cond_rm.set_domain_link_condition_func_params(
                rule[0], rule[1], domain, *params
            )

    def copy(self) -> Assertion:
        """Return a copy with its own tokens and rules.

        The field index map stays shared with the original; the role
        managers and logger are not carried over.
        """
        return Assertion(
            key=self.key,
            value=self.value,
            tokens=list(self.tokens),
            policy=[list(rule) for rule in self.policy],
            policy_map=dict(self.policy_map),
            field_index_map=self.field_index_map,
        )