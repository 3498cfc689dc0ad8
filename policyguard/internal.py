"""Rule changes that keep the model, storage adapter, role managers,
watcher and dispatcher in step."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .assertion import PolicyOp
from .errors import InvalidFieldValuesError
from .policy import PolicyModel

Rule = Sequence[str]
Rules = Sequence[Sequence[str]]


def _call_adapter(adapter: Any, method: str, *args: Any) -> Any:
    """Call an optional adapter method.

    A missing method or one that raises NotImplementedError counts as a
    no-op and gives None.
    """
    func = getattr(adapter, method, None)
    if not callable(func):
        return None
    try:
        return func(*args)
    except NotImplementedError:
        return None


class PolicyManager:
    """Applies rule changes to a model and propagates them.

    Changes are written through the adapter when ``auto_save`` is on, and
    announced to the watcher when ``auto_notify_watcher`` is on. When a
    dispatcher is set and ``auto_notify_dispatcher`` is on, changes go to
    the dispatcher instead of the local model. Grouping rules also update
    the role managers in ``rm_map`` and ``cond_rm_map``.
    """

    def __init__(
        self,
        model: PolicyModel,
        *,
        adapter: Any = None,
        watcher: Any = None,
        dispatcher: Any = None,
        rm_map: Mapping[str, Any] | None = None,
        cond_rm_map: Mapping[str, Any] | None = None,
        auto_save: bool = True,
        auto_notify_watcher: bool = True,
        auto_notify_dispatcher: bool = True,
    ) -> None:
        self.model = model
        self.adapter = adapter
        self.watcher = watcher
        self.dispatcher = dispatcher
        self.rm_map: dict[str, Any] = dict(rm_map or {})
        self.cond_rm_map: dict[str, Any] = dict(cond_rm_map or {})
        self.auto_save = auto_save
        self.auto_notify_watcher = auto_notify_watcher
        self.auto_notify_dispatcher = auto_notify_dispatcher

    @property
    def _should_persist(self) -> bool:
        return self.adapter is not None and self.auto_save

    @property
    def _should_notify(self) -> bool:
        return self.watcher is not None and self.auto_notify_watcher

    @property
    def _dispatching(self) -> bool:
        return self.dispatcher is not None and self.auto_notify_dispatcher

    def _notify(self, method: str, *args: Any) -> None:
        if not self._should_notify:
            return
        specific = getattr(self.watcher, method, None)
        if callable(specific):
            specific(*args)
        else:
            self.watcher.update()

    def clear_policy(self) -> None:
        """Remove every rule, or ask the dispatcher to do so."""
        if self._dispatching:
            self.dispatcher.clear_policy()
            return
        self.model.clear_policy()

    def build_incremental_role_links(self, op: PolicyOp, ptype: str, rules: Rules) -> None:
        """Apply added or removed grouping rules to the role manager of ``ptype``."""
        self.model.build_incremental_role_links(self.rm_map, op, "g", ptype, rules)

    def build_incremental_conditional_role_links(
        self, op: PolicyOp, ptype: str, rules: Rules
    ) -> None:
        """Apply added or removed grouping rules to the conditional role manager."""
        self.model.build_incremental_conditional_role_links(
            self.cond_rm_map, op, "g", ptype, rules
        )

    def get_field_index(self, ptype: str, field: str) -> int:
        """Return the position of a named field in policy type ``ptype``."""
        return self.model.get_field_index(ptype, field)

    def set_field_index(self, ptype: str, field: str, index: int) -> None:
        """Declare the position of a named field in policy type ``ptype``."""
        self.model["p"][ptype].field_index_map[field] = index

    # Changes without notifying the watcher.

    def _add_policy_without_notify(self, sec: str, ptype: str, rule: Rule) -> bool:
        rule = list(rule)
        if self._dispatching:
            self.dispatcher.add_policies(sec, ptype, [rule])
            return True
        if self.model.has_policy(sec, ptype, rule):
            return False
        if self._should_persist:
            _call_adapter(self.adapter, "add_policy", sec, ptype, rule)
        self.model.add_policy(sec, ptype, rule)
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.ADD, ptype, [rule])
        return True

    def _add_policies_without_notify(
        self, sec: str, ptype: str, rules: Rules, auto_remove_repeat: bool
    ) -> bool:
        rules = [list(rule) for rule in rules]
        if self._dispatching:
            self.dispatcher.add_policies(sec, ptype, rules)
            return True
        if not auto_remove_repeat and self.model.has_policies(sec, ptype, rules):
            return False
        if self._should_persist:
            _call_adapter(self.adapter, "add_policies", sec, ptype, rules)
        self.model.add_policies(sec, ptype, rules)
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.ADD, ptype, rules)
            self.build_incremental_conditional_role_links(PolicyOp.ADD, ptype, rules)
        return True

    def _remove_policy_without_notify(self, sec: str, ptype: str, rule: Rule) -> bool:
        rule = list(rule)
        if self._dispatching:
            self.dispatcher.remove_policies(sec, ptype, [rule])
            return True
        if self._should_persist:
            _call_adapter(self.adapter, "remove_policy", sec, ptype, rule)
        if not self.model.remove_policy(sec, ptype, rule):
            return False
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, [rule])
        return True

    def _update_policy_without_notify(
        self, sec: str, ptype: str, old_rule: Rule, new_rule: Rule
    ) -> bool:
        old_rule, new_rule = list(old_rule), list(new_rule)
        if self._dispatching:
            self.dispatcher.update_policy(sec, ptype, old_rule, new_rule)
            return True
        if self._should_persist:
            _call_adapter(self.adapter, "update_policy", sec, ptype, old_rule, new_rule)
        if not self.model.update_policy(sec, ptype, old_rule, new_rule):
            return False
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, [old_rule])
            self.build_incremental_role_links(PolicyOp.ADD, ptype, [new_rule])
        return True

    def _update_policies_without_notify(
        self, sec: str, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        if len(new_rules) != len(old_rules):
            raise ValueError(
                "the length of oldRules should be equal to the length of newRules, "
                f"but got the length of oldRules is {len(old_rules)}, "
                f"the length of newRules is {len(new_rules)}"
            )
        old_rules = [list(rule) for rule in old_rules]
        new_rules = [list(rule) for rule in new_rules]
        if self._dispatching:
            self.dispatcher.update_policies(sec, ptype, old_rules, new_rules)
            return True
        if self._should_persist:
            _call_adapter(self.adapter, "update_policies", sec, ptype, old_rules, new_rules)
        if not self.model.update_policies(sec, ptype, old_rules, new_rules):
            return False
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, old_rules)
            self.build_incremental_role_links(PolicyOp.ADD, ptype, new_rules)
        return True

    def _remove_policies_without_notify(self, sec: str, ptype: str, rules: Rules) -> bool:
        rules = [list(rule) for rule in rules]
        if not self.model.has_policies(sec, ptype, rules):
            return False
        if self._dispatching:
            self.dispatcher.remove_policies(sec, ptype, rules)
            return True
        if self._should_persist:
            _call_adapter(self.adapter, "remove_policies", sec, ptype, rules)
        if not self.model.remove_policies(sec, ptype, rules):
            return False
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, rules)
        return True

    def _remove_filtered_policy_without_notify(
        self, sec: str, ptype: str, field_index: int, field_values: Sequence[str]
    ) -> bool:
        if not field_values:
            raise InvalidFieldValuesError()
        if self._dispatching:
            self.dispatcher.remove_filtered_policy(sec, ptype, field_index, *field_values)
            return True
        if self._should_persist:
            _call_adapter(
                self.adapter, "remove_filtered_policy", sec, ptype, field_index, *field_values
            )
        removed = self.model.remove_filtered_policy(sec, ptype, field_index, *field_values)
        if not removed:
            return False
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, removed)
        return True

    def _update_filtered_policies_without_notify(
        self, sec: str, ptype: str, new_rules: Rules, field_index: int, *field_values: str
    ) -> list[list[str]]:
        ast = self.model.get_assertion(sec, ptype)
        new_rules = [list(rule) for rule in new_rules]
        old_rules: list[list[str]] = []
        if self._should_persist:
            returned = _call_adapter(
                self.adapter,
                "update_filtered_policies",
                sec,
                ptype,
                new_rules,
                field_index,
                *field_values,
            )
            # Some adapters return old rules still prefixed with their type.
            old_rules = [
                list(rule[1:]) if len(rule) == len(ast.tokens) + 1 else list(rule)
                for rule in returned or ()
            ]

        if self._dispatching:
            self.dispatcher.update_filtered_policies(sec, ptype, old_rules, new_rules)
            return old_rules

        changed = self.model.remove_policies(sec, ptype, old_rules)
        self.model.add_policies(sec, ptype, new_rules)
        if not (changed and new_rules):
            return []
        if sec == "g":
            self.build_incremental_role_links(PolicyOp.REMOVE, ptype, old_rules)
            self.build_incremental_role_links(PolicyOp.ADD, ptype, new_rules)
        return old_rules

    # Changes followed by a watcher notification.

    def _add_policy(self, sec: str, ptype: str, rule: Rule) -> bool:
        if not self._add_policy_without_notify(sec, ptype, rule):
            return False
        self._notify("update_for_add_policy", sec, ptype, *rule)
        return True

    def _add_policies(
        self, sec: str, ptype: str, rules: Rules, auto_remove_repeat: bool
    ) -> bool:
        rules = [list(rule) for rule in rules]
        if not self._add_policies_without_notify(sec, ptype, rules, auto_remove_repeat):
            return False
        self._notify("update_for_add_policies", sec, ptype, *rules)
        return True

    def _remove_policy(self, sec: str, ptype: str, rule: Rule) -> bool:
        if not self._remove_policy_without_notify(sec, ptype, rule):
            return False
        self._notify("update_for_remove_policy", sec, ptype, *rule)
        return True

    def _update_policy(self, sec: str, ptype: str, old_rule: Rule, new_rule: Rule) -> bool:
        if not self._update_policy_without_notify(sec, ptype, old_rule, new_rule):
            return False
        self._notify("update_for_update_policy", sec, ptype, list(old_rule), list(new_rule))
        return True

    def _update_policies(
        self, sec: str, ptype: str, old_rules: Rules, new_rules: Rules
    ) -> bool:
        if not self._update_policies_without_notify(sec, ptype, old_rules, new_rules):
            return False
        self._notify(
            "update_for_update_policies",
            sec,
            ptype,
            [list(rule) for rule in old_rules],
            [list(rule) for rule in new_rules],
        )
        return True

    def _remove_policies(self, sec: str, ptype: str, rules: Rules) -> bool:
        rules = [list(rule) for rule in rules]
        if not self._remove_policies_without_notify(sec, ptype, rules):
            return False
        self._notify("update_for_remove_policies", sec, ptype, *rules)
        return True

    def _remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, field_values: Sequence[str]
    ) -> bool:
        if not self._remove_filtered_policy_without_notify(
            sec, ptype, field_index, field_values
        ):
            return False
        self._notify(
            "update_for_remove_filtered_policy", sec, ptype, field_index, *field_values
        )
        return True

    def _update_filtered_policies(
        self, sec: str, ptype: str, new_rules: Rules, field_index: int, *field_values: str
    ) -> bool:
        new_rules = [list(rule) for rule in new_rules]
        old_rules = self._update_filtered_policies_without_notify(
            sec, ptype, new_rules, field_index, *field_values
        )
        if not old_rules:
            return False
        self._notify("update_for_update_policies", sec, ptype, old_rules, new_rules)
        return True