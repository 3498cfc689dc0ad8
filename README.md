# policyguard

The core of an access control policy engine: a model built from request,
policy, role, effect and matcher definitions, a policy store on top of it,
and a management API for reading and changing authorization rules and role
inheritance rules. A locked variant of the management API can be shared
between threads.

It needs nothing beyond the standard library.

## Install

```
pip install policyguard
```

For development, with the test tools:

```
pip install -e ".[test]"
pytest
```

## Modules

- `policyguard.model.Model` is a dict of sections (`"r"`, `"p"`, `"g"`,
  `"e"`, `"m"`), each a dict of `Assertion`s. Add definitions with
  `add_def(sec, key, value)` or load them with `load_model_from_config(cfg)`,
  where `cfg` is a mapping from `"section_name::key"` to text (for example
  `"request_definition::r"`) or an object with a `string(key)` method.
  `to_text()` writes the model back out as `[request_definition]`,
  `[policy_definition]`, ... text. `get_field_index(ptype, field)` finds the
  position of a named field such as `"sub"`. `copy()`,
  `sort_policies_by_priority()` and `sort_policies_by_subject_hierarchy()`
  are also there.
- `policyguard.policy.PolicyModel` is a `Model` that also manages rules:
  `add_policy`, `add_policies`, `remove_policy`, `remove_policies`,
  `update_policy`, `update_policies` (all or nothing),
  `get_policy`, `get_filtered_policy`, `remove_filtered_policy`,
  `has_policy`, `has_policy_ex`, `get_values_for_field_in_policy` and the
  role-link builders. Rules are lists of strings. When a policy type has a
  known `priority` field position, `add_policy` inserts rules in priority
  order.
- `policyguard.assertion.Assertion` is one definition, such as
  `r = sub, obj, act`. It can load its grouping rules into a role manager.
  `PolicyOp.ADD` / `PolicyOp.REMOVE` name incremental changes.
- `policyguard.internal.PolicyManager` wraps a `PolicyModel` with an
  optional adapter, watcher, dispatcher and role managers, given as keyword
  arguments (`adapter=`, `watcher=`, `dispatcher=`, `rm_map=`,
  `cond_rm_map=`, `auto_save=`, `auto_notify_watcher=`,
  `auto_notify_dispatcher=`). Changes are passed to the adapter's matching
  method (`add_policy`, `remove_policies`, ...) when `auto_save` is on; a
  method that is missing or raises `NotImplementedError` is skipped. The
  watcher's `update_for_...` method is called after a change, or `update()`
  if it has none. With a dispatcher, changes go to the dispatcher instead
  of the local model. Role managers are any objects with `add_link` and
  `delete_link`.
- `policyguard.management.ManagementEnforcer` is the management API on top
  of `PolicyManager`: `get_policy`, `get_all_subjects`, `get_all_roles`,
  `add_policy`, `add_policies_ex`, `add_grouping_policy`,
  `remove_filtered_policy`, `update_filtered_policies`, `self_add_policy`
  and the rest. Methods that take a rule as `*args` accept the fields one by
  one or one list of fields.
- `policyguard.synced.SyncedEnforcer` has the same API, with every call
  serialised by one reentrant lock, exposed as `lock` so that callers can
  group several calls.
- `policyguard.frontend.get_permission_for_user(enforcer, user)` returns the
  model text and every policy and grouping rule (each prefixed with its
  type) as one compact JSON document with the keys `m`, `p` and `g`, ending
  in a newline. `enforcer` is a model or anything with a `model` attribute;
  the result does not depend on `user`.
- `policyguard.log` holds the `Logger` interface, `DefaultLogger` (off until
  `enable_log(True)`; writes at INFO level to the standard `policyguard`
  logger) and the module-level `set_logger`, `get_logger`, `log_model`,
  `log_enforce`, `log_role`, `log_policy` and `log_error`.
- `policyguard.errors` defines the package's exceptions, all derived from
  `PolicyGuardError`.

## Example

```python
from policyguard.management import ManagementEnforcer
from policyguard.policy import PolicyModel

m = PolicyModel()
m.add_def("r", "r", "sub, obj, act")
m.add_def("p", "p", "sub, obj, act")
m.add_def("g", "g", "_, _")
m.add_def("e", "e", "some(where (p.eft == allow))")
m.add_def("m", "m", "r.sub == p.sub && r.obj == p.obj && r.act == p.act")

e = ManagementEnforcer(m)
e.add_policy("alice", "data1", "read")        # True
e.add_policy(["alice", "data1", "read"])      # False, already there
e.add_policy("bob", "data2", "write")         # True
e.add_grouping_policy("bob", "admin")         # True

e.get_all_subjects()                          # ["alice", "bob"]
e.get_all_roles()                             # ["admin"]
e.get_filtered_policy(1, "data2")             # [["bob", "data2", "write"]]
print(m.to_text())
```

An empty string in a field filter matches any value in that field:

```python
e.get_filtered_policy(0, "", "data1")         # [["alice", "data1", "read"]]
```

## Errors

Operations raise instead of returning error values. Loading a model without
all of the request, policy, effect and matcher sections raises `ValueError`
naming every missing section. Looking up a section or definition that does
not exist raises `LookupError`. Removing by a filter without any field
values through the management API raises `InvalidFieldValuesError`.
`update_policies` with lists of different lengths raises `ValueError`.

## What it does not do

- It does not evaluate matchers: there is no `enforce` call that decides a
  request. The package stores and manages the model and its rules.
- It does not read model or policy files; definitions come from
  `add_def`, a mapping or a `string(key)` object, and rules from the API.
- It ships no role manager, storage adapter, watcher or dispatcher; you pass
  your own objects to `PolicyManager` and its subclasses.
- It does not reload policy periodically in the background.