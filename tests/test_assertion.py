import pytest

from policyguard.assertion import Assertion, PolicyOp


class RecordingRoleManager:
    def __init__(self):
        self.calls = []

    def add_link(self, name1, name2, *domains):
        self.calls.append(("add", name1, name2, *domains))

    def delete_link(self, name1, name2, *domains):
        self.calls.append(("delete", name1, name2, *domains))

    def set_link_condition_func_params(self, user, role, *params):
        self.calls.append(("params", user, role, *params))

    def set_domain_link_condition_func_params(self, user, role, domain, *params):
        self.calls.append(("domain_params", user, role, domain, *params))


def test_build_role_links_adds_every_rule():
    ast = Assertion(key="g", value="_, _", tokens=["_", " _"],
                    policy=[["alice", "admin"], ["bob", "member"]])
    rm = RecordingRoleManager()
    ast.build_role_links(rm)
    assert ast.rm is rm
    assert rm.calls == [("add", "alice", "admin"), ("add", "bob", "member")]


def test_build_role_links_truncates_long_rules_and_passes_domain():
    ast = Assertion(key="g", value="_, _, _", tokens=["_", " _", " _"],
                    policy=[["alice", "admin", "domain1", "extra"]])
    rm = RecordingRoleManager()
    ast.build_role_links(rm)
    assert rm.calls == [("add", "alice", "admin", "domain1")]


def test_incremental_add_and_remove():
    ast = Assertion(key="g", value="_, _", tokens=["_", " _"])
    rm = RecordingRoleManager()
    ast.build_incremental_role_links(rm, PolicyOp.ADD, [["alice", "admin"]])
    ast.build_incremental_role_links(rm, PolicyOp.REMOVE, [["alice", "admin"]])
    assert rm.calls == [("add", "alice", "admin"), ("delete", "alice", "admin")]


def test_too_few_underscores_is_rejected():
    ast = Assertion(key="g", value="_", policy=[["alice", "admin"]])
    with pytest.raises(ValueError, match="at least 2"):
        ast.build_role_links(RecordingRoleManager())


def test_short_rule_is_rejected():
    ast = Assertion(key="g", value="_, _, _", tokens=["_", " _", " _"])
    rm = RecordingRoleManager()
    with pytest.raises(ValueError, match="do not meet role definition"):
        ast.build_incremental_role_links(rm, PolicyOp.ADD, [["alice", "admin"]])
    assert rm.calls == []


def test_conditional_links_without_domain_set_params():
    ast = Assertion(key="g", value="_, _, (_, _)", tokens=["_", " _"],
                    params_tokens=["_", " _"],
                    policy=[["alice", "admin", "start", "end"]])
    rm = RecordingRoleManager()
    ast.build_conditional_role_links(rm)
    assert ast.cond_rm is rm
    assert rm.calls == [
        ("add", "alice", "admin"),
        ("params", "alice", "admin", "start", "end"),
    ]


def test_conditional_links_with_domain_set_domain_params():
    ast = Assertion(key="g", value="_, _, _, (_, _)", tokens=["_", " _", " _"])
    rm = RecordingRoleManager()
    ast.build_incremental_conditional_role_links(
        rm, PolicyOp.ADD, [["alice", "admin", "domain1", "start", "end"]]
    )
    assert rm.calls == [
        ("add", "alice", "admin", "domain1"),
        ("domain_params", "alice", "admin", "domain1", "start", "end"),
    ]


def test_conditional_remove_deletes_link():
    ast = Assertion(key="g", value="_, _, (_, _)", tokens=["_", " _"])
    rm = RecordingRoleManager()
    ast.build_incremental_conditional_role_links(
        rm, PolicyOp.REMOVE, [["alice", "admin", "start", "end"]]
    )
    assert rm.calls == [("delete", "alice", "admin", "start", "end")]


def test_copy_is_independent_but_shares_field_index_map():
    original = Assertion(
        key="p",
        value="sub, obj, act",
        tokens=["p_sub", "p_obj", "p_act"],
        policy=[["alice", "data1", "read"]],
        policy_map={"alice,data1,read": 0},
        rm=RecordingRoleManager(),
    )
    clone = original.copy()
    assert clone.policy == original.policy
    assert clone.tokens == original.tokens
    assert clone.policy_map == original.policy_map
    assert clone.rm is None

    clone.policy[0][2] = "write"
    clone.tokens.append("p_extra")
    clone.policy_map["x"] = 1
    assert original.policy == [["alice", "data1", "read"]]
    assert original.tokens == ["p_sub", "p_obj", "p_act"]
    assert "x" not in original.policy_map

    clone.field_index_map["priority"] = 0
    assert original.field_index_map == {"priority": 0}


def test_policy_op_numeric_values_drive_links():
    ast = Assertion(key="g", value="_, _", tokens=["_", " _"])
    rm = RecordingRoleManager()
    ast.build_incremental_role_links(rm, PolicyOp(0), [["alice", "admin"]])
    ast.build_incremental_role_links(rm, PolicyOp(1), [["bob", "member"]])
    assert rm.calls == [("add", "alice", "admin"), ("delete", "bob", "member")]