import pytest

from policyguard.log import DefaultLogger, Logger
from policyguard.model import REQUIRED_SECTIONS, SECTION_NAMES, Model

BASIC_CONFIG = {
    "request_definition::r": "sub, obj, act",
    "policy_definition::p": "sub, obj, act",
    "policy_effect::e": "some(where (p.eft == allow))",
    "matchers::m": "r.sub == p.sub && r.obj == p.obj && r.act == p.act",
}


class MockConfig:
    def __init__(self, data=None):
        self.data = data or {}

    def string(self, key):
        return self.data.get(key, "")


class RecordingLogger(Logger):
    def __init__(self, enabled=True):
        self.enabled = enabled
        self.models = []

    def enable_log(self, enable):
        self.enabled = enable

    def is_enabled(self):
        return self.enabled

    def log_model(self, model):
        self.models.append(model)

    def log_enforce(self, matcher, request, result, explains):
        pass

    def log_role(self, roles):
        pass

    def log_policy(self, policy):
        pass

    def log_error(self, err, *args):
        pass


def config_from_text(text):
    data = {}
    section = ""
    for line in text.splitlines():
        line = line.strip()
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1]
        elif " = " in line:
            key, value = line.split(" = ", 1)
            data[f"{section}::{key.strip()}"] = value.strip()
    return data


def basic_model():
    m = Model()
    m.load_model_from_config(MockConfig(BASIC_CONFIG))
    return m


def test_new_model_is_empty_with_default_logger():
    m = Model()
    assert len(m) == 0
    assert isinstance(m.logger, DefaultLogger)


def test_load_model_from_config_basic():
    m = basic_model()
    assert m["r"]["r"].tokens == ["r_sub", "r_obj", "r_act"]
    assert m["p"]["p"].tokens == ["p_sub", "p_obj", "p_act"]
    assert m["e"]["e"].value == "some(where (p_eft == allow))"
    assert m["m"]["m"].value == "r_sub == p_sub && r_obj == p_obj && r_act == p_act"


def test_load_model_from_plain_mapping():
    m = Model()
    m.load_model_from_config(BASIC_CONFIG)
    assert set(m) == {"r", "p", "e", "m"}


def test_empty_config_reports_missing_sections():
    m = Model()
    with pytest.raises(ValueError) as info:
        m.load_model_from_config(MockConfig())
    for sec in REQUIRED_SECTIONS:
        assert SECTION_NAMES[sec] in str(info.value)
    assert str(info.value) == (
        "missing required sections: request_definition,policy_definition,"
        "policy_effect,matchers"
    )


def test_has_section():
    m = basic_model()
    assert all(m.has_section(sec) for sec in REQUIRED_SECTIONS)
    empty = Model()
    with pytest.raises(ValueError):
        empty.load_model_from_config(MockConfig())
    assert not any(empty.has_section(sec) for sec in REQUIRED_SECTIONS)


def test_load_numbered_definitions():
    data = dict(BASIC_CONFIG)
    data["policy_definition::p2"] = "sub, act"
    m = Model()
    m.load_model_from_config(data)
    assert list(m["p"]) == ["p", "p2"]
    assert m["p"]["p2"].tokens == ["p2_sub", "p2_act"]


def test_add_def():
    m = Model()
    assert m.add_def("r", "r", "sub, obj, act") is True
    assert m.add_def("r", "r", "") is False


def test_add_def_role_definition_with_params():
    m = Model()
    m.add_def("g", "g", "_, _, (a, b)")
    assert m["g"]["g"].params_tokens == ["a", " b"]
    assert m["g"]["g"].tokens == ["_", " _"]


def test_add_def_matcher_in_and_comments():
    m = Model()
    m.add_def("m", "m", "r.sub in ['a', 'b']")
    assert m["m"]["m"].value == "r_sub in ('a', 'b')"
    m.add_def("m", "m2", "r.sub == p.sub # note")
    assert m["m"]["m2"].value == "r_sub == p_sub"


@pytest.mark.parametrize(
    "m_data, m_expected",
    [
        (
            "r.sub == p.sub && r.obj == p.obj && r_func(r.act, p.act) && testr_func(r.act, p.act)",
            "r_sub == p_sub && r_obj == p_obj && r_func(r_act, p_act) && testr_func(r_act, p_act)",
        ),
        (
            "r.sub == p.sub && r.obj == p.obj && p_func(r.act, p.act) && testp_func(r.act, p.act)",
            "r_sub == p_sub && r_obj == p_obj && p_func(r_act, p_act) && testp_func(r_act, p_act)",
        ),
    ],
)
def test_model_to_text_round_trip(m_data, m_expected):
    data = {
        "r": "sub, obj, act",
        "p": "sub, obj, act",
        "e": "some(where (p.eft == allow))",
        "m": m_data,
    }
    expected = {
        "r": "sub, obj, act",
        "p": "sub, obj, act",
        "e": "some(where (p_eft == allow))",
        "m": m_expected,
    }
    m = Model()
    for ptype, value in data.items():
        m.add_def(ptype, ptype, value)
    new_m = Model()
    new_m.load_model_from_config(config_from_text(m.to_text()))
    for ptype, value in expected.items():
        assert new_m[ptype][ptype].value == value


def test_to_text_exact():
    m = basic_model()
    m.add_def("g", "g", "_, _")
    assert m.to_text() == (
        "[request_definition]\n"
        "r = sub, obj, act\n"
        "[policy_definition]\n"
        "p = sub, obj, act\n"
        "[role_definition]\n"
        "g = _, _\n"
        "[policy_effect]\n"
        "e = some(where (p.eft == allow))\n"
        "[matchers]\n"
        "m = r.sub == p.sub && r.obj == p.obj && r.act == p.act\n"
    )


def test_get_assertion_and_errors():
    m = basic_model()
    assert m.get_assertion("p", "p").key == "p"
    with pytest.raises(LookupError, match="missing required section g"):
        m.get_assertion("g", "g")
    with pytest.raises(LookupError, match="missing required definition p2 in section p"):
        m.get_assertion("p", "p2")


def test_get_field_index_and_cache():
    m = basic_model()
    assert m.get_field_index("p", "obj") == 1
    assert m["p"]["p"].field_index_map["obj"] == 1
    with pytest.raises(LookupError, match="dom index is not set"):
        m.get_field_index("p", "dom")


def test_sort_policies_by_priority():
    m = Model()
    m.add_def("p", "p", "priority, sub, obj, act")
    ast = m["p"]["p"]
    ast.policy = [
        ["10", "a", "d", "read"],
        ["1", "b", "d", "read"],
        ["5", "c", "d", "read"],
        ["1", "e", "d", "read"],
    ]
    m.sort_policies_by_priority()
    assert [rule[1] for rule in ast.policy] == ["b", "e", "c", "a"]
    assert ast.policy_map["10,a,d,read"] == 3
    assert ast.policy_map["1,b,d,read"] == 0


def test_sort_policies_by_priority_skips_without_field():
    m = basic_model()
    m["p"]["p"].policy = [["b", "d", "read"], ["a", "d", "read"]]
    m.sort_policies_by_priority()
    assert m["p"]["p"].policy == [["b", "d", "read"], ["a", "d", "read"]]


def test_sort_policies_by_subject_hierarchy():
    m = Model()
    m.add_def("p", "p", "sub, obj, act")
    m.add_def("g", "g", "_, _")
    m.add_def("e", "e", "subjectPriority(p.eft) || deny")
    m["g"]["g"].policy = [["alice", "admin"], ["admin", "root"]]
    m["p"]["p"].policy = [
        ["root", "d", "read"],
        ["alice", "d", "read"],
        ["admin", "d", "read"],
    ]
    m.sort_policies_by_subject_hierarchy()
    assert [rule[0] for rule in m["p"]["p"].policy] == ["alice", "admin", "root"]
    assert m["p"]["p"].policy_map["root,d,read"] == 2


def test_sort_by_subject_hierarchy_ignored_for_other_effects():
    m = basic_model()
    m["p"]["p"].policy = [["b", "d", "read"], ["a", "d", "read"]]
    m.sort_policies_by_subject_hierarchy()
    assert m["p"]["p"].policy == [["b", "d", "read"], ["a", "d", "read"]]


def test_sort_by_subject_hierarchy_rejects_short_grouping_rule():
    m = Model()
    m.add_def("p", "p", "sub, obj, act")
    m.add_def("g", "g", "_, _")
    m.add_def("e", "e", "subjectPriority(p.eft) || deny")
    m["g"]["g"].policy = [["alice"]]
    with pytest.raises(ValueError, match="policy g expect 2 more params"):
        m.sort_policies_by_subject_hierarchy()


def test_copy_is_independent():
    m = basic_model()
    m["p"]["p"].policy = [["alice", "data1", "read"]]
    copied = m.copy()
    copied["p"]["p"].policy.append(["bob", "data2", "write"])
    copied["p"]["p"].policy[0][0] = "eve"
    assert m["p"]["p"].policy == [["alice", "data1", "read"]]
    assert copied["m"]["m"].value == m["m"]["m"].value
    assert copied.logger is m.logger


def test_print_model_uses_logger():
    logger = RecordingLogger(enabled=True)
    m = Model(logger=logger)
    m.add_def("r", "r", "sub, obj, act")
    m.print_model()
    assert logger.models == [[["r", "r", "sub, obj, act"]]]
    logger.enable_log(False)
    m.print_model()
    assert len(logger.models) == 1


def test_logger_setter_propagates():
    m = basic_model()
    logger = RecordingLogger()
    m.logger = logger
    assert all(ast.logger is logger for sec in m.values() for ast in sec.values())