import logging
from unittest.mock import MagicMock

import pytest

from policyguard import log
from policyguard.log import DefaultLogger, Logger


@pytest.fixture
def restore_logger():
    previous = log.get_logger()
    yield
    log.set_logger(previous)


def test_module_functions_delegate_to_current_logger(restore_logger):
    mock = MagicMock(spec=Logger)
    log.set_logger(mock)
    assert log.get_logger() is mock

    log.get_logger().enable_log(True)
    log.get_logger().is_enabled()
    mock.enable_log.assert_called_once_with(True)
    mock.is_enabled.assert_called_once_with()

    policy = {}
    log.log_policy(policy)
    mock.log_policy.assert_called_once_with(policy)

    model = None
    log.log_model(model)
    mock.log_model.assert_called_once_with(model)

    matcher = "my_matcher"
    request = ["bob"]
    explains = None
    log.log_enforce(matcher, request, True, explains)
    mock.log_enforce.assert_called_once_with(matcher, request, True, explains)

    roles = None
    log.log_role(roles)
    mock.log_role.assert_called_once_with(roles)

    err = RuntimeError("boom")
    log.log_error(err, "a", "b")
    mock.log_error.assert_called_once_with(err, "a", "b")


def test_default_logger_is_disabled_by_default():
    logger = DefaultLogger()
    assert logger.is_enabled() is False
    logger.enable_log(True)
    assert logger.is_enabled() is True
    logger.enable_log(False)
    assert logger.is_enabled() is False


def test_disabled_logger_writes_nothing(caplog):
    logger = DefaultLogger()
    with caplog.at_level(logging.INFO, logger="policyguard"):
        logger.log_role(["admin"])
        logger.log_model([["r", "r", "sub, obj, act"]])
        logger.log_policy({"p": [["alice", "data1", "read"]]})
        logger.log_enforce("m", ["alice"], True, [])
        logger.log_error(RuntimeError("x"))
    assert caplog.records == []


def test_enabled_logger_writes_roles(caplog):
    logger = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="policyguard"):
        logger.log_role(["admin", "member"])
    assert [r.getMessage() for r in caplog.records] == ["Roles: admin\nmember"]


def test_enabled_logger_writes_enforce(caplog):
    logger = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="policyguard"):
        logger.log_enforce("m", ["alice", "data1", "read"], True, [["alice", "data1", "read"]])
    message = caplog.records[0].getMessage()
    assert message.startswith("Request: alice, data1, read ---> true\n")
    assert "Hit Policy: [alice data1 read]" in message


def test_enabled_logger_writes_policy_and_model(caplog):
    logger = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="policyguard"):
        logger.log_policy({"p": [["alice", "data1", "read"]]})
        logger.log_model([["r", "r", "sub"]])
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0].startswith("Policy: p : [[alice data1 read]]")
    assert messages[1].startswith("Model: [r r sub]")


def test_enabled_logger_writes_error(caplog):
    logger = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="policyguard"):
        logger.log_error(RuntimeError("boom"), "while loading")
    assert caplog.records[0].getMessage() == "[while loading] boom"