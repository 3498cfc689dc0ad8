"""The access-control model: sections of assertions loaded from a configuration."""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Mapping
from typing import Any

from .assertion import Assertion
from .log import DefaultLogger, Logger

SECTION_NAMES: dict[str, str] = {
    "r": "request_definition",
    "p": "policy_definition",
    "g": "role_definition",
    "e": "policy_effect",
    "m": "matchers",
}
"""Short section keys and the configuration section each one is read from."""

REQUIRED_SECTIONS: tuple[str, ...] = ("r", "p", "e", "m")
"""Sections every valid model must define."""

DEFAULT_DOMAIN = ""
DEFAULT_SEPARATOR = "::"

SUBJECT_PRIORITY_EFFECT = "subjectPriority(p_eft) || deny"
PRIORITY_INDEX = "priority"
DOMAIN_INDEX = "dom"

_PARAMS_RE = re.compile(r"\((.*?)\)")
_ESCAPE_RE = re.compile(r"\b((r|p)[0-9]*)\.")
_P_PREFIX = re.compile(r"^p_")
_R_PREFIX = re.compile(r"^r_")


def _escape_assertion(text: str) -> str:
    """Turn ``r.sub`` style attribute access into ``r_sub`` identifiers."""
    return _ESCAPE_RE.sub(lambda match: match.group(1) + "_", text)


def _remove_comments(text: str) -> str:
    """Drop everything from the first ``#`` on."""
    pos = text.find("#")
    if pos == -1:
        return text
    return text[:pos].strip()


def _params_tokens(value: str) -> list[str]:
    """Return the comma separated names inside the first parentheses of ``value``."""
    match = _PARAMS_RE.search(value)
    if match is None:
        return []
    return match.group(1).split(",")


def _config_value(cfg: Any, key: str) -> str:
    """Read ``key`` from a configuration object or a plain mapping."""
    reader = getattr(cfg, "string", None)
    if callable(reader):
        return reader(key) or ""
    if isinstance(cfg, Mapping):
        return cfg.get(key, "") or ""
    raise TypeError("configuration must provide string(key) or be a mapping")


def _key_suffix(index: int) -> str:
    return "" if index == 1 else str(index)


def _name_with_domain(domain: str, name: str) -> str:
    return domain + DEFAULT_SEPARATOR + name


def _subject_hierarchy(policies: list[list[str]]) -> dict[str, int]:
    """Return the depth of every subject in the role tree given by ``policies``."""
    levels: dict[str, int] = {}
    children: dict[str, list[str]] = {}
    for policy in policies:
        if len(policy) < 2:
            raise ValueError("policy g expect 2 more params")
        domain = DEFAULT_DOMAIN if len(policy) == 2 else policy[2]
        child = _name_with_domain(domain, policy[0])
        parent = _name_with_domain(domain, policy[1])
        children.setdefault(parent, []).append(child)
        levels.setdefault(child, 0)
        levels.setdefault(parent, 0)
        levels[child] = 1

    for root in list(levels):
        if levels[root] != 0:
            continue
        level = 0
        queue = deque([root])
        while queue:
            for _ in range(len(queue)):
                node = queue.popleft()
                levels[node] = level
                queue.extend(children.get(node, ()))
            level += 1
    return levels


class Model(dict):
    """A whole model: section key -> definition key -> :class:`Assertion`."""

    def __init__(self, logger: Logger | None = None) -> None:
        super().__init__()
        self._logger: Logger = logger if logger is not None else DefaultLogger()

    @property
    def logger(self) -> Logger:
        """The logger used by the model and all of its assertions."""
        return self._logger

    @logger.setter
    def logger(self, logger: Logger) -> None:
        self._logger = logger
        for assertions in self.values():
            for ast in assertions.values():
                ast.logger = logger

    def add_def(self, sec: str, key: str, value: str) -> bool:
        """Add a definition; return False when ``value`` is empty."""
        if value == "":
            return False

        ast = Assertion(key=key, value=value, logger=self._logger)
        if sec in ("r", "p"):
            ast.tokens = [f"{key}_{token.strip()}" for token in value.split(",")]
        elif sec == "g":
            ast.params_tokens = _params_tokens(value)
            tokens = value.split(",")
            ast.tokens = tokens[: len(tokens) - len(ast.params_tokens)]
        else:
            ast.value = _remove_comments(_escape_assertion(ast.value))

        if sec == "m" and "in" in ast.value:
            ast.value = ast.value.replace("[", "(").replace("]", ")")

        self.setdefault(sec, {})[key] = ast
        return True

    def _load_section(self, cfg: Any, sec: str) -> None:
        index = 1
        while True:
            key = sec + _key_suffix(index)
            value = _config_value(cfg, f"{SECTION_NAMES[sec]}::{key}")
            if not self.add_def(sec, key, value):
                break
            index += 1

    def load_model_from_config(self, cfg: Any) -> None:
        """Load every section from ``cfg``, which maps ``section::key`` to text.

        ``cfg`` is either an object with a ``string(key)`` method or a mapping.
        Raises ValueError naming the required sections that are missing.
        """
        for sec in SECTION_NAMES:
            self._load_section(cfg, sec)
        missing = [SECTION_NAMES[sec] for sec in REQUIRED_SECTIONS if not self.has_section(sec)]
        if missing:
            raise ValueError(f"missing required sections: {','.join(missing)}")

    def has_section(self, sec: str) -> bool:
        """Return whether the section has been defined."""
        return self.get(sec) is not None

    def get_assertion(self, sec: str, ptype: str) -> Assertion:
        """Return the assertion ``ptype`` of section ``sec``."""
        section = self.get(sec)
        if section is None:
            raise LookupError(f"missing required section {sec}")
        ast = section.get(ptype)
        if ast is None:
            raise LookupError(f"missing required definition {ptype} in section {sec}")
        return ast

    def print_model(self) -> None:
        """Send the model's definitions to the logger if it is enabled."""
        if not self._logger.is_enabled():
            return
        info = [
            [sec, key, ast.value]
            for sec, assertions in self.items()
            for key, ast in assertions.items()
        ]
        self._logger.log_model(info)

    def sort_policies_by_subject_hierarchy(self) -> None:
        """Order rules so that subjects deeper in the role tree come first.

        Only applies when the effect is the subject-priority effect.
        """
        if self["e"]["e"].value != SUBJECT_PRIORITY_EFFECT:
            return
        g = self.get_assertion("g", "g")
        sub_index = 0
        for ptype, ast in self["p"].items():
            try:
                domain_index = self.get_field_index(ptype, DOMAIN_INDEX)
            except LookupError:
                domain_index = -1
            levels = _subject_hierarchy(g.policy)

            def depth(rule: list[str]) -> int:
                domain = rule[domain_index] if domain_index != -1 else DEFAULT_DOMAIN
                return levels.get(_name_with_domain(domain, rule[sub_index]), 0)

            ast.policy.sort(key=lambda rule: -depth(rule))
            for index, rule in enumerate(ast.policy):
                ast.policy_map[",".join(rule)] = index

    def sort_policies_by_priority(self) -> None:
        """Order rules by their integer priority field, lowest first.

        Rules whose priority is not an integer are placed ahead of the rest,
        keeping their relative order. Policy types without a priority field
        are left alone.
        """
        for ptype, ast in self["p"].items():
            try:
                priority_index = self.get_field_index(ptype, PRIORITY_INDEX)
            except LookupError:
                continue

            def priority(rule: list[str]) -> tuple[int, int]:
                try:
                    return (1, int(rule[priority_index]))
                except ValueError:
                    return (0, 0)

            ast.policy.sort(key=priority)
            for index, rule in enumerate(ast.policy):
                ast.policy_map[",".join(rule)] = index

    def to_text(self) -> str:
        """Render the model as configuration text with ``r.`` and ``p.`` access."""
        patterns: dict[str, str] = {}
        for sec in ("r", "p"):
            for token in self[sec][sec].tokens:
                patterns[token] = _R_PREFIX.sub("r.", _P_PREFIX.sub("p.", token))
        if "p_eft" in self["e"]["e"].value:
            patterns["p_eft"] = "p.eft"

        lines: list[str] = []

        def write_section(sec: str) -> None:
            for ast in self[sec].values():
                value = ast.value
                for pattern, replacement in patterns.items():
                    value = value.replace(pattern, replacement)
                lines.append(f"{sec} = {value}\n")

        lines.append("[request_definition]\n")
        write_section("r")
        lines.append("[policy_definition]\n")
        write_section("p")
        if "g" in self:
            lines.append("[role_definition]\n")
            lines.extend(f"{ptype} = {ast.value}\n" for ptype, ast in self["g"].items())
        lines.append("[policy_effect]\n")
        write_section("e")
        lines.append("[matchers]\n")
        write_section("m")
        return "".join(lines)

    def copy(self) -> Model:
        """Return a copy whose assertions and rules are independent of this one."""
        new_model = type(self)(logger=self._logger)
        for sec, assertions in self.items():
            new_model[sec] = {ptype: ast.copy() for ptype, ast in assertions.items()}
        new_model.logger = self._logger
        return new_model

    def get_field_index(self, ptype: str, field: str) -> int:
        """Return the position of ``field`` in policy type ``ptype``, caching it."""
        ast = self["p"][ptype]
        if field in ast.field_index_map:
            return ast.field_index_map[field]
        pattern = f"{ptype}_{field}"
        try:
            index = ast.tokens.index(pattern)
        except ValueError:
            raise LookupError(
                f"{field} index is not set, please use enforcer.set_field_index() to set index"
            ) from None
        ast.field_index_map[field] = index
        return index