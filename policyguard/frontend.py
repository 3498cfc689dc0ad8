"""Export of a model and its rules for use by a browser-side enforcer."""

from __future__ import annotations

import json
from typing import Any

from .model import Model


def _rules_with_types(model: Model, sec: str) -> list[list[str]]:
    return [
        [ptype, *rule]
        for ptype in model.get(sec, {})
        for rule in model.get_assertion(sec, ptype).policy
    ]


def get_permission_for_user(enforcer: Any, user: str) -> str:
    """Return the model text and all rules as a JSON document.

    ``enforcer`` is a model or any object with a ``model`` attribute. The
    document has the keys ``m`` (model text), ``p`` and ``g`` (rules, each
    prefixed with its type) and ends with a newline.
    """
    model = enforcer if isinstance(enforcer, Model) else enforcer.model
    document = {
        "m": model.to_text(),
        "p": _rules_with_types(model, "p"),
        "g": _rules_with_types(model, "g"),
    }
    return (
        json.dumps(document, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
        + "\n"
    )