"""Keyword-based permission and risk inference.

A tool's permission is inferred from the words in its name (and, when
available, its description). Identifiers are split into lowercase tokens at
camelCase boundaries and at ``_`` / ``-``; each token is compared against
five keyword tables.

Priority
--------
Tables are evaluated from most to least dangerous::

    DELETE  >  EXECUTE  >  WRITE  >  OUTPUT  >  READ

The first table with any matching token wins, so ``update_and_delete`` is
DELETE even though ``update`` is a WRITE stem. A token matches a stem when
it equals the stem, starts with it, or ends with it. Matching is
loose: ``listFiles`` matches ``list``, but ``document`` also matches the
EXECUTE stem ``do``. The tables are a heuristic, not a vocabulary.

Risk is never inferred directly; it is looked up from the permission in
``agenttrace.models.PERMISSION_RISK``.
"""

from __future__ import annotations

import re

from agenttrace.models import PERMISSION_RISK, Permission, RiskLevel

READ_KEYWORDS: tuple[str, ...] = (
    "get", "read", "fetch", "list", "search", "query", "find", "lookup",
    "retrieve", "show", "display", "view", "describe", "check", "inspect",
    "count", "exists", "has", "is", "can", "load", "parse", "extract",
    "select", "filter", "sort", "browse", "scan", "analyze", "validate",
)

WRITE_KEYWORDS: tuple[str, ...] = (
    "create", "add", "insert", "write", "update", "set", "put", "post",
    "save", "store", "upload", "push", "modify", "edit", "change", "patch",
    "append", "register", "submit", "send", "publish", "configure", "enable",
    "disable", "toggle", "assign", "allocate", "grant", "revoke",
)

DELETE_KEYWORDS: tuple[str, ...] = (
    "delete", "remove", "drop", "destroy", "truncate", "clear", "purge",
    "wipe", "erase", "uninstall", "terminate", "kill", "stop", "abort",
    "cancel", "revoke", "reset", "clean", "flush", "invalidate",
)

EXECUTE_KEYWORDS: tuple[str, ...] = (
    "execute", "run", "eval", "shell", "exec", "spawn", "invoke", "call",
    "trigger", "start", "launch", "deploy", "install", "migrate", "apply",
    "process", "perform", "do", "action", "command", "script", "code",
)

OUTPUT_KEYWORDS: tuple[str, ...] = (
    "display", "show", "render", "output", "print", "format", "present",
    "visualize", "chart", "graph", "report", "export", "download",
)

# Evaluation order: first match wins.
_PRIORITY: tuple[tuple[Permission, tuple[str, ...]], ...] = (
    (Permission.DELETE, DELETE_KEYWORDS),
    (Permission.EXECUTE, EXECUTE_KEYWORDS),
    (Permission.WRITE, WRITE_KEYWORDS),
    (Permission.OUTPUT, OUTPUT_KEYWORDS),
    (Permission.READ, READ_KEYWORDS),
)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_SEPARATORS = re.compile(r"[_-]")


def tokenize(text: str) -> list[str]:
    """Split an identifier or phrase into lowercase words.

    >>> tokenize("getUserData")
    ['get', 'user', 'data']
    >>> tokenize("LIST_FILES")
    ['list', 'files']
    """
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    spaced = _SEPARATORS.sub(" ", spaced)
    return spaced.lower().split()


def _matches_keywords(tokens: list[str], keywords: tuple[str, ...]) -> bool:
    return any(
        token == keyword or token.startswith(keyword) or token.endswith(keyword)
        for token in tokens
        for keyword in keywords
    )


def infer_permission(name: str, description: str | None = None) -> Permission:
    """Infer a tool's permission from its name and optional description.

    Args:
        name: Tool identifier, in any casing convention.
        description: Optional free-text description. Its words are checked
            together with the name's.

    Returns:
        The permission of the highest-priority table with a matching token,
        or ``Permission.UNKNOWN`` when nothing matches.
    """
    tokens = tokenize(name)
    if description:
        tokens.extend(tokenize(description))
    for permission, keywords in _PRIORITY:
        if _matches_keywords(tokens, keywords):
            return permission
    return Permission.UNKNOWN


def infer_risk(permission: Permission) -> RiskLevel:
    """Return the fixed risk tier for *permission*."""
    return PERMISSION_RISK[permission]


def infer_permission_and_risk(
    name: str, description: str | None = None,
) -> tuple[Permission, RiskLevel]:
    """Infer permission and derive its risk in one call."""
    permission = infer_permission(name, description)
    return permission, infer_risk(permission)


def is_high_risk(permission: Permission) -> bool:
    """A permission is high risk exactly when it is DELETE or EXECUTE."""
    return permission in (Permission.DELETE, Permission.EXECUTE)


def get_keywords_for_permission(permission: Permission) -> tuple[str, ...]:
    """Return the keyword table for *permission* (empty for UNKNOWN)."""
    for candidate, keywords in _PRIORITY:
        if candidate is permission:
            return keywords
    return ()
