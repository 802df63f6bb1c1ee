"""Permission and risk inference for detected tools.

Public names are re-exported here::

    from agenttrace.inference import infer_permission, infer_risk
"""

from agenttrace.inference.permissions import (
    get_keywords_for_permission,
    infer_permission,
    infer_permission_and_risk,
    infer_risk,
    is_high_risk,
    tokenize,
)

__all__ = [
    "get_keywords_for_permission",
    "infer_permission",
    "infer_permission_and_risk",
    "infer_risk",
    "is_high_risk",
    "tokenize",
]
