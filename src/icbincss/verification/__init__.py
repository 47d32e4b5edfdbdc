from __future__ import annotations

from icbincss.verification.rules import ALL_RULES
from icbincss.verification.verifier import RuleFunc, verify

__all__ = [
    "ALL_RULES",
    "RuleFunc",
    "verify",
]
