"""
Role Language Sanitizer - Claimant-appropriate wording for insight trees
========================================================================

Defendant-only tactical phrasing ("strike out your defence", "Part 36 offer",
"they can't prove liability") is rewritten when the case role is claimant.

Usage:
    from litigation_intel.sanitize import sanitize_for_role
    clean = sanitize_for_role(analysis, CaseRole.CLAIMANT)

Rules run in order, most specific first, and no replacement contains a
source phrase, so applying the sanitizer twice changes nothing further.
Non-claimant roles get the input object back untouched.
"""

import re
from enum import Enum
from typing import Any, List, Tuple

from pydantic import BaseModel

from .schemas import CaseRole

# =============================================================================
# Replacement rules (ordered)
# =============================================================================

REPLACEMENTS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\bresist summary judgment/strike[- ]out your defence\b", re.I), "pursue directions and disclosure"),
    (re.compile(r"\bstrike[- ]out your defence\b", re.I), "seek liability admission"),
    (re.compile(r"\bresist summary judgment\b", re.I), "pursue directions and disclosure"),
    (re.compile(r"\byour defence\b", re.I), "your case"),
    (re.compile(r"\bchallenge liability at trial\b", re.I), "litigate to liability judgment"),
    (re.compile(r"\bchallenge liability\b", re.I), "press for early admission"),
    (re.compile(r"\bjustify a low Part 36 offer\b", re.I), "use as settlement leverage"),
    (re.compile(r"\blow Part 36 offer\b", re.I), "quantum negotiations"),
    (re.compile(r"\bPart 36 offer", re.I), "settlement offer"),
    (re.compile(r"\bthey (?:can['’]t|cannot) prove liability\b", re.I), "liability is well-founded"),
    (re.compile(r"\bcan(?:['’]t|not) prove liability\b", re.I), "liability is established"),
]

# Phrases that must never survive claimant sanitisation
DEFENDANT_ONLY_PHRASES = [
    "strike out your defence",
    "part 36 offer",
    "they can't prove liability",
    "they cannot prove liability",
]


def sanitize_text(text: str) -> str:
    """Apply every replacement rule to one string"""
    for pattern, replacement in REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


def _sanitize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, BaseModel):
        updates = {name: _sanitize(getattr(value, name)) for name in type(value).model_fields}
        return value.model_copy(update=updates)
    if isinstance(value, dict):
        return {k: _sanitize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_sanitize(v) for v in value)
    return value


def sanitize_for_role(tree: Any, role: CaseRole) -> Any:
    """
    Rewrite every string leaf of an insight tree for a claimant.

    Handles pydantic models, dicts, lists, tuples and primitives at any depth.
    For any other role the same object is returned.
    """
    if role != CaseRole.CLAIMANT:
        return tree
    return _sanitize(tree)

