from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from suiscope.core.enums import EntityKind
from suiscope.core.models import ClassificationResult


@dataclass(frozen=True)
class _Rule:
    name: str
    pattern: Pattern[str]
    kind: EntityKind
    confidence: float


# Order matters: first match wins. Looser hex-length rules sit below the
# digest rules so a 64-hex digest is never read as an address or object.
RULES: Tuple[_Rule, ...] = (
    _Rule("base58_digest", re.compile(r"[1-9A-HJ-NP-Za-km-z]{40,50}"), EntityKind.TRANSACTION, 0.95),
    _Rule("base64_digest", re.compile(r"[A-Za-z0-9+/]{43}="), EntityKind.TRANSACTION, 0.90),
    _Rule("hex_digest_prefixed", re.compile(r"0x[0-9a-fA-F]{64}"), EntityKind.TRANSACTION, 0.85),
    _Rule("hex_digest", re.compile(r"[0-9a-fA-F]{64}"), EntityKind.TRANSACTION, 0.80),
    _Rule("address", re.compile(r"0x[0-9a-fA-F]{40}"), EntityKind.ADDRESS, 0.85),
    _Rule("object_id", re.compile(r"0x[0-9a-fA-F]{32,64}"), EntityKind.OBJECT, 0.70),
    _Rule("object_id_short", re.compile(r"0x[0-9a-fA-F]{1,31}"), EntityKind.OBJECT, 0.60),
    # still being typed, or a 0x string with junk in it
    _Rule("hex_partial", re.compile(r"0x.*", re.DOTALL), EntityKind.UNKNOWN, 0.30),
)


class EntityClassifier:
    """
    Maps a pasted string to the entity kind it most likely names.

    Format heuristics only: nothing is checked against the chain and no
    checksum is verified. Every input gets a result; UNKNOWN with
    confidence 0 means "nothing matched", 0.3 means "looks like an
    unfinished 0x id".
    """

    def __init__(self, rules: Tuple[_Rule, ...] = RULES) -> None:
        self._rules = rules

    def _match(self, text: str) -> Optional[_Rule]:
        trimmed = (text or "").strip()
        if not trimmed:
            return None
        for rule in self._rules:
            if rule.pattern.fullmatch(trimmed):
                return rule
        return None

    def classify(self, text: str) -> ClassificationResult:
        rule = self._match(text)
        if rule is None:
            return ClassificationResult(kind=EntityKind.UNKNOWN, confidence=0.0)
        return ClassificationResult(kind=rule.kind, confidence=rule.confidence)

    def rule_name(self, text: str) -> str:
        rule = self._match(text)
        return rule.name if rule is not None else "none"
