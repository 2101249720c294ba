# backend/app/services/report/outcomes.py
"""埋め込み・書込み1件ごとの結果と、その集計。"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EmbedStatus(str, Enum):
    EMBEDDED = "embedded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class EmbedOutcome:
    kind: str  # field|title|photo|memo|symbol
    key: str
    status: EmbedStatus
    sheet: Optional[str] = None
    cell: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def embedded(cls, kind, key, sheet=None, cell=None):
        return cls(kind, key, EmbedStatus.EMBEDDED, sheet, cell)

    @classmethod
    def skipped(cls, kind, key, reason, sheet=None, cell=None):
        return cls(kind, key, EmbedStatus.SKIPPED, sheet, cell, reason)

    @classmethod
    def failed(cls, kind, key, reason, sheet=None, cell=None):
        return cls(kind, key, EmbedStatus.FAILED, sheet, cell, reason)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "key": self.key,
            "sheet": self.sheet,
            "cell": self.cell,
            "status": self.status.value,
            "reason": self.reason,
        }


@dataclass
class GenerationReport:
    outcomes: list[EmbedOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def extend(self, outcomes):
        self.outcomes.extend(outcomes)

    def count(self, status: EmbedStatus, kind: Optional[str] = None) -> int:
        return sum(
            1 for o in self.outcomes
            if o.status is status and (kind is None or o.kind == kind)
        )

    def to_dict(self) -> dict:
        return {
            "embedded": self.count(EmbedStatus.EMBEDDED),
            "skipped": self.count(EmbedStatus.SKIPPED),
            "failed": self.count(EmbedStatus.FAILED),
            "warnings": list(self.warnings),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
