"""Pure accept/reject decision over recognition scores.

The gate holds no state; any number of sessions may call `decide` at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..common.rounding import as_percent_label, round_half_up
from ..common.validators import require_score
from ..core.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_LIVENESS_THRESHOLD,
    DEFAULT_QUALITY_THRESHOLD,
)

FAILURE_PREFIX = "Recognition failed: "


@dataclass(frozen=True)
class RecognitionThresholds:
    confidence: float = DEFAULT_CONFIDENCE_THRESHOLD
    liveness: float = DEFAULT_LIVENESS_THRESHOLD
    quality: float = DEFAULT_QUALITY_THRESHOLD

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "RecognitionThresholds":
        data = data or {}
        return cls(
            confidence=require_score(data.get("confidence", DEFAULT_CONFIDENCE_THRESHOLD), "confidence threshold"),
            liveness=require_score(data.get("liveness", DEFAULT_LIVENESS_THRESHOLD), "liveness threshold"),
            quality=require_score(data.get("quality", DEFAULT_QUALITY_THRESHOLD), "quality threshold"),
        )

    def to_dict(self) -> dict:
        return {"confidence": self.confidence, "liveness": self.liveness, "quality": self.quality}


DEFAULT_THRESHOLDS = RecognitionThresholds()


@dataclass(frozen=True)
class ThresholdCheck:
    name: str
    measured: Optional[float]
    required: float
    passed: bool

    def describe(self) -> str:
        measured = as_percent_label(self.measured or 0.0)
        required = as_percent_label(self.required)
        if measured == required:
            # Whole percents would read "93% < 93%"; show the decimal that decided it.
            return f"{self.name} {round_half_up((self.measured or 0.0) * 100, 1)}% < {required}%"
        return f"{self.name} {measured}% < {required}%"


@dataclass(frozen=True)
class GateDecision:
    accept: bool
    reason: str
    checks: Tuple[ThresholdCheck, ...]

    def check(self, name: str) -> Optional[ThresholdCheck]:
        for c in self.checks:
            if c.name == name:
                return c
        return None


def decide(
    confidence: float,
    liveness: float,
    quality: Optional[float] = None,
    thresholds: RecognitionThresholds = DEFAULT_THRESHOLDS,
) -> GateDecision:
    confidence = require_score(confidence, "confidence")
    liveness = require_score(liveness, "liveness")
    if quality is not None:
        quality = require_score(quality, "quality")

    checks = (
        ThresholdCheck("Confidence", confidence, thresholds.confidence, confidence >= thresholds.confidence),
        ThresholdCheck("Liveness", liveness, thresholds.liveness, liveness >= thresholds.liveness),
        # No quality score means the upstream model did not grade the image.
        ThresholdCheck("Quality", quality, thresholds.quality, quality is None or quality >= thresholds.quality),
    )

    failed = [c for c in checks if not c.passed]
    if not failed:
        return GateDecision(accept=True, reason="", checks=checks)
    return GateDecision(
        accept=False,
        reason=FAILURE_PREFIX + ", ".join(c.describe() for c in failed),
        checks=checks,
    )
