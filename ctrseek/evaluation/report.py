"""Structured report over seek roundtrip results, for JSON export and CLI output."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .roundtrip import RoundtripResult


@dataclass
class EvaluationReport:
    """Seek verification results for every engine mode that was run."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    settings: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "settings": self.settings,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "summary": {
                "total_modes_tested": len(self.roundtrip_results),
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "failing_modes": self.failing_modes(),
            },
        }

    def to_summary(self) -> str:
        lines = [f"Seek verification report - {self.timestamp}", "=" * 50]
        if self.roundtrip_results:
            ok = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip: {ok}/{len(self.roundtrip_results)} engine modes pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")
                for f in r.failures:
                    lines.append(
                        f"    read #{f.read_index} offset={f.offset} length={f.length}"
                        + (f" error={f.error}" if f.error else "")
                    )
        return "\n".join(lines)

    def failing_modes(self) -> List[str]:
        return [r.mode for r in self.roundtrip_results if not r.is_perfect]
