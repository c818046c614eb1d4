"""JSON output formatter for analysis results.

Generates structured JSON for programmatic use.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import __version__
from ..engine.analyzer import AnalysisResult
from ..engine.compare import ComboDiff, TierChange
from ..engine.stats import ClassifiedCombination, group_by_tier, strengthen_opportunities


class JSONOutput:
    """JSON output formatter."""

    def __init__(self, profile: str = "default"):
        self.profile = profile

    def generate(
        self,
        result: AnalysisResult,
        diff: ComboDiff | None = None,
        include_missing: bool = True
    ) -> dict:
        """Generate JSON-serializable dictionary.

        Args:
            result: Analysis result
            diff: Optional baseline vs draft comparison
            include_missing: Whether to include missing combinations

        Returns:
            Dictionary ready for JSON serialization
        """
        payload = result.to_dict()
        if not include_missing:
            payload["combinations"] = [
                c.to_dict() for c in result.combinations if c.strength.exists
            ]

        output: dict[str, Any] = {
            "metadata": {
                "generated_at": datetime.now().isoformat(),
                "tool": "Combolens",
                "version": __version__,
                "profile": self.profile,
                "total_combinations": len(result.combinations),
            }
        }
        output.update(payload)

        output["by_tier"] = {
            tier.value: [c.text for c in combos]
            for tier, combos in group_by_tier(result.combinations).items()
        }

        output["strengthen_opportunities"] = [
            self._opportunity_to_dict(c)
            for c in strengthen_opportunities(result.combinations)
        ]

        if diff is not None:
            output["diff"] = self._diff_to_dict(diff)

        return output

    def to_json(
        self,
        result: AnalysisResult,
        indent: int = 2,
        **kwargs
    ) -> str:
        """Generate JSON string.

        Args:
            result: Analysis result
            indent: JSON indentation level
            **kwargs: Additional arguments passed to generate()

        Returns:
            JSON formatted string
        """
        data = self.generate(result, **kwargs)
        return json.dumps(data, indent=indent, default=str)

    def save(
        self,
        result: AnalysisResult,
        output_path: str | Path,
        **kwargs
    ) -> None:
        """Save JSON report to file."""
        content = self.to_json(result, **kwargs)
        Path(output_path).write_text(content, encoding='utf-8')

    def _opportunity_to_dict(self, combo: ClassifiedCombination) -> dict:
        return {
            "text": combo.text,
            "strength": combo.strength.value,
            "tier": combo.strength.rank,
            "suggestion": combo.suggestion,
        }

    def _diff_to_dict(self, diff: ComboDiff) -> dict:
        """Convert ComboDiff to dictionary."""
        def change_to_dict(change: TierChange) -> dict:
            return {
                "text": change.text,
                "baseline": change.baseline.value,
                "draft": change.draft.value,
                "improvement": change.improvement,
                "score_delta": change.score_delta,
            }

        return {
            "added": [c.to_dict() for c in diff.added],
            "removed": [c.to_dict() for c in diff.removed],
            "tier_upgrades": [change_to_dict(t) for t in diff.tier_upgrades],
            "tier_downgrades": [change_to_dict(t) for t in diff.tier_downgrades],
            "unchanged_count": len(diff.unchanged),
        }
