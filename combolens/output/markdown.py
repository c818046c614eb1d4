"""Markdown output formatter for analysis results.

Generates clean markdown for metadata reviews and audit write-ups.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from ..engine.analyzer import AnalysisResult
from ..engine.classifier import TIER_ORDER, StrengthTier
from ..engine.compare import ComboDiff
from ..engine.stats import ClassifiedCombination, group_by_tier, strengthen_opportunities

_MD_SPECIAL = re.compile(r'([\\`*_\{\}\[\]()#+\-.!|])')

# Rows per tier table before the rest is summarized
_MAX_ROWS = 50


def _escape_md(text: str) -> str:
    """Escape markdown special characters in user-derived text."""
    return _MD_SPECIAL.sub(r'\\\1', text)


def _tier_title(tier: StrengthTier) -> str:
    return tier.value.replace("_", " ").title()


class MarkdownOutput:
    """Markdown output formatter."""

    def __init__(self, max_rows: int = _MAX_ROWS):
        self.max_rows = max_rows

    def generate(
        self,
        result: AnalysisResult,
        diff: ComboDiff | None = None,
        include_toc: bool = True
    ) -> str:
        """Generate full markdown report.

        Args:
            result: Analysis result
            diff: Optional baseline vs draft comparison
            include_toc: Whether to include table of contents

        Returns:
            Markdown formatted string
        """
        sections = []

        sections.append(self._generate_header(result))

        if include_toc:
            sections.append(self._generate_toc(result, diff))

        sections.append(self._generate_summary(result))

        if diff is not None:
            sections.append(self._generate_diff(diff))

        sections.append(self._generate_tiers(result))

        opportunities = strengthen_opportunities(result.combinations)
        if opportunities:
            sections.append(self._generate_opportunities(opportunities))

        sections.append(self._generate_appendix())

        return "\n\n".join(sections)

    def save(
        self,
        result: AnalysisResult,
        output_path: str | Path,
        **kwargs
    ) -> None:
        """Save markdown report to file."""
        content = self.generate(result, **kwargs)
        Path(output_path).write_text(content, encoding='utf-8')

    def _generate_header(self, result: AnalysisResult) -> str:
        """Generate report header."""
        lines = [
            "# Keyword Combination Report",
            "",
            f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "**Tool:** Combolens Keyword Combination Analyzer",
            "",
            "## Metadata",
            "",
            f"- **Title:** {_escape_md(result.title) or '_empty_'}",
            f"- **Subtitle:** {_escape_md(result.subtitle) or '_empty_'}",
            f"- **Distinct keywords:** {result.keyword_count}",
            f"- **Generation mode:** {result.mode.value}",
        ]

        if result.error:
            lines.extend(["", f"> **Error:** {_escape_md(result.error.message)}"])

        for warning in result.warnings:
            lines.extend(["", f"> **Warning:** {_escape_md(warning)}"])

        return "\n".join(lines)

    def _generate_toc(self, result: AnalysisResult, diff: ComboDiff | None) -> str:
        """Generate table of contents."""
        lines = [
            "## Table of Contents",
            "",
            "- [Summary](#summary)",
        ]
        if diff is not None:
            lines.append("- [Changes vs Baseline](#changes-vs-baseline)")
        lines.append("- [Combinations by Tier](#combinations-by-tier)")

        for tier in group_by_tier(result.combinations):
            anchor = _tier_title(tier).lower().replace(" ", "-")
            lines.append(f"   - [{_tier_title(tier)}](#{anchor})")

        lines.append("- [Strengthening Opportunities](#strengthening-opportunities)")
        lines.append("- [Appendix](#appendix)")
        return "\n".join(lines)

    def _generate_summary(self, result: AnalysisResult) -> str:
        """Generate summary section."""
        stats = result.stats
        lines = [
            "## Summary",
            "",
            f"The analysis generated **{stats.total_possible} combinations**, "
            f"of which **{stats.existing}** already exist in the metadata "
            f"(**{stats.coverage_percent:.1f}% coverage**).",
            "",
            "| Tier | Strength | Count |",
            "|------|----------|-------|",
        ]

        for tier in TIER_ORDER:
            lines.append(
                f"| {tier.rank}. {_tier_title(tier)} | {tier.label} | "
                f"{stats.tier_counts.get(tier, 0)} |"
            )

        lines.extend([
            "",
            f"- **Can be strengthened:** {stats.can_strengthen_count}",
            f"- **Truncated:** {'yes' if stats.truncated else 'no'}",
        ])
        return "\n".join(lines)

    def _generate_diff(self, diff: ComboDiff) -> str:
        """Generate baseline comparison section."""
        lines = [
            "## Changes vs Baseline",
            "",
            f"- **Added:** {len(diff.added)}",
            f"- **Removed:** {len(diff.removed)}",
            f"- **Upgraded:** {len(diff.tier_upgrades)}",
            f"- **Downgraded:** {len(diff.tier_downgrades)}",
            f"- **Unchanged:** {len(diff.unchanged)}",
        ]

        if diff.tier_upgrades or diff.tier_downgrades:
            lines.extend([
                "",
                "| Combination | Baseline | Draft | Change |",
                "|-------------|----------|-------|--------|",
            ])
            for change in diff.tier_upgrades + diff.tier_downgrades:
                lines.append(
                    f"| {_escape_md(change.text)} | {_tier_title(change.baseline)} | "
                    f"{_tier_title(change.draft)} | {change.improvement:+d} |"
                )

        for heading, combos in (("Added", diff.added), ("Removed", diff.removed)):
            if not combos:
                continue
            lines.extend(["", f"### {heading}", ""])
            for combo in combos[:self.max_rows]:
                lines.append(f"- {_escape_md(combo.text)} ({_tier_title(combo.strength)})")

        return "\n".join(lines)

    def _generate_tiers(self, result: AnalysisResult) -> str:
        """Generate combination tables grouped by tier."""
        lines = [
            "## Combinations by Tier",
            "",
        ]

        grouped = group_by_tier(result.combinations)
        if not grouped:
            lines.append("No combinations generated.")
            return "\n".join(lines)

        for tier, combos in grouped.items():
            lines.extend([
                f"### {_tier_title(tier)}",
                "",
                f"Found **{len(combos)}** combination(s) in this tier "
                f"(ranking power {tier.score}/100).",
                "",
                "| Combination | Words | Source | Value |",
                "|-------------|-------|--------|-------|",
            ])
            for combo in combos[:self.max_rows]:
                lines.append(
                    f"| {_escape_md(combo.text)} | {combo.length} | "
                    f"{combo.source.value.replace('_', ' ')} | {combo.value:.0f} |"
                )
            if len(combos) > self.max_rows:
                lines.append("")
                lines.append(f"_...and {len(combos) - self.max_rows} more_")
            lines.append("")

        return "\n".join(lines)

    def _generate_opportunities(self, opportunities: list[ClassifiedCombination]) -> str:
        """Generate strengthening opportunities section."""
        lines = [
            "## Strengthening Opportunities",
            "",
            "The following combinations can move to a stronger tier:",
            "",
        ]
        for combo in opportunities[:self.max_rows]:
            lines.append(
                f"- **{_escape_md(combo.text)}** ({_tier_title(combo.strength)}): "
                f"{combo.suggestion}"
            )
        if len(opportunities) > self.max_rows:
            lines.append(f"- _...and {len(opportunities) - self.max_rows} more_")
        return "\n".join(lines)

    def _generate_appendix(self) -> str:
        """Generate appendix."""
        lines = [
            "## Appendix",
            "",
            "### Strength Tiers",
            "",
            "| Tier | Meaning | Ranking Power |",
            "|------|---------|---------------|",
            "| Title Consecutive | All words adjacent in the title | 100 |",
            "| Title Non Consecutive | All words in the title, not adjacent | 85 |",
            "| Cross Element | Words split across title and subtitle | 70 |",
            "| Subtitle Consecutive | All words adjacent in the subtitle | 50 |",
            "| Subtitle Non Consecutive | All words in the subtitle, not adjacent | 30 |",
            "| Missing | Not formed by the current metadata | 0 |",
            "",
            "### Estimated Value",
            "",
            "Value (0-100) weighs phrase length, how rarely each word repeats "
            "across title and subtitle, and word specificity. It orders "
            "generation when the keyword set is large.",
            "",
        ]

        return "\n".join(lines)
