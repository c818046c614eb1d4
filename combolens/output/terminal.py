"""Rich terminal output for analysis results.

Provides formatted, color-coded terminal output using the Rich library.
Theme: Catppuccin Mocha (https://catppuccin.com/palette/)

Bordered section panels per strength tier, compact value badges and a
coverage bar in the summary dashboard.
"""

from __future__ import annotations

from rich.align import Align
from rich.box import ROUNDED
from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from .. import __version__
from ..engine.analyzer import AnalysisResult
from ..engine.classifier import TIER_ORDER, StrengthTier
from ..engine.compare import ComboDiff
from ..engine.generator import ComboSource
from ..engine.stats import ClassifiedCombination, group_by_tier, strengthen_opportunities

# Catppuccin Mocha palette
MOCHA = {
    "rosewater": "#f5e0dc",
    "pink": "#f5c2e7",
    "mauve": "#cba6f7",
    "red": "#f38ba8",
    "maroon": "#eba0ac",
    "peach": "#fab387",
    "yellow": "#f9e2af",
    "green": "#a6e3a1",
    "teal": "#94e2d5",
    "sky": "#89dceb",
    "sapphire": "#74c7ec",
    "blue": "#89b4fa",
    "lavender": "#b4befe",
    "text": "#cdd6f4",
    "subtext1": "#bac2de",
    "subtext0": "#a6adc8",
    "overlay1": "#7f849c",
    "overlay0": "#6c7086",
    "surface2": "#585b70",
    "surface1": "#45475a",
    "surface0": "#313244",
    "crust": "#11111b",
}

# Rich theme for markup tags
MOCHA_THEME = Theme({
    "info": MOCHA["sapphire"],
    "warning": MOCHA["peach"],
    "danger": MOCHA["red"],
    "success": MOCHA["green"],
})

TIER_ICONS = {
    StrengthTier.TITLE_CONSECUTIVE: "==",
    StrengthTier.TITLE_NON_CONSECUTIVE: "=.",
    StrengthTier.CROSS_ELEMENT: "<>",
    StrengthTier.SUBTITLE_CONSECUTIVE: "--",
    StrengthTier.SUBTITLE_NON_CONSECUTIVE: "-.",
    StrengthTier.MISSING: "..",
}

TIER_COLORS = {
    StrengthTier.TITLE_CONSECUTIVE: MOCHA["green"],
    StrengthTier.TITLE_NON_CONSECUTIVE: MOCHA["teal"],
    StrengthTier.CROSS_ELEMENT: MOCHA["sapphire"],
    StrengthTier.SUBTITLE_CONSECUTIVE: MOCHA["yellow"],
    StrengthTier.SUBTITLE_NON_CONSECUTIVE: MOCHA["peach"],
    StrengthTier.MISSING: MOCHA["overlay1"],
}

SOURCE_LABELS = {
    ComboSource.TITLE_ONLY: "title",
    ComboSource.SUBTITLE_ONLY: "subtitle",
    ComboSource.CROSS_ELEMENT: "cross",
}


# ── Badge / display helpers ──────────────────────────────────────────────


def _score_color(score: float) -> str:
    if score >= 80:
        return MOCHA["green"]
    if score >= 60:
        return MOCHA["yellow"]
    if score >= 40:
        return MOCHA["peach"]
    return MOCHA["red"]


def _score_badge(score: float) -> Text:
    """Render a score as a compact colored pill: e.g. ``[65]``."""
    badge = Text()
    badge.append(f" {score:.0f} ", style=f"bold {MOCHA['crust']} on {_score_color(score)}")
    return badge


def _score_bar(score: float, width: int = 20) -> Text:
    """Build a colored progress bar for a percentage (0-100).

    Returns a Rich Text object like: ████████████████░░░░ 85
    """
    filled = int(round(score / 100 * width))
    empty = width - filled
    bar_color = _score_color(score)

    bar = Text()
    bar.append("█" * filled, style=bar_color)
    bar.append("░" * empty, style=MOCHA["surface2"])
    bar.append(f" {score:.1f}%", style=f"bold {bar_color}")
    return bar


def _tier_badge(tier: StrengthTier) -> Text:
    """Render a strength tier as an outlined badge: ``[GOOD]``."""
    color = TIER_COLORS.get(tier, MOCHA["subtext1"])
    badge = Text()
    badge.append(f" {tier.label.upper()} ", style=f"bold {color}")
    return badge


def _tier_name(tier: StrengthTier) -> str:
    return tier.value.upper().replace("_", " ")


# ── Main output class ────────────────────────────────────────────────────


class TerminalOutput:
    """Rich terminal output formatter."""

    def __init__(
        self,
        console: Console | None = None,
        no_color: bool = False,
        profile: str = "default",
        max_rows: int = 25,
    ):
        """Initialize terminal output.

        Args:
            console: Optional Rich console instance
            no_color: If True, disable colored output
            profile: Active value profile name
            max_rows: Rows shown per tier panel
        """
        if console:
            self.console = console
        elif no_color:
            self.console = Console(no_color=True, highlight=False)
        else:
            self.console = Console(theme=MOCHA_THEME)

        self.profile = profile
        self.max_rows = max_rows

    # ── Public API ────────────────────────────────────────────────────

    def print_header(self, result: AnalysisResult) -> None:
        """Print the banner and the analyzed metadata panel."""
        self.console.print()
        self.console.print(
            Panel(
                Align.center(
                    Text(
                        "COMBOLENS - Keyword Combination Analysis",
                        style=f"bold {MOCHA['mauve']}",
                    )
                ),
                box=ROUNDED,
                border_style=MOCHA["mauve"],
                padding=(0, 1),
            )
        )
        self.console.print()

        info_table = Table(
            show_header=False,
            box=None,
            padding=(0, 2),
            show_edge=False,
        )
        info_table.add_column("Key", style=MOCHA["subtext0"], min_width=12)
        info_table.add_column("Value", style=f"bold {MOCHA['text']}")
        info_table.add_row("Title:", Text(result.title or "-"))
        info_table.add_row("Subtitle:", Text(result.subtitle or "-"))
        info_table.add_row("Keywords:", str(result.keyword_count))
        info_table.add_row("Mode:", result.mode.value)

        self.console.print(
            Panel(
                info_table,
                title=f"[{MOCHA['overlay0']}]METADATA[/{MOCHA['overlay0']}]",
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["surface1"],
                padding=(0, 1),
            )
        )

        for warning in result.warnings:
            self.console.print(
                Text(f"Warning: {warning}", style=f"bold {MOCHA['peach']}")
            )
        self.console.print()

    def print_error(self, result: AnalysisResult) -> None:
        """Print a result-level error."""
        if result.error is None:
            return
        self.console.print(
            Panel(
                Text(result.error.message, style=MOCHA["red"]),
                title=f"[bold {MOCHA['red']}]ERROR ({result.error.code})[/bold {MOCHA['red']}]",
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["red"],
                padding=(0, 1),
            )
        )

    def print_combinations(
        self,
        combinations: list[ClassifiedCombination] | tuple[ClassifiedCombination, ...],
    ) -> None:
        """Print combinations grouped by strength tier, strongest first."""
        if not combinations:
            self.console.print(
                f"[{MOCHA['yellow']}]No combinations generated[/{MOCHA['yellow']}]"
            )
            return

        for tier, combos in group_by_tier(combinations).items():
            self._print_tier_section(tier, combos)

    def print_opportunities(
        self,
        combinations: list[ClassifiedCombination] | tuple[ClassifiedCombination, ...],
        top_n: int = 10,
    ) -> None:
        """Print the combinations that can move to a stronger tier."""
        opportunities = strengthen_opportunities(combinations)[:top_n]
        if not opportunities:
            return

        renderables: list[RenderableType] = []
        for i, combo in enumerate(opportunities, 1):
            entry = Text()
            entry.append(f"{i}. ", style=MOCHA["overlay1"])
            entry.append(combo.text, style=f"bold {MOCHA['text']}")
            entry.append("  ")
            entry.append_text(_tier_badge(combo.strength))
            entry.append("\n   ")
            entry.append(combo.suggestion or "", style=MOCHA["subtext0"])
            renderables.append(entry)
            if i < len(opportunities):
                renderables.append(Rule(style=MOCHA["surface0"]))

        self.console.print(
            Panel(
                Group(*renderables),
                title=(
                    f"[bold {MOCHA['yellow']}]"
                    "STRENGTHENING OPPORTUNITIES"
                    f"[/bold {MOCHA['yellow']}]"
                ),
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["yellow"],
                padding=(1, 2),
            )
        )
        self.console.print()

    def print_diff(self, diff: ComboDiff) -> None:
        """Print a baseline vs draft comparison."""
        counts = Text()
        counts.append(f"+{len(diff.added)} added", style=MOCHA["green"])
        counts.append(" | ", style=MOCHA["surface2"])
        counts.append(f"-{len(diff.removed)} removed", style=MOCHA["red"])
        counts.append(" | ", style=MOCHA["surface2"])
        counts.append(f"{len(diff.tier_upgrades)} upgraded", style=MOCHA["teal"])
        counts.append(" | ", style=MOCHA["surface2"])
        counts.append(f"{len(diff.tier_downgrades)} downgraded", style=MOCHA["peach"])
        counts.append(" | ", style=MOCHA["surface2"])
        counts.append(f"{len(diff.unchanged)} unchanged", style=MOCHA["overlay1"])

        parts: list[RenderableType] = [counts]

        changes = diff.tier_upgrades + diff.tier_downgrades
        if changes:
            table = Table(box=ROUNDED, border_style=MOCHA["surface2"])
            table.add_column("Combination", style=f"bold {MOCHA['text']}")
            table.add_column("Baseline", style=MOCHA["subtext0"])
            table.add_column("Draft")
            table.add_column("Change", justify="right")
            for change in changes[:self.max_rows]:
                color = MOCHA["green"] if change.improvement > 0 else MOCHA["red"]
                table.add_row(
                    change.text,
                    _tier_name(change.baseline),
                    Text(_tier_name(change.draft), style=TIER_COLORS[change.draft]),
                    Text(f"{change.improvement:+d}", style=f"bold {color}"),
                )
            parts.append(table)

        for label, combos, color in (
            ("Added", diff.added, MOCHA["green"]),
            ("Removed", diff.removed, MOCHA["red"]),
        ):
            if not combos:
                continue
            listing = Text()
            listing.append(f"{label}: ", style=f"bold {color}")
            listing.append(", ".join(c.text for c in combos[:self.max_rows]), style=MOCHA["text"])
            if len(combos) > self.max_rows:
                listing.append(f" (+{len(combos) - self.max_rows} more)", style=MOCHA["overlay1"])
            parts.append(listing)

        self.console.print(
            Panel(
                Group(*parts),
                title=f"[bold {MOCHA['blue']}]CHANGES VS BASELINE[/bold {MOCHA['blue']}]",
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["blue"],
                padding=(0, 1),
            )
        )
        self.console.print()

    def print_summary(self, result: AnalysisResult) -> None:
        """Print dashboard-style summary statistics."""
        stats = result.stats

        tier_table = Table(
            title=f"[bold {MOCHA['sapphire']}]By Tier[/bold {MOCHA['sapphire']}]",
            box=ROUNDED,
            show_header=False,
            border_style=MOCHA["surface2"],
            padding=(0, 1),
            min_width=30,
        )
        tier_table.add_column("Tier", style=MOCHA["subtext0"])
        tier_table.add_column("Count", justify="right")
        for tier in TIER_ORDER:
            count = stats.tier_counts.get(tier, 0)
            color = TIER_COLORS[tier]
            tier_table.add_row(
                f"{TIER_ICONS[tier]} {_tier_name(tier)}",
                f"[bold {color}]{count}[/bold {color}]",
            )

        source_table = Table(
            title=f"[bold {MOCHA['sapphire']}]By Source[/bold {MOCHA['sapphire']}]",
            box=ROUNDED,
            show_header=False,
            border_style=MOCHA["surface2"],
            padding=(0, 1),
            min_width=22,
        )
        source_table.add_column("Source", style=MOCHA["mauve"])
        source_table.add_column("Count", justify="right", style=f"bold {MOCHA['text']}")
        for source, count in stats.source_counts.items():
            source_table.add_row(SOURCE_LABELS[source].upper(), str(count))

        length_table = Table(
            title=f"[bold {MOCHA['sapphire']}]By Length[/bold {MOCHA['sapphire']}]",
            box=ROUNDED,
            show_header=False,
            border_style=MOCHA["surface2"],
            padding=(0, 1),
            min_width=22,
        )
        length_table.add_column("Words", style=MOCHA["subtext0"])
        length_table.add_column("Count", justify="right", style=f"bold {MOCHA['text']}")
        for length, count in stats.length_counts.items():
            length_table.add_row(f"{length} words", str(count))

        coverage = Text()
        coverage.append("Coverage  ", style=f"bold {MOCHA['subtext1']}")
        coverage.append_text(_score_bar(stats.coverage_percent))
        coverage.append(
            f"  ({stats.existing} of {stats.total_possible} exist, "
            f"{stats.can_strengthen_count} can be strengthened)",
            style=MOCHA["subtext0"],
        )

        summary_parts: list[RenderableType] = [
            Columns([tier_table, source_table, length_table], padding=(0, 2), expand=True),
            Text(""),
            coverage,
        ]
        if stats.truncated:
            summary_parts.append(
                Text(
                    "Generation was capped; the analysis is partial.",
                    style=f"bold {MOCHA['peach']}",
                )
            )

        self.console.print()
        self.console.print(
            Panel(
                Group(*summary_parts),
                title=(
                    f"[bold {MOCHA['lavender']}]"
                    "ANALYSIS SUMMARY"
                    f"[/bold {MOCHA['lavender']}]"
                ),
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["lavender"],
                padding=(0, 1),
            )
        )

        # Footer
        self.console.print()
        footer_parts = [f"combolens v{__version__}"]
        footer_parts.append(f"Profile: {self.profile}")
        footer_parts.append(f"Mode: {result.mode.value}")
        footer_parts.append(f"{stats.total_possible} combinations")
        footer_text = f"[{MOCHA['overlay1']}]{' | '.join(footer_parts)}[/{MOCHA['overlay1']}]"

        self.console.print(Rule(style=MOCHA["surface2"]))
        self.console.print(Align.center(Text.from_markup(footer_text)))
        self.console.print()

    # ── Internal rendering methods ──────────────────────────────────────

    def _print_tier_section(
        self,
        tier: StrengthTier,
        combos: list[ClassifiedCombination],
    ) -> None:
        """Print a tier section wrapped in a bordered panel."""
        color = TIER_COLORS.get(tier, MOCHA["subtext1"])
        title = (
            f"[bold {color}]{TIER_ICONS[tier]} {_tier_name(tier)} "
            f"({len(combos)})[/bold {color}]"
        )

        table = Table(box=None, show_edge=False, padding=(0, 2))
        table.add_column("Combination", style=f"bold {MOCHA['text']}")
        table.add_column("Words", justify="right", style=MOCHA["subtext0"])
        table.add_column("Source", style=MOCHA["mauve"])
        table.add_column("Value", justify="right")

        for combo in combos[:self.max_rows]:
            table.add_row(
                combo.text,
                str(combo.length),
                SOURCE_LABELS[combo.source],
                _score_badge(combo.value),
            )

        parts: list[RenderableType] = [table]
        if len(combos) > self.max_rows:
            parts.append(
                Text(f"...and {len(combos) - self.max_rows} more", style=MOCHA["overlay1"])
            )

        self.console.print()
        self.console.print(
            Panel(
                Group(*parts),
                title=title,
                title_align="left",
                box=ROUNDED,
                border_style=color,
                padding=(0, 1),
            )
        )


def print_results(
    result: AnalysisResult,
    diff: ComboDiff | None = None,
    show_combinations: bool = True,
    show_opportunities: bool = True,
    show_summary: bool = True,
    profile: str = "default",
    console: Console | None = None,
) -> None:
    """Convenience function to print analysis results.

    Args:
        result: Analysis result
        diff: Optional baseline vs draft comparison
        show_combinations: Show the per-tier tables
        show_opportunities: Show strengthening opportunities
        show_summary: Show summary statistics
        profile: Active value profile name
        console: Optional Rich console instance
    """
    output = TerminalOutput(console=console, profile=profile)

    output.print_header(result)

    if not result.ok:
        output.print_error(result)
        return

    if diff is not None:
        output.print_diff(diff)

    if show_combinations:
        output.print_combinations(result.combinations)
        output.console.print()

    if show_opportunities:
        output.print_opportunities(result.combinations)

    if show_summary:
        output.print_summary(result)
