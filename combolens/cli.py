"""Combolens CLI - Keyword Combination Analyzer.

Main command-line interface for analyzing App Store title/subtitle metadata.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from . import __version__
from .engine.analyzer import AnalysisResult, Analyzer
from .engine.classifier import StrengthTier
from .engine.compare import diff_results
from .engine.generator import GenerationOptions
from .engine.ranker import ValueProfile
from .parser.tokenizer import Field, remove_brand_keywords, tokenize

# Valid tier names for --tiers flag help text
_TIER_NAMES = ", ".join(t.value for t in StrengthTier)


def detect_input_type(content: str) -> str:
    """Auto-detect the format of a metadata input file.

    Args:
        content: File content to analyze

    Returns:
        One of: 'json', 'text'
    """
    stripped = content.lstrip()
    if stripped.startswith('{'):
        return 'json'
    return 'text'


def read_content(input_arg: str | None) -> str:
    """Read input content from a file path, '-' for stdin, or piped stdin.

    Args:
        input_arg: File path string, '-' for explicit stdin, or None to check
                   for piped stdin automatically.

    Returns:
        File content as a string.
    """
    if input_arg == '-' or (input_arg is None and not sys.stdin.isatty()):
        return sys.stdin.read()

    if input_arg is None:
        raise ValueError("input_arg must be a file path or '-' for stdin")

    path = Path(input_arg)

    # Metadata files are tiny; anything large is the wrong file
    max_size = 1024 * 1024  # 1 MB
    file_size = path.stat().st_size
    if file_size > max_size:
        raise ValueError(f"Input file exceeds {max_size // 1024}KB limit ({file_size // 1024}KB)")

    content = None
    for encoding in ['utf-8', 'utf-16', 'latin-1']:
        try:
            content = path.read_text(encoding=encoding)
            break
        except UnicodeDecodeError:
            continue

    if content is None:
        content = path.read_bytes().decode('utf-8', errors='replace')

    return content


def parse_metadata(content: str, input_type: str | None = None) -> tuple[str, str]:
    """Extract title and subtitle from input content.

    JSON input is an object with "title" and "subtitle" keys. Text input
    holds the title on its first non-blank line and the subtitle on the
    next one.

    Args:
        content: Raw input content
        input_type: 'json', 'text', or None/'auto' to detect

    Returns:
        Tuple of (title, subtitle)

    Raises:
        ValueError: If JSON input is not an object of strings
    """
    if input_type is None or input_type == 'auto':
        input_type = detect_input_type(content)

    if input_type == 'json':
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("JSON input must be an object with 'title' and 'subtitle'")
        title = data.get('title') or ''
        subtitle = data.get('subtitle') or ''
        if not isinstance(title, str) or not isinstance(subtitle, str):
            raise ValueError("'title' and 'subtitle' must be strings")
        return title, subtitle

    lines = [line.strip() for line in content.splitlines() if line.strip()]
    title = lines[0] if lines else ''
    subtitle = lines[1] if len(lines) > 1 else ''
    return title, subtitle


def parse_input(input_arg: str, input_type: str | None = None) -> tuple[str, str]:
    """Read and parse metadata from a file path or '-' for stdin."""
    return parse_metadata(read_content(input_arg), input_type)


def parse_tiers(tiers_str: str) -> list[StrengthTier]:
    """Parse a comma-separated list of tier names into StrengthTier values.

    Args:
        tiers_str: Comma-separated tier names (e.g. 'title_consecutive,missing')

    Returns:
        List of StrengthTier enum values

    Raises:
        argparse.ArgumentTypeError: If any tier name is invalid
    """
    valid = {t.value: t for t in StrengthTier}
    result = []
    for name in tiers_str.split(','):
        name = name.strip().lower()
        if name not in valid:
            raise argparse.ArgumentTypeError(
                f"Invalid tier '{name}'. Valid tiers: {_TIER_NAMES}"
            )
        result.append(valid[name])
    return result


def run_analysis(
    analyzer: Analyzer,
    title: str,
    subtitle: str,
    brands: list[str] | None = None,
) -> AnalysisResult:
    """Analyze one title/subtitle pair, removing brand keywords if given."""
    if not brands:
        return analyzer.analyze(title, subtitle)

    return analyzer.analyze_keywords(
        title,
        subtitle,
        remove_brand_keywords(tokenize(title, Field.TITLE), brands),
        remove_brand_keywords(tokenize(subtitle, Field.SUBTITLE), brands),
    )


def filter_result(
    result: AnalysisResult,
    tiers: list[StrengthTier] | None = None,
    existing_only: bool = False,
    missing_only: bool = False,
) -> AnalysisResult:
    """Narrow the displayed combinations; statistics keep the full run."""
    combos = result.combinations
    if tiers:
        combos = tuple(c for c in combos if c.strength in tiers)
    if existing_only:
        combos = tuple(c for c in combos if c.strength.exists)
    if missing_only:
        combos = tuple(c for c in combos if not c.strength.exists)
    if combos is result.combinations:
        return result
    return replace(result, combinations=combos)


def _write_or_print(content: str, output: Path | None) -> None:
    if output:
        output.write_text(content, encoding='utf-8')
        print(f"Report saved to: {output}", file=sys.stderr)
    else:
        print(content)


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog='combolens',
        description='Keyword Combination Analyzer - Generate and classify search phrases from App Store titles and subtitles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  combolens --title "Headspace: Meditation & Sleep" --subtitle "Mindfulness Timer & Wellness App"
  combolens metadata.json
  combolens metadata.txt --format markdown --output report.md
  cat metadata.json | combolens --format json      # pipe input
  combolens current.json --diff draft.json
  combolens metadata.json --brand Headspace --tiers title_consecutive,cross_element
  combolens metadata.json --max-length 3 --profile long_tail
        """
    )

    parser.add_argument(
        'input',
        nargs='?',
        help='Metadata file (JSON or two text lines), or "-" to read from stdin'
    )

    parser.add_argument('--title', help='App title (instead of an input file)')
    parser.add_argument('--subtitle', help='App subtitle (instead of an input file)')

    parser.add_argument(
        '-t', '--type',
        choices=['auto', 'json', 'text'],
        default='auto',
        help='Input type (default: auto-detect)'
    )

    parser.add_argument(
        '-f', '--format',
        choices=['terminal', 'markdown', 'json'],
        default='terminal',
        help='Output format (default: terminal)'
    )

    parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Output file (markdown and json formats; default: stdout)'
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output (terminal only)'
    )

    parser.add_argument(
        '-p', '--profile',
        choices=[p.value for p in ValueProfile],
        default='default',
        help='Value profile used to prioritize generation (default: default)'
    )

    gen = parser.add_argument_group('generation')
    gen.add_argument('--min-length', type=int, default=2, help='Minimum words per combination (default: 2)')
    gen.add_argument('--max-length', type=int, default=4, help='Maximum words per combination (default: 4)')
    gen.add_argument('--no-title-only', action='store_true', help='Skip title-only combinations')
    gen.add_argument('--no-subtitle-only', action='store_true', help='Skip subtitle-only combinations')
    gen.add_argument('--no-cross', action='store_true', help='Skip title + subtitle combinations')
    gen.add_argument('--per-source-cap', type=int, default=500, help='Maximum combinations per source (default: 500)')
    gen.add_argument('--top-n', type=int, default=500, help='Combinations kept for large keyword sets (default: 500)')

    parser.add_argument(
        '--tiers',
        metavar='TIER[,TIER...]',
        help=f'Only show these strength tiers (comma-separated). Valid values: {_TIER_NAMES}'
    )

    show = parser.add_mutually_exclusive_group()
    show.add_argument('--existing-only', action='store_true', help='Only show combinations that already exist')
    show.add_argument('--missing-only', action='store_true', help='Only show missing combinations')

    parser.add_argument(
        '--brand',
        metavar='NAME',
        action='append',
        default=[],
        help='Brand name whose words are excluded from combinations (repeatable)'
    )

    parser.add_argument(
        '--diff',
        metavar='SECOND_FILE',
        type=Path,
        help='Compare the input (baseline) against draft metadata in SECOND_FILE'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parsed_args = parser.parse_args(args)

    use_flags = parsed_args.title is not None or parsed_args.subtitle is not None
    input_arg = parsed_args.input

    if use_flags and input_arg is not None:
        parser.error('use either an input file or --title/--subtitle, not both')

    # Support piped stdin when no input argument is given
    if not use_flags and input_arg is None and not sys.stdin.isatty():
        input_arg = '-'

    if not use_flags and input_arg is None:
        parser.error('the following arguments are required: input (or --title/--subtitle, or pipe data via stdin)')

    # Validate file paths when not reading from stdin
    for label, candidate in (("Input file", input_arg), ("Diff file", parsed_args.diff)):
        if candidate is None or str(candidate) == '-':
            continue
        path = Path(candidate)
        if not path.exists():
            print(f"Error: {label} not found: {candidate}", file=sys.stderr)
            return 1
        if not path.is_file():
            print(f"Error: {label} is not a file: {candidate}", file=sys.stderr)
            return 1

    tiers = None
    if parsed_args.tiers:
        try:
            tiers = parse_tiers(parsed_args.tiers)
        except argparse.ArgumentTypeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        if use_flags:
            title, subtitle = parsed_args.title or '', parsed_args.subtitle or ''
        else:
            if parsed_args.verbose:
                source = 'stdin' if input_arg == '-' else input_arg
                print(f"Parsing input: {source}", file=sys.stderr)
            title, subtitle = parse_input(input_arg, parsed_args.type)

        options = GenerationOptions(
            min_length=parsed_args.min_length,
            max_length=parsed_args.max_length,
            include_title_only=not parsed_args.no_title_only,
            include_subtitle_only=not parsed_args.no_subtitle_only,
            include_cross_element=not parsed_args.no_cross,
            per_source_cap=parsed_args.per_source_cap,
            top_n=parsed_args.top_n,
        )
        analyzer = Analyzer(options=options, profile=ValueProfile(parsed_args.profile))

        result = run_analysis(analyzer, title, subtitle, parsed_args.brand)
        if not result.ok:
            print(f"Error: {result.error.message}", file=sys.stderr)
            return 1

        if parsed_args.verbose:
            print(
                f"Generated {result.stats.total_possible} combinations from "
                f"{result.keyword_count} keywords ({result.mode.value} mode)",
                file=sys.stderr,
            )

        # Handle --diff mode: the input is the baseline, SECOND_FILE the draft
        diff = None
        if parsed_args.diff:
            draft_title, draft_subtitle = parse_input(str(parsed_args.diff), parsed_args.type)
            draft = run_analysis(analyzer, draft_title, draft_subtitle, parsed_args.brand)
            if not draft.ok:
                print(f"Error: {draft.error.message} (in {parsed_args.diff})", file=sys.stderr)
                return 1
            diff = diff_results(result, draft)
            if parsed_args.verbose:
                print(
                    f"Diff: {len(diff.added)} added, {len(diff.removed)} removed, "
                    f"{len(diff.tier_upgrades)} upgraded, {len(diff.tier_downgrades)} downgraded",
                    file=sys.stderr,
                )

        result = filter_result(
            result,
            tiers=tiers,
            existing_only=parsed_args.existing_only,
            missing_only=parsed_args.missing_only,
        )

        # Generate output
        if parsed_args.format == 'terminal':
            from .output.terminal import TerminalOutput

            output = TerminalOutput(
                no_color=parsed_args.no_color,
                profile=parsed_args.profile,
            )
            output.print_header(result)
            if diff is not None:
                output.print_diff(diff)
            output.print_combinations(result.combinations)
            output.console.print()
            output.print_opportunities(result.combinations)
            output.print_summary(result)

        elif parsed_args.format == 'markdown':
            from .output.markdown import MarkdownOutput

            content = MarkdownOutput().generate(result, diff=diff)
            _write_or_print(content, parsed_args.output)

        elif parsed_args.format == 'json':
            from .output.json_out import JSONOutput

            content = JSONOutput(profile=parsed_args.profile).to_json(result, diff=diff)
            _write_or_print(content, parsed_args.output)

        return 0

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except (MemoryError, RecursionError):
        raise
    except Exception as e:
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print("Use --verbose for full traceback", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
