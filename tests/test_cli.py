"""Tests for the command-line interface."""

import argparse
import json

import pytest

from combolens import __version__
from combolens.cli import (
    detect_input_type,
    filter_result,
    main,
    parse_metadata,
    parse_tiers,
)
from combolens import analyze_combinations
from combolens.engine.classifier import StrengthTier

TITLE = "Headspace: Meditation & Sleep"
SUBTITLE = "Mindfulness Timer & Wellness App"


def _run_main(args: list[str], capsys) -> tuple[int, str, str]:
    """Run main() and return (exit_code, stdout, stderr)."""
    code = main(args)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


@pytest.fixture
def json_input(tmp_path):
    path = tmp_path / "metadata.json"
    path.write_text(json.dumps({"title": TITLE, "subtitle": SUBTITLE}), encoding="utf-8")
    return path


@pytest.fixture
def text_input(tmp_path):
    path = tmp_path / "metadata.txt"
    path.write_text(f"{TITLE}\n{SUBTITLE}\n", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

class TestInputParsing:
    """Test input detection and parsing."""

    def test_detect_json(self):
        """JSON objects are detected."""
        assert detect_input_type('  {"title": "x"}') == 'json'

    def test_detect_text(self):
        """Anything else is text."""
        assert detect_input_type("Calm\nSleep Stories") == 'text'

    def test_parse_json(self):
        """JSON input yields title and subtitle."""
        content = json.dumps({"title": "Calm", "subtitle": "Sleep Stories"})
        assert parse_metadata(content) == ("Calm", "Sleep Stories")

    def test_parse_json_missing_subtitle(self):
        """A missing subtitle is empty."""
        assert parse_metadata('{"title": "Calm"}') == ("Calm", "")

    def test_parse_json_not_object(self):
        """Non-object JSON is rejected."""
        with pytest.raises(ValueError):
            parse_metadata('["Calm"]', 'json')

    def test_parse_text_skips_blank_lines(self):
        """Text input uses the first two non-blank lines."""
        assert parse_metadata("\nCalm\n\nSleep Stories\n") == ("Calm", "Sleep Stories")

    def test_parse_text_single_line(self):
        """A single line is the title."""
        assert parse_metadata("Calm Sleep") == ("Calm Sleep", "")

    def test_parse_tiers(self):
        """Tier names are parsed case-insensitively."""
        assert parse_tiers("title_consecutive, MISSING") == [
            StrengthTier.TITLE_CONSECUTIVE,
            StrengthTier.MISSING,
        ]

    def test_parse_tiers_invalid(self):
        """Unknown tier names are rejected."""
        with pytest.raises(argparse.ArgumentTypeError):
            parse_tiers("title_consecutive,bogus")

    def test_filter_result(self):
        """Filtering narrows combinations but keeps statistics."""
        result = analyze_combinations(TITLE, SUBTITLE)
        filtered = filter_result(result, tiers=[StrengthTier.CROSS_ELEMENT])
        assert filtered.combinations
        assert all(c.strength is StrengthTier.CROSS_ELEMENT for c in filtered.combinations)
        assert filtered.stats == result.stats
        assert filter_result(result) is result


# ---------------------------------------------------------------------------
# Basic invocations
# ---------------------------------------------------------------------------

class TestMainBasicInvocations:
    """Test main() with each input and output mode."""

    def test_flags_json(self, capsys):
        """--title/--subtitle with JSON output exits 0."""
        code, out, err = _run_main(["--title", TITLE, "--subtitle", SUBTITLE, "--format", "json"], capsys)
        assert code == 0
        data = json.loads(out)
        texts = [c["text"] for c in data["combinations"]]
        assert "meditation sleep" in texts

    def test_json_file(self, json_input, capsys):
        """JSON input file is auto-detected."""
        code, out, err = _run_main([str(json_input), "--format", "json"], capsys)
        assert code == 0
        assert json.loads(out)["title"] == TITLE

    def test_text_file(self, text_input, capsys):
        """Text input file is auto-detected."""
        code, out, err = _run_main([str(text_input), "--format", "json"], capsys)
        assert code == 0
        assert json.loads(out)["subtitle"] == SUBTITLE

    def test_terminal_no_color(self, json_input, capsys):
        """Terminal output exits 0."""
        code, out, err = _run_main([str(json_input), "--no-color"], capsys)
        assert code == 0
        assert "meditation sleep" in out

    def test_markdown_to_file(self, json_input, tmp_path, capsys):
        """Markdown report is written to --output."""
        report = tmp_path / "report.md"
        code, out, err = _run_main([str(json_input), "--format", "markdown", "-o", str(report)], capsys)
        assert code == 0
        assert report.exists()
        assert "Report saved to" in err

    def test_verbose(self, json_input, capsys):
        """Verbose progress goes to stderr."""
        code, out, err = _run_main([str(json_input), "--format", "json", "-v"], capsys)
        assert code == 0
        assert "Parsing input" in err
        assert "Generated" in err

    def test_version(self, capsys):
        """--version prints the version and exits 0."""
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Options and filters
# ---------------------------------------------------------------------------

class TestMainOptions:
    """Test generation options and filters."""

    def test_tiers_filter(self, json_input, capsys):
        """--tiers keeps only the listed tiers."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--tiers", "title_consecutive"], capsys)
        assert code == 0
        strengths = {c["strength"] for c in json.loads(out)["combinations"]}
        assert strengths == {"title_consecutive"}

    def test_existing_only(self, json_input, capsys):
        """--existing-only drops missing combinations."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--existing-only"], capsys)
        assert code == 0
        assert all(c["strength"] != "missing" for c in json.loads(out)["combinations"])

    def test_max_length(self, json_input, capsys):
        """--max-length bounds phrase length."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--max-length", "2"], capsys)
        assert code == 0
        assert all(c["length"] == 2 for c in json.loads(out)["combinations"])

    def test_no_cross(self, json_input, capsys):
        """--no-cross skips cross-element generation."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--no-cross"], capsys)
        assert code == 0
        assert all(c["source"] != "cross_element" for c in json.loads(out)["combinations"])

    def test_brand(self, json_input, capsys):
        """--brand removes brand words from combinations."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--brand", "Headspace"], capsys)
        assert code == 0
        assert all("headspace" not in c["keywords"] for c in json.loads(out)["combinations"])

    def test_profile(self, json_input, capsys):
        """--profile is accepted and reported."""
        code, out, err = _run_main([str(json_input), "--format", "json", "--profile", "distinctive"], capsys)
        assert code == 0
        assert json.loads(out)["metadata"]["profile"] == "distinctive"

    def test_diff(self, json_input, tmp_path, capsys):
        """--diff adds a comparison block."""
        draft = tmp_path / "draft.json"
        draft.write_text(json.dumps({"title": "Meditation Sleep Timer", "subtitle": "Mindfulness App"}), encoding="utf-8")
        code, out, err = _run_main([str(json_input), "--format", "json", "--diff", str(draft)], capsys)
        assert code == 0
        assert "diff" in json.loads(out)

    def test_diff_terminal(self, json_input, tmp_path, capsys):
        """--diff renders in the terminal."""
        draft = tmp_path / "draft.txt"
        draft.write_text("Meditation Sleep Timer\nMindfulness App\n", encoding="utf-8")
        code, out, err = _run_main([str(json_input), "--no-color", "--diff", str(draft)], capsys)
        assert code == 0
        assert "CHANGES VS BASELINE" in out


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestMainErrors:
    """Test error exits."""

    def test_missing_file(self, tmp_path, capsys):
        """A missing input file exits 1."""
        code, out, err = _run_main([str(tmp_path / "nope.json")], capsys)
        assert code == 1
        assert "not found" in err

    def test_missing_diff_file(self, json_input, tmp_path, capsys):
        """A missing diff file exits 1."""
        code, out, err = _run_main([str(json_input), "--diff", str(tmp_path / "nope.json")], capsys)
        assert code == 1

    def test_empty_metadata(self, capsys):
        """Empty title and subtitle exit 1."""
        code, out, err = _run_main(["--title", "", "--subtitle", ""], capsys)
        assert code == 1
        assert "Error:" in err

    def test_invalid_options(self, json_input, capsys):
        """Inverted length bounds exit 1."""
        code, out, err = _run_main([str(json_input), "--min-length", "4", "--max-length", "2"], capsys)
        assert code == 1

    def test_invalid_tier(self, json_input, capsys):
        """Unknown tier names exit 1."""
        code, out, err = _run_main([str(json_input), "--tiers", "bogus"], capsys)
        assert code == 1
        assert "Invalid tier" in err

    def test_invalid_json(self, tmp_path, capsys):
        """Malformed JSON exits 1."""
        path = tmp_path / "bad.json"
        path.write_text('{"title": ', encoding="utf-8")
        code, out, err = _run_main([str(path)], capsys)
        assert code == 1
        assert "Error" in err

    def test_file_and_flags(self, json_input):
        """An input file cannot be combined with --title."""
        with pytest.raises(SystemExit) as exc:
            main([str(json_input), "--title", TITLE])
        assert exc.value.code == 2

    def test_existing_and_missing_only(self, json_input):
        """--existing-only and --missing-only are exclusive."""
        with pytest.raises(SystemExit) as exc:
            main([str(json_input), "--existing-only", "--missing-only"])
        assert exc.value.code == 2
