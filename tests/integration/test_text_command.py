"""Integration tests for the `text` command."""

from __future__ import annotations

from typer.testing import CliRunner

from humantouch.cli import app


def test_text_normalizes_argument_and_reports_changes() -> None:
    """The argument should be normalized and the change count reported."""

    runner = CliRunner()

    result = runner.invoke(app, ["text", "Wait\u2026 \u201cok\u201d"])

    assert result.exit_code == 0, result.output
    assert 'Wait... "ok"' in result.output
    assert "Changes: 3" in result.output


def test_text_reads_standard_input_when_no_argument_is_given() -> None:
    """Omitting the argument should read text from stdin."""

    runner = CliRunner()

    result = runner.invoke(app, ["text"], input="a \u2013 b\n")

    assert result.exit_code == 0, result.output
    assert "a - b\n" in result.output
    assert "Changes: 1" in result.output


def test_text_html_mode_keeps_excluded_zones() -> None:
    """Markup mode should leave excluded elements untouched."""

    runner = CliRunner()

    result = runner.invoke(app, ["text", "--html", "<pre>\u201cx\u201d</pre><p>\u201cy\u201d</p>"])

    assert result.exit_code == 0, result.output
    assert '<pre>\u201cx\u201d</pre><p>"y"</p>' in result.output


def test_text_aggressive_mode_rewrites_currency() -> None:
    """The aggressive flag should enable the aggressive tier."""

    runner = CliRunner()

    plain = runner.invoke(app, ["text", "\u20ac5"])
    aggressive = runner.invoke(app, ["text", "--aggressive", "\u20ac5"])

    assert "\u20ac5" in plain.output
    assert "EUR5" in aggressive.output


def test_text_reports_hazards() -> None:
    """Hazards found in the input should be listed after the change count."""

    runner = CliRunner()

    result = runner.invoke(app, ["text", "a\u200bb"])

    assert result.exit_code == 0, result.output
    assert "Hazards detected:" in result.output
    assert "Invisible/bidirectional chars: 1" in result.output
