"""
Quote summary and export tests.
"""
from datetime import datetime

import pytest

from kitchen_quote.exceptions import ExportError, NoResultError
from kitchen_quote.export.quote_summary import (
    format_currency, build_lines, session_summary, summary_text,
    summary_to_frame, export_csv, export_excel, REFERENCE_COST_NOTE,
)


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(-12) == "-$12.00"


def test_lines_follow_result(session):
    lines = {line.label: line for line in build_lines(
        session.params, session.config, session.options, session.result)}

    assert lines["Grand Total"].amount == session.result.grand_total
    assert lines["Labor"].details.startswith("1 workers at $16.00/hr")
    assert "Markup (120%)" in lines
    assert "Holiday Surcharge" not in lines


def test_subcontractor_lines_marked_as_reference(session):
    session.update(use_subcontractor=True, subcontractor_cost=200)
    lines = build_lines(session.params, session.config, session.options, session.result)

    labor = next(line for line in lines if line.label == "Labor")
    assert labor.details == REFERENCE_COST_NOTE
    assert any(line.label == "Subcontractor Savings" for line in lines)


def test_split_commission_lines(session):
    session.set_field('enable_commission_split', True)
    labels = [line.label for line in build_lines(
        session.params, session.config, session.options, session.result)]

    assert "Commission 1 (10%)" in labels
    assert "Total Commission (20%)" in labels


def test_summary_structure(session):
    summary = session_summary(session, generated_at=datetime(2026, 1, 15, 9, 30))

    assert summary["generated_at"] == "2026-01-15T09:30:00"
    assert summary["job"]["workers"] == 2
    assert summary["grand_total"] == 1050
    assert summary["lines"][-1]["label"] == "Final Company Profit"
    assert all("formatted" in line for line in summary["lines"])


def test_summary_text(session):
    text = summary_text(session_summary(session))
    assert "KITCHEN CLEANING QUOTE" in text
    assert "$1,050.00" in text
    assert "Cost 45% / Profit 55%" in text


def test_csv_export(session, tmp_path):
    summary = session_summary(session)
    df = summary_to_frame(summary)
    assert list(df.columns) == ['Section', 'Item', 'Amount', 'Details']

    path = tmp_path / "quote.csv"
    text = export_csv(summary, path)
    assert path.read_text(encoding='utf-8') == text
    assert "Grand Total,1050" in text


def test_csv_export_failure_raises_and_keeps_state(session, tmp_path):
    before = session.result
    with pytest.raises(ExportError):
        export_csv(session_summary(session), tmp_path)  # a directory, not a file
    assert session.result is before


def test_excel_export(session, tmp_path):
    path = tmp_path / "quote.xlsx"
    data = export_excel(session_summary(session), path)

    assert data[:2] == b"PK"
    assert path.read_bytes() == data


@pytest.mark.parametrize("method,phrase", [
    ('up', "rounded up to the next multiple of $50.00"),
    ('down', "rounded down to the previous multiple of $50.00"),
    ('nearest', "rounded to the nearest multiple of $50.00"),
])
def test_rounding_detail_follows_method(session, method, phrase):
    session.set_field('rounding_method', method)
    lines = build_lines(session.params, session.config, session.options, session.result)

    rounding = next(line for line in lines if line.label == "Rounding Adjustment")
    assert phrase in rounding.details


def test_summary_without_result_raises(session):
    session.result = None
    with pytest.raises(NoResultError):
        session_summary(session)
