"""Unit tests for the content checks."""

import pytest

from sheetsane.checks.content import (
    DEFAULT_ERROR_SUGGESTION,
    check_data_type_anomalies,
    check_duplicate_keys,
    check_formula_errors,
    get_error_suggestion,
    looks_like_date,
)
from sheetsane.config import ProcessingLimits
from sheetsane.core.limits import clamp_sheet
from sheetsane.core.models import Cell, CellKind, KeyColumnSelection, Severity


def _error(token):
    return Cell(CellKind.ERROR, token, token)


NON_DATE_WORDS = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta"]


class TestFormulaErrors:
    """Test cases for check_formula_errors."""

    def test_grouped_by_token(self, make_sheet):
        """Test one finding per distinct token with refs in scan order."""
        sheet = make_sheet("Calc", [
            ["a", "b"],
            [_error("#REF!"), _error("#REF!")],
            [_error("#DIV/0!"), _error("#REF!")],
        ])

        findings = check_formula_errors(clamp_sheet(sheet))

        assert len(findings) == 2
        ref, div = findings
        assert ref.severity == Severity.ERROR
        assert ref.category == "Formula Errors"
        assert ref.cell_ref == "A2, B2, B3"
        assert ref.description == "3 cell(s) contain #REF! error: A2, B2, B3"
        assert ref.suggestion == get_error_suggestion("#REF!")
        assert div.cell_ref == "A3"

    def test_string_error_tokens(self, make_sheet):
        """Test that string cells equal to an error token are detected."""
        sheet = make_sheet("Calc", [["a"], ["#GETTING_DATA"], ["#REF"]])

        findings = check_formula_errors(clamp_sheet(sheet))

        assert len(findings) == 1
        assert findings[0].cell_ref == "A2"

    def test_reference_list_capped(self, make_sheet):
        """Test that more than ten references are summarised."""
        sheet = make_sheet("Calc", [["x"]] + [["#N/A"] for _ in range(12)])

        findings = check_formula_errors(clamp_sheet(sheet))

        expected_refs = ", ".join(f"A{r}" for r in range(2, 12))
        assert findings[0].cell_ref == f"{expected_refs} and 2 more"
        assert findings[0].description.startswith("12 cell(s) contain #N/A error: ")

    def test_outside_clamped_range_ignored(self, make_sheet):
        """Test that errors beyond the row limit are not reported."""
        sheet = make_sheet("Calc", [["x"], [1], [2], [_error("#NUM!")]])

        findings = check_formula_errors(
            clamp_sheet(sheet, ProcessingLimits(max_rows_per_sheet=3))
        )

        assert findings == []

    def test_unknown_token_suggestion(self):
        """Test the fallback suggestion for unlisted tokens."""
        assert get_error_suggestion("#SPILL!") == DEFAULT_ERROR_SUGGESTION


class TestLooksLikeDate:
    """Test cases for the date-like text patterns."""

    @pytest.mark.parametrize(
        "value", ["1/2/2024", "12-31-99", "3.4.2024", "2024-01-05", "2024/1/5", "Mar 3", "december"]
    )
    def test_date_like(self, value):
        """Test values that look like dates."""
        assert looks_like_date(value)

    @pytest.mark.parametrize("value", ["alpha", "12345", "2024", "1/2", "order 5"])
    def test_not_date_like(self, value):
        """Test values that do not look like dates."""
        assert not looks_like_date(value)


class TestDataTypeAnomalies:
    """Test cases for check_data_type_anomalies."""

    def test_text_dates(self, make_sheet):
        """Test that 3 of 10 date-like strings give one warning at 30%."""
        values = ["1/2/2024", "2024-01-05", "Mar 3"] + NON_DATE_WORDS
        sheet = make_sheet("Data", [["when"]] + [[v] for v in values])

        findings = check_data_type_anomalies(clamp_sheet(sheet))

        assert len(findings) == 1
        assert findings[0].severity == Severity.WARNING
        assert findings[0].category == "Data Type Anomaly"
        assert findings[0].column == "when"
        assert findings[0].description == "3 values (30%) appear to be text-formatted dates"

    def test_mixed_types(self, make_sheet):
        """Test a predominantly numeric column with some text."""
        values = [1, 2, 3, 4, 5, 6, "n/a", "unknown"]
        sheet = make_sheet("Data", [["amount"]] + [[v] for v in values])

        findings = check_data_type_anomalies(clamp_sheet(sheet))

        assert len(findings) == 1
        assert findings[0].description == (
            "Mixed data types: 6 numeric and 2 text values in a predominantly numeric column"
        )

    def test_both_anomalies_on_one_column(self, make_sheet):
        """Test that both anomalies can fire on the same column."""
        values = [1, 2, 3, 4, 5, 6, "1/1/2024", "1/2/2024", "1/3/2024", "1/4/2024"]
        sheet = make_sheet("Data", [["col"]] + [[v] for v in values])

        findings = check_data_type_anomalies(clamp_sheet(sheet))

        assert len(findings) == 2
        assert findings[0].description == "4 values (40%) appear to be text-formatted dates"
        assert findings[1].description.startswith("Mixed data types: 6 numeric and 4 text")

    def test_too_few_values_skipped(self, make_sheet):
        """Test that columns with fewer than five values are ignored."""
        sheet = make_sheet("Data", [["when"], ["1/2/2024"], ["2/2/2024"], [1], [2]])

        assert check_data_type_anomalies(clamp_sheet(sheet)) == []

    def test_column_letter_label(self, make_sheet):
        """Test that a blank header is labelled by its column letter."""
        values = [1, 2, 3, 4, 5, 6, "x", "y"]
        sheet = make_sheet("Data", [["a", None]] + [["v", v] for v in values])

        findings = check_data_type_anomalies(clamp_sheet(sheet))

        assert [f.column for f in findings] == ["B"]

    def test_clean_column(self, make_sheet):
        """Test that a uniform numeric column passes."""
        sheet = make_sheet("Data", [["n"]] + [[i] for i in range(10)])

        assert check_data_type_anomalies(clamp_sheet(sheet)) == []


class TestDuplicateKeys:
    """Test cases for check_duplicate_keys."""

    @pytest.fixture
    def keys_sheet(self, make_sheet):
        return make_sheet("Orders", [["key"]] + [[v] for v in [1, 2, 1, 3, 2, 2]])

    def test_duplicates_reported(self, keys_sheet):
        """Test groups, affected rows and spreadsheet row numbers."""
        selection = KeyColumnSelection(sheet="Orders", column="key", column_index=0)

        findings = check_duplicate_keys(clamp_sheet(keys_sheet), selection)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.severity == Severity.ERROR
        assert finding.category == "Duplicate Keys"
        assert finding.column == "key"
        assert finding.row_numbers == (2, 4, 3, 6, 7)
        assert finding.description == (
            '2 duplicate values found affecting 5 rows: "1" (rows 2, 4); "2" (rows 3, 6, 7)'
        )

    def test_long_groups_truncated(self, make_sheet):
        """Test that groups list at most three rows and five values."""
        values = []
        for v in range(7):
            values.extend([f"k{v}"] * 4)
        sheet = make_sheet("Orders", [["key"]] + [[v] for v in values])
        selection = KeyColumnSelection(sheet="Orders", column="key", column_index=0)

        finding = check_duplicate_keys(clamp_sheet(sheet), selection)[0]

        assert finding.description.startswith(
            '7 duplicate values found affecting 28 rows: "k0" (rows 2, 3, 4...)'
        )
        assert finding.description.endswith(" and 2 more")
        assert len(finding.row_numbers) == 28

    def test_other_sheet(self, keys_sheet):
        """Test that a selection on another sheet finds nothing here."""
        selection = KeyColumnSelection(sheet="Customers", column="key", column_index=0)

        assert check_duplicate_keys(clamp_sheet(keys_sheet), selection) == []

    def test_no_selection(self, keys_sheet):
        """Test that no selection means no finding."""
        assert check_duplicate_keys(clamp_sheet(keys_sheet), None) == []

    def test_unique_values(self, make_sheet):
        """Test that unique keys pass, ignoring blanks."""
        sheet = make_sheet("Orders", [["key"], [1], [None], [2], [None], [3]])
        selection = KeyColumnSelection(sheet="Orders", column="key", column_index=0)

        assert check_duplicate_keys(clamp_sheet(sheet), selection) == []
