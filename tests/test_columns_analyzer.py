"""
Unit tests for column type detection.
"""

from tabular_insights.columns_analyzer import (
    SAMPLE_SIZE,
    describe_columns,
    detect_column_type,
    detect_type,
    is_boolean,
    is_empty,
    is_valid_date,
    parse_number,
)


class TestValueClassifiers:
    """Test the per-value predicates."""

    def test_parse_number_accepts_numeric_text(self):
        """Test integer, decimal, signed and exponent forms."""
        assert parse_number("100") == 100.0
        assert parse_number("-3.5") == -3.5
        assert parse_number(".5") == 0.5
        assert parse_number("1e3") == 1000.0
        assert parse_number(" 42 ") == 42.0

    def test_parse_number_rejects_non_numbers(self):
        """Test text, blanks, booleans and non-finite values are not numbers."""
        assert parse_number("abc") is None
        assert parse_number("12abc") is None
        assert parse_number("") is None
        assert parse_number(True) is None
        assert parse_number("inf") is None
        assert parse_number(float("nan")) is None

    def test_parse_number_native_values(self):
        """Test values already typed by a spreadsheet reader."""
        assert parse_number(7) == 7.0
        assert parse_number(2.25) == 2.25

    def test_is_valid_date_layouts(self):
        """Test the four supported date layouts."""
        assert is_valid_date("2023-01-15")
        assert is_valid_date("01/15/2023")
        assert is_valid_date("01-15-2023")
        assert is_valid_date("2023/01/15")

    def test_is_valid_date_rejects_impossible_dates(self):
        """Test a matching layout with an impossible calendar date."""
        assert not is_valid_date("2023-02-30")
        assert not is_valid_date("13/01/2023")

    def test_is_valid_date_rejects_other_text(self):
        """Test other layouts and non-string values."""
        assert not is_valid_date("Jan 15 2023")
        assert not is_valid_date("2023-1-5")
        assert not is_valid_date(20230115)

    def test_is_boolean(self):
        """Test boolean literals are case-insensitive."""
        assert is_boolean("true")
        assert is_boolean("FALSE")
        assert is_boolean(True)
        assert not is_boolean("yes")
        assert not is_boolean(1)

    def test_is_empty(self):
        """Test missing cell markers."""
        assert is_empty(None)
        assert is_empty("")
        assert is_empty(float("nan"))
        assert not is_empty(" ")
        assert not is_empty(0)


class TestDetectColumnType:
    """Test majority-based column classification."""

    def test_all_numbers(self):
        """Test a purely numeric sample."""
        assert detect_column_type(["100", "200", "3.5"]) == "number"

    def test_all_dates(self):
        """Test a purely date sample."""
        assert detect_column_type(["2023-01-01", "2023-06-01"]) == "date"

    def test_all_booleans(self):
        """Test a purely boolean sample."""
        assert detect_column_type(["true", "false", "True"]) == "boolean"

    def test_below_majority_is_string(self):
        """Test 7 numbers out of 10 valid values is not above 70%."""
        values = ["1"] * 7 + ["true"] * 3
        assert detect_column_type(values) == "string"

    def test_above_majority_is_number(self):
        """Test 8 numbers out of 10 valid values is a number column."""
        values = ["1"] * 8 + ["true"] * 2
        assert detect_column_type(values) == "number"

    def test_unclassified_values_leave_the_ratio(self):
        """Test free text does not count against the majority."""
        values = ["1", "2", "3", "n/a", "unknown"]
        assert detect_column_type(values) == "number"

    def test_only_text_is_string(self):
        """Test a sample with no classifiable values."""
        assert detect_column_type(["alpha", "beta"]) == "string"

    def test_empty_sample_is_string(self):
        """Test an all-missing sample."""
        assert detect_column_type([]) == "string"
        assert detect_column_type([None, "", None]) == "string"

    def test_numeric_text_is_not_a_date(self):
        """Test that a year column is classified as a number."""
        assert detect_column_type(["2020", "2021"]) == "number"


class TestDetectType:
    """Test detection over table rows."""

    def test_only_first_rows_are_sampled(self):
        """Test rows past the sample window do not affect the result."""
        rows = [{"x": "1"} for _ in range(SAMPLE_SIZE)] + [{"x": "word"} for _ in range(50)]
        assert detect_type(rows, "x") == "number"

    def test_missing_keys_count_as_empty(self):
        """Test rows that omit the column."""
        rows = [{"x": "1"}, {"y": "a"}, {"x": "2"}]
        assert detect_type(rows, "x") == "number"

    def test_empty_table(self):
        """Test an empty table yields string."""
        assert detect_type([], "x") == "string"

    def test_describe_columns_preserves_order(self):
        """Test descriptor order follows the given names."""
        rows = [{"rev": "100", "yr": "2020", "name": "a"}]
        columns = describe_columns(rows, ["name", "rev", "yr"])
        assert [c["name"] for c in columns] == ["name", "rev", "yr"]
        assert [c["type"] for c in columns] == ["string", "number", "number"]

    def test_detection_is_deterministic(self):
        """Test repeated detection over the same rows."""
        rows = [{"d": "2023-01-0%d" % i} for i in range(1, 9)]
        assert describe_columns(rows, ["d"]) == describe_columns(rows, ["d"])
