"""Tests for the product CSV parser."""

import logging

import pytest
from product_service.csv_parser import parse_number, parse_products_csv
from product_service.exceptions import ParseError
from product_service.models import ImportRecord


class TestParseProductsCsv:
    """Tests for parse_products_csv."""

    def test_single_well_formed_row(self):
        """Test one data row yields one typed record."""
        content = "id,title,description,price,count\nabc,Guitar,Nice guitar,19.5,3\n"
        result = parse_products_csv(content)

        assert result.record_count == 1
        record = result.records[0]
        assert isinstance(record, ImportRecord)
        assert record.id == "abc"
        assert record.title == "Guitar"
        assert record.description == "Nice guitar"
        assert record.price == 19.5
        assert record.count == 3
        assert isinstance(record.price, float)
        assert isinstance(record.count, float)

    def test_header_is_trimmed_and_lowercased(self):
        """Test header names are normalized."""
        content = " ID , Title ,PRICE\n1,Drum,5\n"
        result = parse_products_csv(content)

        assert result.records[0].id == "1"
        assert result.records[0].title == "Drum"
        assert result.records[0].price == 5.0

    def test_values_are_trimmed(self):
        content = "id,title\n  1  ,  Drum  \n"
        result = parse_products_csv(content)

        assert result.records[0].id == "1"
        assert result.records[0].title == "Drum"

    def test_non_numeric_price_becomes_zero(self):
        """Test a bad price does not drop the row."""
        content = "id,title,price,count\n1,Drum,cheap,2\n"
        result = parse_products_csv(content)

        assert result.record_count == 1
        assert result.records[0].price == 0
        assert result.records[0].count == 2

    def test_column_count_mismatch_is_skipped(self, caplog):
        """Test a short row is skipped and the rest still parse."""
        content = "id,title,price\n1,Drum\n2,Bass,10\n"
        with caplog.at_level(logging.WARNING):
            result = parse_products_csv(content)

        assert [r.id for r in result.records] == ["2"]
        assert result.skipped_count == 1
        assert result.skipped[0].line_number == 2
        assert "column count mismatch" in result.skipped[0].reason
        assert "Skipping line 2" in caplog.text

    def test_missing_required_fields_are_skipped(self):
        """Test rows without id or title are skipped."""
        content = "id,title,price\n,Drum,1\n2,,1\n3,Bass,1\n"
        result = parse_products_csv(content)

        assert [r.id for r in result.records] == ["3"]
        assert result.skipped_count == 2
        assert "id" in result.skipped[0].reason
        assert "title" in result.skipped[1].reason

    def test_blank_lines_are_ignored(self):
        content = "\nid,title\n\n1,Drum\n   \n2,Bass\n\n"
        result = parse_products_csv(content)

        assert result.record_count == 2
        assert result.skipped_count == 0

    def test_crlf_line_endings(self):
        content = "id,title,price\r\n1,Drum,3\r\n"
        result = parse_products_csv(content)

        assert result.records[0].price == 3.0

    def test_quoted_field_with_comma(self):
        """Test quoted values keep their embedded commas."""
        content = 'id,title,description\n1,Drum,"Loud, red"\n'
        result = parse_products_csv(content)

        assert result.record_count == 1
        assert result.records[0].description == "Loud, red"

    def test_oversized_field_skips_only_that_row(self, caplog):
        """Test a row the csv reader rejects is skipped, not fatal."""
        content = f"id,title,description\n1,Drum,{'x' * 200000}\n2,Bass,ok\n"
        with caplog.at_level(logging.WARNING):
            result = parse_products_csv(content)

        assert [r.id for r in result.records] == ["2"]
        assert result.skipped_count == 1
        assert result.skipped[0].line_number == 2
        assert result.skipped[0].reason.startswith("malformed row:")
        assert "Skipping line 2" in caplog.text

    def test_unreadable_header_raises(self):
        content = f"id,title,{'x' * 200000}\n1,Drum,ok\n"

        with pytest.raises(ParseError, match="header"):
            parse_products_csv(content, source="uploaded/x.csv")

    def test_extra_columns_are_kept(self):
        content = "id,title,color\n1,Drum,red\n"
        result = parse_products_csv(content)

        assert result.records[0].model_dump()["color"] == "red"

    def test_header_only_raises(self):
        """Test a file with no data rows fails as a whole."""
        with pytest.raises(ParseError, match="empty or has no data rows"):
            parse_products_csv("id,title,price\n", source="uploaded/x.csv")

    def test_empty_content_raises(self):
        with pytest.raises(ParseError) as exc_info:
            parse_products_csv("   \n\n", source="uploaded/x.csv")

        assert exc_info.value.context.s3_key == "uploaded/x.csv"

    def test_all_rows_invalid_is_not_an_error(self):
        """Test that skipping every row yields an empty result, not a failure."""
        result = parse_products_csv("id,title\n1\n2\n")

        assert result.record_count == 0
        assert result.skipped_count == 2


class TestParseNumber:
    """Tests for parse_number."""

    def test_parse_valid(self):
        assert parse_number("12.5") == 12.5
        assert parse_number(" 3 ") == 3.0

    def test_parse_invalid(self):
        assert parse_number("abc") == 0.0
        assert parse_number("") == 0.0
        assert parse_number("nan") == 0.0
        assert parse_number("inf") == 0.0
