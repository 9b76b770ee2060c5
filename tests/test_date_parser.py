import pytest

from contract_vault.services.date_parser import ParsedQuery, parse_date_from_query


class TestParseDateFromQuery:
    """Year/month extraction from free-text queries"""

    @pytest.mark.parametrize("query, expected", [
        ("SEPLAT 2024", ParsedQuery("SEPLAT", 2024, None)),
        ("drilling June 2023", ParsedQuery("drilling", 2023, 6)),
        ("06/2024", ParsedQuery("", 2024, 6)),
        ("no date here", ParsedQuery("no date here", None, None)),
    ])
    def test_reference_queries(self, query, expected):
        assert parse_date_from_query(query) == expected

    def test_dash_separator(self):
        assert parse_date_from_query("pipeline 3-2025") == ParsedQuery("pipeline", 2025, 3)

    def test_invalid_numeric_month_falls_back_to_bare_year(self):
        result = parse_date_from_query("13/2024 survey")
        assert result.year == 2024
        assert result.month is None
        assert result.clean_query == "13/ survey"

    def test_month_abbreviations_case_insensitive(self):
        assert parse_date_from_query("SEPT 2022 audit") == ParsedQuery("audit", 2022, 9)
        assert parse_date_from_query("Dec logistics") == ParsedQuery("logistics", None, 12)

    def test_month_must_be_whole_word(self):
        # "marine" starts with "mar" but is not a month
        assert parse_date_from_query("marine services") == ParsedQuery("marine services", None, None)

    def test_numeric_then_month_name_last_write_wins(self):
        result = parse_date_from_query("06/2024 June")
        assert result.year == 2024
        assert result.month == 6
        assert result.clean_query == ""

        overwritten = parse_date_from_query("06/2024 March")
        assert overwritten.year == 2024
        assert overwritten.month == 3

    def test_only_first_year_is_taken(self):
        result = parse_date_from_query("2023 vs 2024")
        assert result.year == 2023
        assert result.clean_query == "vs 2024"

    def test_whitespace_collapsed(self):
        assert parse_date_from_query("  oil   field  2021 ").clean_query == "oil field"

    def test_years_outside_2000s_are_text(self):
        assert parse_date_from_query("1999 contracts") == ParsedQuery("1999 contracts", None, None)
