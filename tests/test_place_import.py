"""Tests for PLACE CSV parsing."""

import pytest

from zeyra.services.place_import import PlaceRating, parse_percentage, parse_place_csv

HEADER = (
    "Organisation Code,Organisation Name,Site Type,Site Code,Site Name,Postcode,"
    "Region,Commissioning Region,Cleanliness,Combined Food,Organisation Food,Ward Food,"
    "Privacy Dignity and Wellbeing,Condition Appearance and Maintenance"
)


def _row(site_code, site_name="St Mary's", cleanliness="98.08%", food="90.5%",
         privacy="85%", condition="N/A"):
    return ",".join(
        [
            "RX1", "Example Trust", "Acute", site_code, site_name, "M13 9WL",
            "North West", "North", cleanliness, food, "91%", "89%", privacy, condition,
        ]
    )


class TestParsePercentage:
    """Tests for percentage parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("98.08%", 98.08),
            (" 75 % ", 75.0),
            ("100", 100.0),
            ("", None),
            ("   ", None),
            ("N/A", None),
            ("-", None),
            ("n.a.", None),
            (None, None),
        ],
    )
    def test_parse_percentage(self, value, expected):
        assert parse_percentage(value) == expected


class TestParsePlaceCsv:
    """Tests for parse_place_csv."""

    def test_parses_rows(self):
        content = "\n".join([HEADER, _row("1-100000001"), _row("1-100000002", food="-")])

        ratings = parse_place_csv(content)

        assert ratings == [
            PlaceRating("1-100000001", "St Mary's", 98.08, 90.5, 85.0, None),
            PlaceRating("1-100000002", "St Mary's", 98.08, None, 85.0, None),
        ]

    def test_quoted_fields(self):
        content = "\n".join([HEADER, _row("1-1", site_name='"Hospital, North Wing"')])

        ratings = parse_place_csv(content)

        assert ratings[0].site_name == "Hospital, North Wing"
        assert ratings[0].cleanliness == 98.08

    def test_skips_short_blank_and_codeless_rows(self):
        content = "\n".join([HEADER, "RX1,Trust,Acute", "", _row(""), _row("1-1")])

        ratings = parse_place_csv(content)

        assert [rating.site_code for rating in ratings] == ["1-1"]

    def test_header_only(self):
        assert parse_place_csv(HEADER) == []

    def test_as_update(self):
        rating = PlaceRating("1-1", "Site", 98.0, None, 80.5, 70.0)

        assert rating.as_update() == {
            "place_cleanliness": 98.0,
            "place_food": None,
            "place_privacy_dignity_wellbeing": 80.5,
            "place_condition_appearance": 70.0,
        }
