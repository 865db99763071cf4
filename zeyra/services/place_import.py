"""Parsing for the NHS PLACE site-scores CSV."""

import csv
import io
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Column positions in the PLACE site-scores export
SITE_CODE_COL = 3  # matches maternity_units.cqc_location_id
SITE_NAME_COL = 4
CLEANLINESS_COL = 8
COMBINED_FOOD_COL = 9
PRIVACY_DIGNITY_WELLBEING_COL = 12
CONDITION_APPEARANCE_COL = 13
MIN_COLUMNS = 14

NULL_TOKENS = {"", "N/A", "-"}


@dataclass
class PlaceRating:
    """PLACE scores for one site (percentages)."""

    site_code: str
    site_name: str
    cleanliness: float | None
    food: float | None
    privacy_dignity_wellbeing: float | None
    condition_appearance: float | None

    def as_update(self) -> dict[str, float | None]:
        """Column values for maternity_units."""
        return {
            "place_cleanliness": self.cleanliness,
            "place_food": self.food,
            "place_privacy_dignity_wellbeing": self.privacy_dignity_wellbeing,
            "place_condition_appearance": self.condition_appearance,
        }


def parse_percentage(value: str | None) -> float | None:
    """Parse "98.08%" to 98.08; blanks, N/A and dashes become None."""
    if value is None:
        return None
    trimmed = value.strip()
    if trimmed in NULL_TOKENS:
        return None
    try:
        return float(trimmed.replace("%", "").strip())
    except ValueError:
        return None


def parse_place_csv(content: str) -> list[PlaceRating]:
    """Parse the CSV body (header row included) into PlaceRating entries."""
    ratings: list[PlaceRating] = []
    reader = csv.reader(io.StringIO(content))

    for line_number, fields in enumerate(reader, start=1):
        if line_number == 1 or not any(field.strip() for field in fields):
            continue

        if len(fields) < MIN_COLUMNS:
            logger.warning(
                f"Line {line_number}: Insufficient columns ({len(fields)}), skipping"
            )
            continue

        site_code = fields[SITE_CODE_COL].strip()
        if not site_code:
            continue

        ratings.append(
            PlaceRating(
                site_code=site_code,
                site_name=fields[SITE_NAME_COL].strip(),
                cleanliness=parse_percentage(fields[CLEANLINESS_COL]),
                food=parse_percentage(fields[COMBINED_FOOD_COL]),
                privacy_dignity_wellbeing=parse_percentage(fields[PRIVACY_DIGNITY_WELLBEING_COL]),
                condition_appearance=parse_percentage(fields[CONDITION_APPEARANCE_COL]),
            )
        )

    return ratings
