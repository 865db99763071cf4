"""Map CQC location detail payloads onto maternity_units rows."""

from datetime import UTC, datetime
from typing import Any

from zeyra.config import get_settings

settings = get_settings()

KEY_QUESTIONS = {
    "rating_safe": "Safe",
    "rating_effective": "Effective",
    "rating_caring": "Caring",
    "rating_responsive": "Responsive",
    "rating_well_led": "Well-led",
}


def _mapping(value: Any) -> dict[str, Any]:
    """Return value if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def _entries(value: Any) -> list[dict[str, Any]]:
    """Return the dict entries of a list, dropping anything malformed."""
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _or_none(value: Any) -> Any:
    return value or None


def extract_key_question_rating(key_questions: Any, question_name: str) -> str | None:
    """Find a key-question rating by case-insensitive name."""
    wanted = question_name.lower()
    for entry in _entries(key_questions):
        name = entry.get("name")
        if isinstance(name, str) and name.lower() == wanted:
            return _or_none(entry.get("rating"))
    return None


def extract_maternity_rating(service_ratings: Any) -> dict[str, str | None]:
    """Pick the first maternity service rating and its report date."""
    for entry in _entries(service_ratings):
        name = entry.get("name")
        if not isinstance(name, str):
            continue
        if "maternity" in name.lower() or name == "independentmaternity":
            return {
                "rating": _or_none(entry.get("rating")),
                "date": _or_none(entry.get("reportDate")),
            }
    return {"rating": None, "date": None}


def is_independent(location: dict[str, Any]) -> bool:
    location_type = location.get("type")
    return isinstance(location_type, str) and "independent" in location_type.lower()


def determine_unit_type(location: dict[str, Any]) -> str:
    return "independent_hospital" if is_independent(location) else "nhs_hospital"


def build_report_url(location_id: str) -> str:
    return f"{settings.cqc_report_base_url}{location_id}"


def transform_location(
    location: dict[str, Any],
    synced_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Transform a CQC location detail payload into a maternity_units row.

    Never raises for unexpected payload shapes: missing or malformed nested
    objects simply leave the corresponding columns NULL.

    Args:
        location: Decoded ``/locations/{id}`` body
        synced_at: Sync timestamp to stamp on the row (defaults to now)

    Returns:
        Dict of column values keyed by column name
    """
    location = _mapping(location)
    location_id = location.get("locationId")

    current_ratings = _mapping(location.get("currentRatings"))
    overall = _mapping(current_ratings.get("overall"))
    key_questions = overall.get("keyQuestionRatings")
    maternity = extract_maternity_rating(current_ratings.get("serviceRatings"))

    registration_status = location.get("registrationStatus")

    record = {
        "cqc_location_id": location_id,
        "cqc_provider_id": _or_none(location.get("providerId")),
        "ods_code": _or_none(location.get("odsCode")),
        "name": _or_none(location.get("name")),
        "provider_name": None,
        "unit_type": determine_unit_type(location),
        "is_nhs": not is_independent(location),
        "address_line_1": _or_none(location.get("postalAddressLine1")),
        "address_line_2": _or_none(location.get("postalAddressLine2")),
        "town_city": _or_none(location.get("postalAddressTownCity")),
        "county": _or_none(location.get("postalAddressCounty")),
        "postcode": _or_none(location.get("postalCode")),
        "region": _or_none(location.get("region")),
        "local_authority": _or_none(location.get("localAuthority")),
        "latitude": _or_none(location.get("onspdLatitude")),
        "longitude": _or_none(location.get("onspdLongitude")),
        "phone": _or_none(location.get("mainPhoneNumber")),
        "website": _or_none(location.get("website")),
        "overall_rating": _or_none(overall.get("rating")),
        "maternity_rating": maternity["rating"],
        "maternity_rating_date": maternity["date"],
        "last_inspection_date": _or_none(_mapping(location.get("lastInspection")).get("date")),
        "cqc_report_url": build_report_url(location_id) if location_id else None,
        "registration_status": registration_status or "Registered",
        "is_active": registration_status == "Registered",
        "cqc_synced_at": synced_at or datetime.now(UTC),
    }

    for column, question in KEY_QUESTIONS.items():
        record[column] = extract_key_question_rating(key_questions, question)

    return record
