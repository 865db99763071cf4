"""MaternityUnit model for CQC-registered maternity locations."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from zeyra.database import Base


class MaternityUnit(Base):
    """
    A maternity unit tracked by the directory.

    Keyed on the CQC location id; rows are written by the CQC sync job
    (upsert) and enriched with PLACE scores by the CSV importer.
    """

    __tablename__ = "maternity_units"

    id: Mapped[int] = mapped_column(primary_key=True)
    cqc_location_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    # Identity and classification
    cqc_provider_id: Mapped[str | None] = mapped_column(String(20))
    ods_code: Mapped[str | None] = mapped_column(String(20))
    name: Mapped[str | None] = mapped_column(String(255))
    provider_name: Mapped[str | None] = mapped_column(String(255))
    unit_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    is_nhs: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Location
    address_line_1: Mapped[str | None] = mapped_column(String(255))
    address_line_2: Mapped[str | None] = mapped_column(String(255))
    town_city: Mapped[str | None] = mapped_column(String(100))
    county: Mapped[str | None] = mapped_column(String(100))
    postcode: Mapped[str | None] = mapped_column(Text)
    region: Mapped[str | None] = mapped_column(String(100), index=True)
    local_authority: Mapped[str | None] = mapped_column(String(100))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    # Contact
    phone: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(Text)

    # CQC ratings
    overall_rating: Mapped[str | None] = mapped_column(String(30))
    rating_safe: Mapped[str | None] = mapped_column(String(30))
    rating_effective: Mapped[str | None] = mapped_column(String(30))
    rating_caring: Mapped[str | None] = mapped_column(String(30))
    rating_responsive: Mapped[str | None] = mapped_column(String(30))
    rating_well_led: Mapped[str | None] = mapped_column(String(30))
    maternity_rating: Mapped[str | None] = mapped_column(String(30))
    maternity_rating_date: Mapped[str | None] = mapped_column(String(10))
    last_inspection_date: Mapped[str | None] = mapped_column(String(10))
    cqc_report_url: Mapped[str | None] = mapped_column(String(255))

    # PLACE scores (percentages)
    place_cleanliness: Mapped[float | None] = mapped_column(Float)
    place_food: Mapped[float | None] = mapped_column(Float)
    place_privacy_dignity_wellbeing: Mapped[float | None] = mapped_column(Float)
    place_condition_appearance: Mapped[float | None] = mapped_column(Float)
    place_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Lifecycle
    registration_status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="Registered"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    cqc_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<MaternityUnit {self.cqc_location_id}: {self.name}>"
