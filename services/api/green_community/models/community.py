"""Community and membership models.

A community is a named, categorized group; membership is a plain join table.
member_count is denormalized and maintained by the communities service.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from green_community.models.user import generate_id
from green_community.stores.postgres import Base


class CommunityCategory(Enum):
    """Fixed set of community topics."""

    PLASTIC_MANAGEMENT = "plastic_management"
    TREE_PLANTATION = "tree_plantation"
    NATURAL_AWARENESS = "natural_awareness"
    WASTE_REDUCTION = "waste_reduction"
    SUSTAINABLE_LIVING = "sustainable_living"
    ECO_INNOVATION = "eco_innovation"
    WILDLIFE_CONSERVATION = "wildlife_conservation"
    WATER_CONSERVATION = "water_conservation"
    RENEWABLE_ENERGY = "renewable_energy"
    ORGANIC_FARMING = "organic_farming"
    CLIMATE_ACTION = "climate_action"
    BIODIVERSITY = "biodiversity"
    GREEN_TRANSPORT = "green_transport"
    ECO_EDUCATION = "eco_education"
    SUSTAINABLE_FASHION = "sustainable_fashion"
    GREEN_BUILDING = "green_building"
    FOOD_SUSTAINABILITY = "food_sustainability"
    OCEAN_CLEANUP = "ocean_cleanup"
    AIR_QUALITY = "air_quality"
    ZERO_WASTE = "zero_waste"
    PERMACULTURE = "permaculture"
    FOREST_CONSERVATION = "forest_conservation"
    GREEN_TECHNOLOGY = "green_technology"
    ENVIRONMENTAL_JUSTICE = "environmental_justice"
    CARBON_FOOTPRINT = "carbon_footprint"

    @property
    def label(self) -> str:
        """Human label, e.g. "Plastic Management"."""
        return " ".join(word.capitalize() for word in self.value.split("_"))


class Community(Base):
    """Topic-based community."""

    __tablename__ = "communities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    category: Mapped[CommunityCategory] = mapped_column(
        SAEnum(
            CommunityCategory,
            name="community_category",
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )
    icon_url: Mapped[str | None] = mapped_column(Text)
    cover_image_url: Mapped[str | None] = mapped_column(Text)

    member_count: Mapped[int] = mapped_column(Integer, default=0, index=True)
    created_by: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Community {self.name} ({self.category.value})>"


class CommunityMembership(Base):
    __tablename__ = "community_memberships"
    __table_args__ = (UniqueConstraint("community_id", "user_id", name="uq_community_memberships_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    community_id: Mapped[str] = mapped_column(ForeignKey("communities.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
