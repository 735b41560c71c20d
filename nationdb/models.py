"""
nationdb.models — Nation domain model.

Enumerations and frozen pydantic models for a Nation and its five
sub-records. The wire format (catalog JSON and payloads) uses camelCase
keys; Python attributes are snake_case.

Design contract:
    - Models are immutable. Sequences are tuples.
    - Models carry types only. Range and presence rules live in
      nationdb.validator so that an invalid record can be audited
      in full instead of failing on the first bad field.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class GovernmentType(str, Enum):
    DEMOCRACY = "democracy"
    AUTOCRACY = "autocracy"
    MONARCHY = "monarchy"
    THEOCRACY = "theocracy"
    COMMUNIST = "communist"
    MILITARY_JUNTA = "military_junta"
    FEDERATION = "federation"
    REPUBLIC = "republic"
    PARLIAMENTARY = "parliamentary"
    PRESIDENTIAL = "presidential"


class EconomicSystem(str, Enum):
    CAPITALIST = "capitalist"
    SOCIALIST = "socialist"
    MIXED = "mixed"
    COMMAND = "command"
    TRADITIONAL = "traditional"


class MilitaryPosture(str, Enum):
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"
    EXPANSIONIST = "expansionist"
    ISOLATIONIST = "isolationist"


class DiplomaticStance(str, Enum):
    ALLIED = "allied"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    UNFRIENDLY = "unfriendly"
    HOSTILE = "hostile"


class Region(str, Enum):
    NORTH_AMERICA = "north_america"
    SOUTH_AMERICA = "south_america"
    EUROPE = "europe"
    AFRICA = "africa"
    MIDDLE_EAST = "middle_east"
    ASIA = "asia"
    OCEANIA = "oceania"
    CENTRAL_AMERICA = "central_america"


class AllianceAffiliation(str, Enum):
    NATO = "NATO"
    EU = "EU"
    AFRICAN_UNION = "African Union"
    ASEAN = "ASEAN"
    ARAB_LEAGUE = "Arab League"
    BRICS = "BRICS"
    G7 = "G7"
    G20 = "G20"
    UNALIGNED = "Unaligned"


def enum_values(enum_cls: type[Enum]) -> frozenset[str]:
    """Wire values of an enumeration."""
    return frozenset(member.value for member in enum_cls)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class _Record(BaseModel):
    """Frozen, camelCase-aliased base for every catalog record."""

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
        "extra": "ignore",
    }


class Coordinates(_Record):
    latitude: float
    longitude: float


class Geography(_Record):
    region: Region
    area: float
    land_borders: tuple[str, ...] = ()
    coastline: float
    capital: str
    major_cities: tuple[str, ...]
    coordinates: Coordinates


class Economy(_Record):
    gdp: float
    gdp_growth_rate: float
    unemployment: float
    inflation: float
    public_debt: float
    trade_balance: float
    economic_system: EconomicSystem
    currency: str
    major_industries: tuple[str, ...]


class PopulationShare(_Record):
    """One ethnic group or religion with its share of the population."""

    name: str
    percentage: float


class Demographics(_Record):
    population: int
    population_growth_rate: float
    median_age: float
    urbanization_rate: float
    literacy_rate: float
    life_expectancy: float
    ethnic_groups: tuple[PopulationShare, ...] = ()
    languages: tuple[str, ...]
    religions: tuple[PopulationShare, ...] = ()


class Military(_Record):
    active_duty: int
    reserves: int
    defense: float
    defense_as_percent_gdp: float = Field(alias="defenseAsPercentGDP")
    nuclear_weapons: bool
    military_posture: MilitaryPosture
    major_weapon_systems: tuple[str, ...] = ()


class DiplomaticRelation(_Record):
    """One nation's recorded view of another. Owned by the origin nation."""

    nation_code: str
    stance: DiplomaticStance
    trade_agreement: bool
    defense_pact: bool
    notes: Optional[str] = None


class Diplomacy(_Record):
    alliances: tuple[AllianceAffiliation, ...] = ()
    relations: tuple[DiplomaticRelation, ...] = ()
    soft_power: float
    diplomatic_missions: int
    un_security_council_member: bool


class Nation(_Record):
    code: str
    name: str
    official_name: str
    flag: str
    government_type: GovernmentType
    head_of_state: str
    head_of_government: str
    founded: Optional[int] = None
    geography: Geography
    economy: Economy
    demographics: Demographics
    military: Military
    diplomacy: Diplomacy
    stability: float
    corruption: float
    freedom_index: float
    last_updated: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape. Unset optionals are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
