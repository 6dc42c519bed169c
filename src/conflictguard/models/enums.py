"""
Enumerations for the document / entity / conflict graph.
"""

from enum import Enum


class _LenientEnum(str, Enum):
    """String enum that also accepts case and separator variants of its values."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalized = value.strip().upper().replace(" ", "_").replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class DocumentType(_LenientEnum):
    """Classification of an ingested document."""

    CONTRACT = "CONTRACT"
    TERMS_AND_CONDITIONS = "TERMS_AND_CONDITIONS"
    INTERNAL_DIRECTIVE = "INTERNAL_DIRECTIVE"
    REGULATION = "REGULATION"
    OTHER = "OTHER"


class EntityType(_LenientEnum):
    """Classification of an extracted entity."""

    TIME_PERIOD = "TIME_PERIOD"
    MONETARY_VALUE = "MONETARY_VALUE"
    PARTY = "PARTY"
    OBLIGATION = "OBLIGATION"
    RIGHT = "RIGHT"
    CONDITION = "CONDITION"
    PENALTY = "PENALTY"
    CLAUSE = "CLAUSE"


class RelationshipType(_LenientEnum):
    """Type carried on an Entity -[RELATES_TO]-> Entity edge."""

    DEFINES = "DEFINES"
    REFERENCES = "REFERENCES"
    OVERRIDES = "OVERRIDES"
    CONFLICTS_WITH = "CONFLICTS_WITH"
    DEPENDS_ON = "DEPENDS_ON"


class ConflictSeverity(_LenientEnum):
    """
    Ordered conflict severity.

    Comparisons follow declaration order (LOW < MEDIUM < HIGH < CRITICAL)
    rather than string order.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):
        if isinstance(other, ConflictSeverity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, ConflictSeverity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, ConflictSeverity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, ConflictSeverity):
            return self.rank >= other.rank
        return NotImplemented
