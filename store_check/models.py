"""
Typed data models for the store matching pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True, eq=False)
class MerchantRecord:
    """Affiliated store loaded from the registry. Compared by identity."""
    id: str
    name: str
    category: str
    address: str
    embedding: Optional[Tuple[float, ...]] = None


@dataclass(frozen=True)
class ParsedInput:
    """Name and address extracted from pasted text. Empty string means not supplied."""
    name: str = ""
    address: str = ""

    @property
    def has_name(self) -> bool:
        return bool(self.name)

    @property
    def has_address(self) -> bool:
        return bool(self.address)

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.address)


@dataclass(frozen=True)
class MatchCandidate:
    """A registry record produced by a match strategy."""
    record: MerchantRecord
    raw_score: float  # Lexical: distance, lower is better. Semantic: similarity, higher is better.
    normalized_score: float  # Always higher is better


class MatchType(str, Enum):
    DEFINITIVE = "definitive"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


@dataclass(frozen=True)
class Definitive:
    """Exactly one store matched."""
    candidate: MatchCandidate
    match_type: ClassVar[MatchType] = MatchType.DEFINITIVE

    @property
    def candidates(self) -> Tuple[MatchCandidate, ...]:
        return (self.candidate,)

    @property
    def total(self) -> int:
        return 1

    @property
    def best_score(self) -> float:
        return self.candidate.normalized_score


@dataclass(frozen=True)
class Ambiguous:
    """Several stores matched; `candidates` is a bounded preview, `total` the full count."""
    candidates: Tuple[MatchCandidate, ...]
    total: int
    match_type: ClassVar[MatchType] = MatchType.AMBIGUOUS

    @property
    def best_score(self) -> float:
        return self.candidates[0].normalized_score


@dataclass(frozen=True)
class NoMatch:
    """No store matched."""
    candidates: Tuple[MatchCandidate, ...] = field(default=(), init=False)
    match_type: ClassVar[MatchType] = MatchType.NONE

    @property
    def total(self) -> int:
        return 0

    @property
    def best_score(self) -> None:
        return None


ClassificationResult = Union[Definitive, Ambiguous, NoMatch]


class OutcomeKind(str, Enum):
    RESULT = "result"
    CLIENT_ERROR = "client_error"
    CONFIG_ERROR = "config_error"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ResolutionOutcome:
    """What a resolution request produced: a classification or an error for the caller."""
    kind: OutcomeKind
    result: Optional[ClassificationResult] = None
    message: str = ""
