from dataclasses import dataclass, field
from typing import Dict, List, Optional
from loguru import logger

from store_check.config import (
    ADDRESS_DISTANCE_THRESHOLD,
    NAME_DISTANCE_THRESHOLD,
    RELAXED_ADDRESS_DISTANCE_THRESHOLD,
    RELAXED_NAME_DISTANCE_THRESHOLD,
)
from store_check.input_parser import extract_district
from store_check.matchers.combinator import combine_matches
from store_check.matchers.fuzzy_index import FuzzyIndex
from store_check.models import MatchCandidate, ParsedInput
from store_check.registry import StoreRegistry


@dataclass(frozen=True)
class LexicalConfig:
    """Named threshold set for the lexical pipeline."""
    name: str
    name_threshold: float
    address_threshold: float
    attach_store_alias: bool = False


DEFAULT_LEXICAL_CONFIG = LexicalConfig(
    name="default",
    name_threshold=NAME_DISTANCE_THRESHOLD,
    address_threshold=ADDRESS_DISTANCE_THRESHOLD,
)
RELAXED_LEXICAL_CONFIG = LexicalConfig(
    name="relaxed",
    name_threshold=RELAXED_NAME_DISTANCE_THRESHOLD,
    address_threshold=RELAXED_ADDRESS_DISTANCE_THRESHOLD,
    attach_store_alias=True,
)
LEXICAL_CONFIGS: Dict[str, LexicalConfig] = {
    config.name: config for config in (DEFAULT_LEXICAL_CONFIG, RELAXED_LEXICAL_CONFIG)
}


@dataclass
class LexicalMatches:
    """Independent name and address match sets for one input."""
    name_matches: List[MatchCandidate] = field(default_factory=list)
    address_matches: List[MatchCandidate] = field(default_factory=list)


def filter_by_district(
    candidates: List[MatchCandidate], district: Optional[str]
) -> List[MatchCandidate]:
    """
    Keep only candidates whose own address is in exactly the given district.
    Stores with a different district or none at all are dropped.
    """
    if not district:
        return list(candidates)
    return [c for c in candidates if extract_district(c.record.address) == district]


class LexicalMatchStrategy:
    """
    Fuzzy search over the registry by name and by address independently.
    Indexes are built once from the registry snapshot and only read afterwards.
    """

    def __init__(self, registry: StoreRegistry, config: LexicalConfig = DEFAULT_LEXICAL_CONFIG):
        self.registry = registry
        self.config = config
        self.name_index = FuzzyIndex(registry.records, "name", config.name_threshold)
        self.address_index = FuzzyIndex(registry.records, "address", config.address_threshold)

    def search(self, parsed: ParsedInput) -> LexicalMatches:
        """
        Run the name and address searches for whichever fields were supplied.

        Args:
            parsed (ParsedInput): Extracted name and address.

        Returns:
            LexicalMatches: Name and address match sets, address matches already district filtered.
        """
        matches = LexicalMatches()

        if parsed.has_name:
            matches.name_matches = self.name_index.search(parsed.name)
            logger.debug(f"🔤 Name '{parsed.name}' → {len(matches.name_matches)} matches")

        if parsed.has_address:
            address_matches = self.address_index.search(parsed.address)
            district = extract_district(parsed.address)
            if district:
                filtered = filter_by_district(address_matches, district)
                logger.debug(
                    f"🗺️ District '{district}' kept {len(filtered)}/{len(address_matches)} address matches"
                )
                address_matches = filtered
            matches.address_matches = address_matches
            logger.debug(f"📍 Address '{parsed.address}' → {len(address_matches)} matches")

        return matches

    def match(self, parsed: ParsedInput) -> List[MatchCandidate]:
        """Search both fields and merge them with AND/OR semantics."""
        matches = self.search(parsed)
        return combine_matches(
            matches.name_matches,
            matches.address_matches,
            has_name=parsed.has_name,
            has_address=parsed.has_address,
        )

    def search_entries(self, query: str) -> List[MatchCandidate]:
        """Free query lookup: stores whose name or address fuzzy matches the query."""
        query = (query or "").strip()
        if not query:
            return []
        return combine_matches(
            self.name_index.search(query),
            self.address_index.search(query),
            has_name=True,
            has_address=False,
        )
