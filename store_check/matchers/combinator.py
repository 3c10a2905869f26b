from itertools import chain
from typing import List, Sequence

from store_check.models import MatchCandidate


def combine_matches(
    name_matches: Sequence[MatchCandidate],
    address_matches: Sequence[MatchCandidate],
    has_name: bool,
    has_address: bool,
) -> List[MatchCandidate]:
    """
    Merge the name and address match sets into one candidate list.

    When both a name and an address were supplied the store must appear in both
    sets (AND), in name order. Otherwise the sets are concatenated, names first,
    keeping the first occurrence of each store (OR).

    Args:
        name_matches (Sequence[MatchCandidate]): Ranked name matches.
        address_matches (Sequence[MatchCandidate]): Ranked address matches.
        has_name (bool): Whether a name was supplied.
        has_address (bool): Whether an address was supplied.

    Returns:
        List[MatchCandidate]: Merged candidates.
    """
    if has_name and has_address:
        address_records = {candidate.record for candidate in address_matches}
        return [c for c in name_matches if c.record in address_records]

    merged: List[MatchCandidate] = []
    seen = set()
    for candidate in chain(name_matches, address_matches):
        if candidate.record in seen:
            continue
        seen.add(candidate.record)
        merged.append(candidate)
    return merged
