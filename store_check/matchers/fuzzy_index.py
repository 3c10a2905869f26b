from typing import Iterable, List

from rapidfuzz import fuzz, process, utils

from store_check.models import MatchCandidate, MerchantRecord


def query_pattern_ratio(query: str, choice: str, score_cutoff=None, **kwargs) -> float:
    """
    Score `choice` with `query` as the search pattern. A choice shorter than
    the query is compared whole, so a short record name inside a longer query
    does not count as an exact hit.
    """
    if len(choice) >= len(query):
        return fuzz.partial_ratio(query, choice, score_cutoff=score_cutoff)
    return fuzz.ratio(query, choice, score_cutoff=score_cutoff)


class FuzzyIndex:
    """
    Fuzzy text index over one field of the registry.

    Scores are rapidfuzz ratios with the query as the pattern, turned into a
    distance in [0, 1] (0 = exact). A record is a hit when its distance is
    within `threshold`. Read-only after construction.
    """

    def __init__(
        self,
        records: Iterable[MerchantRecord],
        key: str,
        threshold: float,
        scorer=query_pattern_ratio,
    ):
        self.key = key
        self.threshold = threshold
        self._records = tuple(records)
        self._choices = [getattr(record, key) or "" for record in self._records]
        self._scorer = scorer
        # rapidfuzz cutoffs are inclusive similarities on a 0-100 scale
        self._score_cutoff = round((1.0 - threshold) * 100, 6)

    def search(self, query: str) -> List[MatchCandidate]:
        """
        Return every record within the distance threshold, best first.
        Ties keep registry order.
        """
        if not query or not query.strip() or not self._choices:
            return []

        hits = process.extract(
            query,
            self._choices,
            scorer=self._scorer,
            processor=utils.default_process,
            score_cutoff=self._score_cutoff,
            limit=None,
        )
        hits = sorted(hits, key=lambda hit: (-hit[1], hit[2]))

        return [
            MatchCandidate(
                record=self._records[index],
                raw_score=1.0 - score / 100.0,
                normalized_score=score / 100.0,
            )
            for _, score, index in hits
        ]
