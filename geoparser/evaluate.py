"""
Evaluation of resolved documents against gold annotations.

Works on the dictionaries produced by ``GeoparsingPipeline`` where
entities may carry ``gold_id`` and/or ``gold_coordinate``. The distance
threshold defaults to 161 km (100 miles), the usual cut-off for
geoparsing accuracy.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from geoparser.utils.geo import haversine_km

logger = logging.getLogger(__name__)

DEFAULT_MAX_ERROR_KM = 161.0


@dataclass
class EvaluationReport:
    total: int = 0
    resolved: int = 0
    exact_matches: int = 0
    # Mentions with both a gold and a predicted coordinate
    measured: int = 0
    within_threshold: int = 0
    mean_error_km: Optional[float] = None
    accuracy: Optional[float] = None
    max_error_km: float = DEFAULT_MAX_ERROR_KM

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coordinate(value: Any) -> Optional[tuple]:
    if not value:
        return None
    try:
        lat, lon = value
        return float(lat), float(lon)
    except (TypeError, ValueError):
        return None


def evaluate(
    results: Iterable[Dict[str, Any]], max_error_km: float = DEFAULT_MAX_ERROR_KM
) -> EvaluationReport:
    """Compare predicted places to gold annotations.

    ``accuracy`` is the share of mentions with a gold coordinate whose
    prediction lies within ``max_error_km``; unresolved mentions count
    as misses.
    """
    report = EvaluationReport(max_error_km=max_error_km)
    errors: List[float] = []
    with_gold_coordinate = 0

    for result in results:
        for entity in result.get("entities", []):
            gold_id = entity.get("gold_id")
            gold_coordinate = _coordinate(entity.get("gold_coordinate"))
            if gold_id is None and gold_coordinate is None:
                continue
            report.total += 1
            if entity.get("place_id") is not None:
                report.resolved += 1
            if gold_id is not None and str(gold_id) == entity.get("place_id"):
                report.exact_matches += 1
            if gold_coordinate is None:
                continue
            with_gold_coordinate += 1
            predicted = _coordinate(entity.get("coordinate"))
            if predicted is None:
                continue
            error = haversine_km(gold_coordinate, predicted)
            errors.append(error)
            if error <= max_error_km:
                report.within_threshold += 1

    report.measured = len(errors)
    if errors:
        report.mean_error_km = sum(errors) / len(errors)
    if with_gold_coordinate:
        report.accuracy = report.within_threshold / with_gold_coordinate
    logger.info(
        f"Evaluated {report.total} gold mentions: {report.exact_matches} exact, "
        f"accuracy@{max_error_km:g}km={report.accuracy}"
    )
    return report
