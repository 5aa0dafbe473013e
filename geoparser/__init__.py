"""
Toponym resolution package.

Resolves place-name mentions to gazetteer entries with a configurable
chain of ranking strategies (population, administrative level,
relationship graph weights, distance dispersion and seed propagation),
and provides a batch pipeline and a spaCy component around it.
"""

__all__ = [
    "PipelineConfig",
    "GeoparsingPipeline",
    "ToponymResolver",
]

__version__ = "0.1.0"

# Import spacy_components to register factories with spaCy
from geoparser import spacy_components  # noqa: F401

from .config import PipelineConfig  # noqa: E402
from .pipeline import GeoparsingPipeline  # noqa: E402
from .resolver import ToponymResolver  # noqa: E402
