from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

# Relationship type holding co-occurrence weights between places
DEFAULT_RELATIONSHIP_TYPE = "cooccurrence"
# Relationship type linking a place to its administrative parent
DEFAULT_HIERARCHY_TYPE = "subdivision"
DEFAULT_POPULATION_PROPERTY = "population"
DEFAULT_NAME_PROPERTY = "name"
DEFAULT_ADMIN_ROOT_TYPE = "administrative_division"
# Weight multiplier for edges touching a substituted (ancestor) place
DEFAULT_SUBSTITUTION_PENALTY = 0.01
DEFAULT_CHAIN = "relationship_weight"

SCOPES = ("document", "sentence")


@dataclass
class ComponentConfig:
    """Generic component configuration."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolverSettings:
    """Gazetteer vocabulary and tuning shared by all strategies."""

    relationship_type: str = DEFAULT_RELATIONSHIP_TYPE
    hierarchy_type: str = DEFAULT_HIERARCHY_TYPE
    population_property: str = DEFAULT_POPULATION_PROPERTY
    name_property: str = DEFAULT_NAME_PROPERTY
    admin_root_type: Optional[str] = DEFAULT_ADMIN_ROOT_TYPE
    substitution_penalty: float = DEFAULT_SUBSTITUTION_PENALTY

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "ResolverSettings":
        data = data or {}
        known = {f.name for f in fields(ResolverSettings)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown resolver settings: {sorted(unknown)}")
        return ResolverSettings(**data)


@dataclass
class PipelineConfig:
    """Top-level pipeline configuration.

    ``chain`` is either the name of a preset chain or an explicit list of
    strategy links.
    """

    gazetteer: ComponentConfig
    loader: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="jsonl"))
    chain: Union[str, List[ComponentConfig]] = DEFAULT_CHAIN
    settings: ResolverSettings = field(default_factory=ResolverSettings)
    scope: str = "document"
    workers: int = 1

    def __post_init__(self) -> None:
        if self.scope not in SCOPES:
            raise ValueError(f"Unknown scope '{self.scope}', expected one of {SCOPES}")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PipelineConfig":
        def build(entry: Dict[str, Any]) -> ComponentConfig:
            return ComponentConfig(name=entry["name"], params=entry.get("params", {}))

        if not data.get("gazetteer"):
            raise ValueError("A 'gazetteer' section is required.")

        chain_data = data.get("chain", DEFAULT_CHAIN)
        if isinstance(chain_data, str):
            chain: Union[str, List[ComponentConfig]] = chain_data
        else:
            chain = [build(link) for link in chain_data]

        return PipelineConfig(
            gazetteer=build(data["gazetteer"]),
            loader=build(data["loader"]) if data.get("loader") else ComponentConfig(name="jsonl"),
            chain=chain,
            settings=ResolverSettings.from_dict(data.get("settings")),
            scope=data.get("scope", "document"),
            workers=data.get("workers", 1),
        )
