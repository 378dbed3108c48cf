from .loader import load_config, load_config_with_overrides
from .schema import (
    BlastConfig,
    CountingConfig,
    CountPolicy,
    CoverageRepresentation,
    DiscoveryConfig,
    GffConfig,
    PipelineConfig,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "DiscoveryConfig",
    "BlastConfig",
    "GffConfig",
    "CountingConfig",
    "CountPolicy",
    "CoverageRepresentation",
]
