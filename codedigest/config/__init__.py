"""Configuration management for the Code Intelligence Digest."""

from .loader import (
    Config,
    get_category_config,
    get_period_config,
    load_config,
    save_config,
)
from .models import (
    BoostConfig,
    Category,
    CategoryConfig,
    ConfigModel,
    LLMConfig,
    Period,
    PeriodConfig,
    PostgresConfig,
    RankingConfig,
    ScoreWeights,
)

__all__ = [
    "BoostConfig",
    "Category",
    "CategoryConfig",
    "Config",
    "ConfigModel",
    "LLMConfig",
    "Period",
    "PeriodConfig",
    "PostgresConfig",
    "RankingConfig",
    "ScoreWeights",
    "get_category_config",
    "get_period_config",
    "load_config",
    "save_config",
]
