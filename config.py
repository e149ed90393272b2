"""
Central configuration for search depths, weight tables and logging.
Pydantic models keep every tunable validated; weight tables and search
configs are frozen so a running search can never change them.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, ClassVar, Dict, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


GameName = Literal["drop", "flip"]
SettingsDict = Dict[str, Any]


# ============================
# Weight tables
# ============================
class DropWeights(BaseModel):
    """Weights for the drop (gravity) game evaluator.

    Signs are part of the table: opponent terms and penalties are negative.
    """

    model_config = ConfigDict(frozen=True)

    FEATURES: ClassVar[Tuple[str, ...]] = (
        "own_four", "own_three", "own_two",
        "opp_four", "opp_three", "opp_two",
        "center", "seven_formation", "ell_formation",
        "connections", "dangerous_gap", "height",
    )

    own_four: float = Field(default=1_000_000.0, ge=0, description="Window fully owned")
    own_three: float = Field(default=1000.0, ge=0, description="Three own + one empty")
    own_two: float = Field(default=100.0, ge=0, description="Two own + two empty")
    opp_four: float = Field(default=-1_000_000.0, le=0, description="Window fully owned by opponent")
    opp_three: float = Field(default=-500.0, le=0, description="Opponent three to block")
    opp_two: float = Field(default=-50.0, le=0, description="Opponent two to block")
    center: float = Field(default=8.0, description="Center column token, per unit of row depth")
    seven_formation: float = Field(default=150.0, description="4-token '7' shaped cluster")
    ell_formation: float = Field(default=30.0, description="3-token L shaped cluster")
    connections: float = Field(default=20.0, description="Per axis where an own token has a neighbour run")
    dangerous_gap: float = Field(default=-100.0, le=0, description="Playable cell on top of own token that wins for the opponent")
    height: float = Field(default=-5.0, le=0, description="Per unit of stacking height, early game only")

    height_penalty_until: int = Field(default=20, ge=0, description="Stone count after which height is ignored")

    def vector(self) -> np.ndarray:
        """Weights in FEATURES order."""
        return np.array([getattr(self, name) for name in self.FEATURES], dtype=np.float64)


class FlipWeights(BaseModel):
    """Weights for the flip (Othello-style) game evaluator."""

    model_config = ConfigDict(frozen=True)

    FEATURES: ClassVar[Tuple[str, ...]] = (
        "corner", "edge", "corner_adjacent", "center", "parity",
        "chain", "mobility", "anticipation", "trap",
        "minimize", "max_pieces_end",
    )

    corner: float = Field(default=2000.0, description="Corner disc difference")
    edge: float = Field(default=200.0, description="Edge disc difference")
    corner_adjacent: float = Field(default=-800.0, le=0, description="Disc difference next to empty corners")
    center: float = Field(default=100.0, description="Center-square disc difference")
    parity: float = Field(default=300.0, description="Even/odd empty-count bonus")
    chain: float = Field(default=60.0, description="Same-colour neighbour difference")
    mobility: float = Field(default=50.0, description="Own legal-move count")
    anticipation: float = Field(default=-40.0, le=0, description="Opponent legal-move count")
    trap: float = Field(default=-1000.0, le=0, description="Corner trap detected")
    minimize: float = Field(default=-80.0, le=0, description="Own disc count before the end game")
    max_pieces_end: float = Field(default=100.0, ge=0, description="Own disc count in the end game")

    endgame_empties: int = Field(default=10, ge=0, le=64, description="Empty cells at which the end game starts")
    trap_diagonal: bool = Field(default=True, description="Count the diagonal X-square in the trap pattern")

    def vector(self) -> np.ndarray:
        """Weights in FEATURES order."""
        return np.array([getattr(self, name) for name in self.FEATURES], dtype=np.float64)


WeightTable = Union[DropWeights, FlipWeights]

_WEIGHT_TABLES: Dict[str, WeightTable] = {
    "drop.default": DropWeights(),
    "drop.aggressive": DropWeights(own_three=1500.0, own_two=150.0, opp_three=-400.0, opp_two=-40.0),
    "flip.default": FlipWeights(),
    "flip.mobility": FlipWeights(mobility=120.0, anticipation=-100.0, chain=20.0, edge=120.0),
}


def get_weight_table(name: str) -> WeightTable:
    """Look up a named weight table."""
    try:
        return _WEIGHT_TABLES[name]
    except KeyError:
        raise KeyError(f"Unknown weight table '{name}'; known: {sorted(_WEIGHT_TABLES)}") from None


def register_weight_table(name: str, table: WeightTable) -> None:
    """Register a new named weight table; existing names are never replaced."""
    if not name.startswith(("drop.", "flip.")):
        raise ValueError("Weight table names must start with 'drop.' or 'flip.'")
    expected = DropWeights if name.startswith("drop.") else FlipWeights
    if not isinstance(table, expected):
        raise TypeError(f"'{name}' needs a {expected.__name__}, got {type(table).__name__}")
    if name in _WEIGHT_TABLES:
        raise ValueError(f"Weight table '{name}' is already registered")
    _WEIGHT_TABLES[name] = table


def weight_table_names() -> Tuple[str, ...]:
    return tuple(sorted(_WEIGHT_TABLES))


def load_weight_tables(filepath: str) -> Tuple[str, ...]:
    """Load weight tables from a JSON file mapping names to field overrides."""
    with open(filepath, 'r') as f:
        data: Dict[str, Dict[str, Any]] = json.load(f)

    loaded = []
    for name, fields in data.items():
        model = DropWeights if name.startswith("drop.") else FlipWeights
        register_weight_table(name, model(**fields))
        loaded.append(name)
    return tuple(loaded)


# ============================
# Settings
# ============================
class EngineSettings(BaseModel):
    """Search depth schedule and selector behaviour."""

    drop_early_depth: int = Field(default=3, ge=1, le=12, description="Drop depth below drop_mid_stones")
    drop_mid_depth: int = Field(default=4, ge=1, le=12, description="Drop depth up to drop_late_stones")
    drop_late_depth: int = Field(default=5, ge=1, le=12, description="Drop depth after drop_late_stones")
    drop_mid_stones: int = Field(default=10, ge=0, le=42, description="Stones placed where the midgame starts")
    drop_late_stones: int = Field(default=20, ge=0, le=42, description="Stones placed where the late game starts")
    drop_max_depth: int = Field(default=6, ge=1, le=12, description="Hard ceiling for the drop game")
    flip_depth: int = Field(default=4, ge=1, le=10, description="Fixed flip game depth")
    flip_max_depth: int = Field(default=6, ge=1, le=10, description="Hard ceiling for the flip game")
    alpha_beta: bool = Field(default=True, description="Enable alpha-beta pruning")
    safety_filter: bool = Field(default=True, description="Drop moves that hand the opponent a win")
    opening_center_stones: int = Field(default=1, ge=0, le=42, description="Play the center column while at most this many stones are down")
    drop_weights: str = Field(default="drop.default", description="Default drop weight table")
    flip_weights: str = Field(default="flip.default", description="Default flip weight table")
    fallback_seed: Optional[int] = Field(default=None, description="Seed for the fault-path random move")

    @field_validator('drop_early_depth', 'drop_mid_depth', 'drop_late_depth', 'drop_max_depth',
                     'flip_depth', 'flip_max_depth', mode='before')
    @classmethod
    def validate_int_fields(cls, v):
        return int(v)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_to_file: bool = Field(default=False, description="Write logs to file")
    log_file_path: str = Field(default="versus.log", description="Log file path")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
        v_upper = v.upper() if isinstance(v, str) else str(v).upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper


class VersusConfig(BaseModel):
    """Main configuration model."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    version: str = Field(default="1.0.0", description="Configuration version")
    config_file: Optional[str] = Field(default=None, description="Path to config file")

    @classmethod
    def from_env(cls) -> 'VersusConfig':
        """Create configuration from environment variables."""
        seed = os.getenv('VERSUS_FALLBACK_SEED')
        return cls(
            engine=EngineSettings(
                drop_max_depth=int(os.getenv('VERSUS_DROP_MAX_DEPTH', '6')),
                flip_depth=int(os.getenv('VERSUS_FLIP_DEPTH', '4')),
                alpha_beta=os.getenv('VERSUS_ALPHA_BETA', 'true').lower() == 'true',
                safety_filter=os.getenv('VERSUS_SAFETY_FILTER', 'true').lower() == 'true',
                drop_weights=os.getenv('VERSUS_DROP_WEIGHTS', 'drop.default'),
                flip_weights=os.getenv('VERSUS_FLIP_WEIGHTS', 'flip.default'),
                fallback_seed=int(seed) if seed else None,
            ),
            logging=LoggingSettings(
                log_level=os.getenv('VERSUS_LOG_LEVEL', 'INFO'),
                log_to_file=os.getenv('VERSUS_LOG_FILE', 'false').lower() == 'true',
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'engine': self.engine.model_dump(),
            'logging': self.logging.model_dump(),
            'version': self.version,
            'config_file': self.config_file,
        }

    def save_to_file(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        config_dict = self.to_dict()
        config_dict['config_file'] = filepath

        with open(filepath, 'w') as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str) -> 'VersusConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        return cls(
            engine=EngineSettings(**data.get('engine', {})),
            logging=LoggingSettings(**data.get('logging', {})),
            version=data.get('version', '1.0.0'),
            config_file=filepath,
        )


# Global configuration instance
_config: Optional[VersusConfig] = None


def get_config() -> VersusConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = VersusConfig.from_env()
    return _config


def load_config_from_file(filepath: str) -> VersusConfig:
    """Load configuration from file and update global instance."""
    global _config
    _config = VersusConfig.load_from_file(filepath)
    return _config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _config
    _config = None


def get_engine_settings() -> EngineSettings:
    """Get engine configuration settings."""
    return get_config().engine


def get_logging_settings() -> LoggingSettings:
    """Get logging configuration settings."""
    return get_config().logging


# ============================
# Per-call search configuration
# ============================
class SearchConfig(BaseModel):
    """Immutable inputs of one select_move call.

    ``depth`` pins a fixed depth; when it is None the drop game derives its
    depth from the number of stones on the board using ``phase_depths`` and
    ``phase_stones``. Every depth is clamped to ``max_depth``.
    """

    model_config = ConfigDict(frozen=True)

    game: GameName = "drop"
    depth: Optional[int] = Field(default=None, ge=1, le=12)
    max_depth: int = Field(default=6, ge=1, le=12)
    phase_depths: Tuple[int, int, int] = (3, 4, 5)
    phase_stones: Tuple[int, int] = (10, 20)
    weights: Optional[str] = None
    alpha_beta: bool = True
    safety_filter: bool = True
    opening_center_stones: int = Field(default=1, ge=0)

    @field_validator('phase_depths')
    @classmethod
    def validate_phase_depths(cls, v):
        if any(d < 1 for d in v):
            raise ValueError("phase depths must be >= 1")
        return v

    @field_validator('weights')
    @classmethod
    def validate_weights(cls, v):
        if v is not None and v not in _WEIGHT_TABLES:
            raise ValueError(f"Unknown weight table '{v}'")
        return v

    @model_validator(mode='after')
    def validate_weights_match_game(self) -> 'SearchConfig':
        if self.weights is not None and not self.weights.startswith(self.game + "."):
            raise ValueError(f"Weight table '{self.weights}' does not belong to the {self.game} game")
        return self

    @classmethod
    def for_game(cls, game: GameName, **overrides: Any) -> 'SearchConfig':
        """Build a config for ``game`` from the global engine settings."""
        settings = get_engine_settings()
        if game == "drop":
            base: SettingsDict = dict(
                max_depth=settings.drop_max_depth,
                phase_depths=(settings.drop_early_depth, settings.drop_mid_depth, settings.drop_late_depth),
                phase_stones=(settings.drop_mid_stones, settings.drop_late_stones),
                weights=settings.drop_weights,
            )
        else:
            base = dict(
                depth=settings.flip_depth,
                max_depth=settings.flip_max_depth,
                weights=settings.flip_weights,
            )
        base.update(
            game=game,
            alpha_beta=settings.alpha_beta,
            safety_filter=settings.safety_filter,
            opening_center_stones=settings.opening_center_stones,
        )
        base.update(overrides)
        return cls(**base)

    def weight_table(self) -> WeightTable:
        """Resolve the named weight table, defaulting per game."""
        name = self.weights or f"{self.game}.default"
        return get_weight_table(name)


def setup_logging() -> None:
    """Configure root logging once, at the configured log level."""
    if getattr(setup_logging, "_configured", False):
        return
    settings = get_logging_settings()
    level: int = getattr(logging, settings.log_level, logging.INFO)
    handlers = None
    if settings.log_to_file:
        handlers = [logging.StreamHandler(), logging.FileHandler(settings.log_file_path)]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )
    setup_logging._configured = True  # type: ignore[attr-defined]
