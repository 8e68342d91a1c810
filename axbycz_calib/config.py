"""
Configuration classes and loaders for AXB = YCZ solver parameters.

Organizes parameters into logical groups and bridges:
1. YAML configuration files (config/axbycz_base.yaml, config/presets/*.yaml)
2. Pydantic validation models (common/param_models.py)
3. The dataclass groups consumed by the operators and solvers

Usage:
    from axbycz_calib.config import load_solver_config

    config = load_solver_config(
        "config/axbycz_base.yaml",
        preset_path="config/presets/prob2.yaml",
        overrides={"translation_weight": 1.6},
    )
"""

from __future__ import annotations

import copy
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from axbycz_calib import constants
from axbycz_calib.common.param_models import SolverParams

# Top-level YAML section holding the flat solver parameters
CONFIG_SECTION = "axbycz_solver"


@dataclass(frozen=True)
class MeanConfig:
    """Karcher mean iteration configuration."""
    tolerance: float = constants.MEAN_TOLERANCE
    max_iterations: int = constants.MEAN_MAX_ITERATIONS


@dataclass(frozen=True)
class HypothesisConfig:
    """Noise-floor configuration for hypothesis generation."""
    noise_std_a: float = constants.DEFAULT_NOISE_STD
    noise_std_b: float = constants.DEFAULT_NOISE_STD
    subtract_noise_floor: bool = constants.DEFAULT_SUBTRACT_NOISE_FLOOR


@dataclass(frozen=True)
class CostConfig:
    """Candidate selection cost configuration."""
    translation_weight: float = constants.TRANSLATION_WEIGHT_PROB1


@dataclass(frozen=True)
class SolverConfig:
    """Complete solver configuration."""
    mean: MeanConfig = field(default_factory=MeanConfig)
    hypothesis: HypothesisConfig = field(default_factory=HypothesisConfig)
    cost: CostConfig = field(default_factory=CostConfig)

    @classmethod
    def prob1_defaults(cls) -> "SolverConfig":
        return cls(cost=CostConfig(translation_weight=constants.TRANSLATION_WEIGHT_PROB1))

    @classmethod
    def prob2_defaults(cls) -> "SolverConfig":
        return cls(cost=CostConfig(translation_weight=constants.TRANSLATION_WEIGHT_PROB2))

    @classmethod
    def from_params(cls, params: SolverParams) -> "SolverConfig":
        """Create configuration from validated parameters."""
        return cls(
            mean=MeanConfig(
                tolerance=float(params.mean_tolerance),
                max_iterations=int(params.mean_max_iterations),
            ),
            hypothesis=HypothesisConfig(
                noise_std_a=float(params.noise_std_a),
                noise_std_b=float(params.noise_std_b),
                subtract_noise_floor=bool(params.subtract_noise_floor),
            ),
            cost=CostConfig(
                translation_weight=float(params.translation_weight),
            ),
        )


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries (later configs override earlier).

    Args:
        configs: Variable number of config dicts to merge

    Returns:
        Merged configuration dictionary
    """
    result: Dict[str, Any] = {}
    for config in configs:
        if config:
            _deep_merge(result, copy.deepcopy(config))
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override dict into base dict (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_solver_params(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SolverParams:
    """
    Load and validate solver parameters from YAML files.

    Args:
        base_path: Path to base configuration YAML (axbycz_base.yaml)
        preset_path: Optional path to preset override YAML (e.g., presets/prob2.yaml)
        overrides: Optional dictionary of parameter overrides

    Returns:
        Validated SolverParams model

    Raises:
        ValidationError: If configuration is invalid
    """
    base_config: Dict[str, Any] = {}
    if base_path:
        base_config = load_yaml_config(base_path).get(CONFIG_SECTION, {})

    preset_config: Dict[str, Any] = {}
    if preset_path:
        preset_config = load_yaml_config(preset_path).get(CONFIG_SECTION, {})

    # Merge configs: base <- preset <- overrides
    merged = merge_configs(base_config, preset_config, overrides or {})
    return SolverParams(**merged)


def load_solver_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SolverConfig:
    """Load, validate and group solver parameters (see load_solver_params)."""
    return SolverConfig.from_params(load_solver_params(base_path, preset_path, overrides))


# Source checkout keeps config/ next to the package; setup.py data_files
# install it under <prefix>/share/axbycz_calib/config.
SOURCE_CONFIG_DIR = Path(__file__).parent.parent / "config"
INSTALLED_CONFIG_DIR = Path(sys.prefix) / "share" / "axbycz_calib" / "config"


def get_default_config_paths() -> tuple[Path, Path]:
    """
    Get default paths to the shipped configuration files.

    The source-tree config/ directory is used when it holds the base file;
    otherwise the data_files location of an installed package is returned.

    Returns:
        Tuple of (base_config_path, presets_dir_path)
    """
    config_dir = SOURCE_CONFIG_DIR
    if not (config_dir / "axbycz_base.yaml").exists():
        config_dir = INSTALLED_CONFIG_DIR
    return config_dir / "axbycz_base.yaml", config_dir / "presets"


def get_preset_path(preset_name: str) -> Optional[Path]:
    """
    Get path to a preset configuration file.

    Args:
        preset_name: Name of preset (e.g., "prob2")

    Returns:
        Path to preset file, or None if not found
    """
    _, presets_dir = get_default_config_paths()
    preset_path = presets_dir / f"{preset_name}.yaml"
    return preset_path if preset_path.exists() else None
