import os
import pytest
from typing import Dict, Any

import numpy as np

# =============================================================================
# Config Fixtures
# =============================================================================
# These fixtures load the shipped configuration files, ensuring tests validate
# the same code paths as production solves.


def _config_paths():
    test_dir = os.path.dirname(__file__)
    pkg_root = os.path.dirname(test_dir)
    config_dir = os.path.join(pkg_root, "config")
    return (
        os.path.join(config_dir, "axbycz_base.yaml"),
        os.path.join(config_dir, "presets"),
    )


@pytest.fixture
def base_config_path() -> str:
    """Path to config/axbycz_base.yaml."""
    base_path, _ = _config_paths()
    if not os.path.exists(base_path):
        pytest.skip("axbycz_base.yaml not found")
    return base_path


@pytest.fixture
def preset_path():
    """Factory returning the path of a named preset."""
    _, presets_dir = _config_paths()

    def _preset(name: str) -> str:
        path = os.path.join(presets_dir, f"{name}.yaml")
        if not os.path.exists(path):
            pytest.skip(f"preset {name}.yaml not found")
        return path

    return _preset


@pytest.fixture
def base_config(base_config_path) -> Dict[str, Any]:
    """Raw base configuration dict."""
    import yaml
    with open(base_config_path) as f:
        return yaml.safe_load(f) or {}


# =============================================================================
# Test Utility Fixtures
# =============================================================================

@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def ground_truth():
    """Fixed ground-truth (X, Y, Z)."""
    from axbycz_calib.common.geometry import se3_exp
    X = se3_exp(np.array([0.3, -0.2, 0.5, 0.1, 0.2, -0.3]))
    Y = se3_exp(np.array([-0.4, 0.6, 0.1, 0.5, -0.1, 0.2]))
    Z = se3_exp(np.array([0.2, 0.3, -0.7, -0.2, 0.4, 0.1]))
    return X, Y, Z


@pytest.fixture
def perturbation():
    """Anisotropic perturbation (mean, cov) in se(3)."""
    mean = np.zeros(6)
    cov = np.diag([0.25, 0.12, 0.06, 0.04, 0.03, 0.02])
    return mean, cov
