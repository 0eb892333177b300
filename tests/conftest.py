"""Shared fixtures for the Concrete Staircase Configurator test suite."""
import sys
import os
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from staircase_profile import DEFAULT_CONFIG, StaircaseSpec


@pytest.fixture
def default_config():
    """Returns a copy of the default configuration (no landings)."""
    config = DEFAULT_CONFIG.copy()
    config["landings"] = []
    return config


@pytest.fixture
def default_spec(default_config):
    return StaircaseSpec.from_config(default_config)


@pytest.fixture
def landing_config():
    """Ten steps with one deep landing half way up."""
    return {
        "total_height": 200.0,
        "width": 100.0,
        "num_steps": 10,
        "step_depth": 30.0,
        "slab_thickness": 15.0,
        "landings": [{"step_index": 5, "depth": 100.0}],
    }
