"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add the source directory to the Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir / "src"))


@pytest.fixture
def mock_config():
    """Create a mock Config object with common parameters."""
    from ffneat.run.config import Config
    from ffneat.activations import Activation

    config = Mock(spec=Config)
    config.population_size = 10
    config.genome_minimum_ticks_alive = 2
    config.genome_compatibility_treshold = 0.1
    config.species_crossover_probability = 0.0
    config.network_inputs = 2
    config.network_hiddens = 3
    config.network_outputs = 1
    config.network_hidden_layers = 1
    config.network_hidden_activation = Activation.SIGMOID
    config.network_output_activation = Activation.SIGMOID
    config.network_bias = -1.0
    return config


@pytest.fixture
def rng():
    """Seeded random source, for reproducible tests."""
    import numpy as np
    return np.random.default_rng(42)
