"""
ffneat - steady-state NEAT evolution of packed feed-forward networks.

A population of fixed-topology feed-forward networks is evolved one genome at a
time: every epoch the weakest genome that has lived long enough is replaced by a
clone of a genome drawn from a fitness-weighted species, and the newcomer is
assigned to a compatible species (or founds a new one).

Main components:
- activations: Activation functions (clamped sigmoid, fast sigmoid, relu)
- phenotype:   Packed feed-forward network runtime
- genotype:    Genome (network + fitness + time alive)
- pool:        Species and Population management
- run:         Configuration

Example:
    >>> import numpy as np
    >>> from ffneat import Config, Population
    >>> config = Config("config.ini")
    >>> population = Population(config, rng=np.random.default_rng(0))
    >>> outputs = population.run(0, [0.5, -0.5])
    >>> population.set_fitness(0, float(outputs[0]))
    >>> population.increase_time_alive(0)
    >>> population.epoch()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from ffneat.run.config import Config
from ffneat.activations import Activation
from ffneat.phenotype.network import FeedForwardNetwork
from ffneat.genotype.genome import Genome
from ffneat.pool.species import Species
from ffneat.pool.population import Population

__all__ = [
    "Config",
    "Activation",
    "FeedForwardNetwork",
    "Genome",
    "Species",
    "Population",
]
