"""
NEAT Pool Package

This package implements the population and its speciation structure.

Modules:
    species:    Species class
    population: Population class

Exported Classes:
    Species:    A cluster of compatible genomes with a representative and fitness statistics
    Population: Owner of all genomes and species, driver of the generational loop
"""

from ffneat.pool.species    import Species
from ffneat.pool.population import Population

__all__ = ['Species',
           'Population']
