"""
NEAT Genotype Package

This package implements the genome: a candidate network together with the
fitness and survival-time metadata the evolutionary loop operates on.

Modules:
    genome: Genome class

Exported Classes:
    Genome: A candidate network with fitness and survival-time metadata
"""

from ffneat.genotype.genome import Genome

__all__ = ['Genome']
