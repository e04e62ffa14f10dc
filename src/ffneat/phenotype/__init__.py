"""
Phenotype Package

This package implements the executable side of a genome: the packed
feed-forward neural network that turns inputs into outputs.

Modules:
    network: FeedForwardNetwork class and buffer layout constants

Exported Classes:
    FeedForwardNetwork: Fixed-topology feed-forward network stored in a single buffer
"""

from ffneat.phenotype.network import FeedForwardNetwork, HEADER_SIZE

__all__ = ['FeedForwardNetwork',
           'HEADER_SIZE']
