"""
NEAT Genome Module

This module implements the Genome class: one candidate solution in the population,
made of a feed-forward network plus the bookkeeping the evolutionary loop needs
(fitness, time alive, innovation number).

Classes:
    Genome: A candidate network with fitness and survival-time metadata
"""

import numpy as np

from ffneat.run.config import Config
from ffneat.phenotype  import FeedForwardNetwork

class Genome:
    """
    A genome in the population.

    The genome exclusively owns its network: copying a genome copies the network,
    destroying a genome destroys it.

    Public Attributes:
        fitness:    Externally assigned score (higher is better)
        time_alive: Number of ticks this genome has survived
        innovation: Innovation number the genome was created with
        network:    The FeedForwardNetwork that computes this genome's outputs

    Public Methods:
        copy():                           Create an identical, independent genome
        destroy():                        Release the network
        run(inputs):                      Forward pass through the network
        distance(other):                  Genetic distance to another genome
        is_compatible(other, threshold):  Whether two genomes belong to the same species
    """

    def __init__(self, config: Config, innovation: int, rng: np.random.Generator | None = None):
        """
        Create a genome with randomly initialized weights.

        Parameters:
            config:     Stores configuration parameters (network topology, activations, bias)
            innovation: Innovation number assigned to this genome
            rng:        random source for the initial weights
        """
        self.fitness   : float = 0.0
        self.time_alive: int   = 0
        self.innovation: int   = innovation

        self.network = FeedForwardNetwork(config.network_inputs,
                                          config.network_hiddens,
                                          config.network_outputs,
                                          config.network_hidden_layers)
        self.network.set_activations(config.network_hidden_activation, config.network_output_activation)
        self.network.set_bias(config.network_bias)
        self.network.randomize(rng)

    def copy(self) -> 'Genome':
        """
        Create a clone of this genome, with its own copy of the network.
        """
        clone = Genome.__new__(Genome)
        clone.fitness    = self.fitness
        clone.time_alive = self.time_alive
        clone.innovation = self.innovation
        clone.network    = self.network.copy()
        return clone

    def destroy(self):
        self.network.destroy()

    def run(self, inputs) -> np.ndarray:
        """
        Feed inputs through the network.
        The returned array is owned by the network and overwritten on the next run.
        """
        return self.network.forward_pass(inputs)

    def distance(self, other: 'Genome') -> float:
        """
        Calculate the genetic distance between this genome and another.

        Genomes with different topologies are infinitely far apart. Otherwise,
        the distance is the mean absolute difference between homologous weights.

        Parameters:
            other: The other genome to compare against

        Returns:
            The genetic distance between the two genomes
        """
        mine, theirs = self.network, other.network
        if (mine.number_inputs        != theirs.number_inputs  or
            mine.number_hiddens       != theirs.number_hiddens or
            mine.number_outputs       != theirs.number_outputs or
            mine.number_hidden_layers != theirs.number_hidden_layers):
            return float('inf')

        return float(np.mean(np.abs(mine.weights.astype(np.float64) - theirs.weights)))

    def is_compatible(self, other: 'Genome', threshold: float) -> bool:
        return self.distance(other) <= threshold

    def __str__(self):
        return f"innovation={self.innovation}, fitness={self.fitness:.4f}, time_alive={self.time_alive}"

    def __repr__(self):
        return f"Genome(innovation={self.innovation}, network={repr(self.network)})"
