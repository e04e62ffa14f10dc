"""
NEAT Species Module

This module implements the Species class. A species represents a cluster of
genetically similar genomes that compete primarily within their own niche.

Classes:
    Species: A cluster of compatible genomes with a representative and fitness statistics
"""

import numpy as np
from statistics import mean
from typing     import TYPE_CHECKING

from ffneat.run.config import Config
if TYPE_CHECKING:
    from ffneat.genotype import Genome

class Species:
    """
    A species grouping genetically similar genomes.

    The species owns a private copy of its representative genome, used as the
    reference point for compatibility tests, so the representative survives
    even when the genome it was copied from is replaced. Members, on the other
    hand, are plain references to genomes owned by the population; the species
    never copies or destroys them.

    A species may be created without a representative: the first genome added
    to it then becomes the representative.

    Public Attributes:
        representative: Genome copy used for compatibility tests (None until known)
        members:        The genomes that are part of this species

    Public Properties:
        ngenomes: Number of member genomes

    Public Methods:
        add_genome(genome):     Add a member
        remove_genome(genome):  Remove a member, if present
        get_representative():   The representative genome
        get_average_fitness():  Mean fitness of the members
        select_genitor(rng):    Pick the member that will be cloned
        destroy():              Release the representative and drop all members
    """

    def __init__(self, config: Config, representative: 'Genome | None' = None):
        """
        Initialize a new species.

        Parameters:
            config:         stores configuration parameters
            representative: the genome that represents this species in the speciation process,
                            or None to use the first genome added
        """
        self._config: Config = config

        # Representative genome for compatibility tests (owned copy)
        self.representative: 'Genome | None' = None
        if representative is not None:
            self.representative = representative.copy()

        # All genomes in this species (references into the population)
        self.members: list['Genome'] = []

    @property
    def ngenomes(self) -> int:
        return len(self.members)

    def add_genome(self, genome: 'Genome'):
        if self.representative is None:
            self.representative = genome.copy()
        self.members.append(genome)

    def remove_genome(self, genome: 'Genome'):
        """
        Remove a genome from the species. Removing a non-member is a no-op.
        Genomes are matched by identity.
        """
        self.members = [member for member in self.members if member is not genome]

    def get_representative(self) -> 'Genome | None':
        return self.representative

    def get_average_fitness(self) -> float:
        """
        Average fitness of all members, or 0.0 for an empty species.
        Fitness values may be any real number, numpy scalars included.
        """
        if not self.members:
            return 0.0
        return mean(float(member.fitness) for member in self.members)

    def select_genitor(self, rng: np.random.Generator) -> 'Genome':
        """
        Select the genome that will be cloned to produce offspring.
        Every member is equally likely to be picked.

        Parameters:
            rng: random source

        Returns:
            A member of this species
        """
        if not self.members:
            raise RuntimeError("cannot select a genitor from an empty species")
        return self.members[rng.integers(len(self.members))]

    def destroy(self):
        if self.representative is not None:
            self.representative.destroy()
            self.representative = None
        self.members = []

    def __str__(self):
        return f"genomes={self.ngenomes}, average_fitness={self.get_average_fitness():.4f}"
