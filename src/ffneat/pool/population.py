"""
NEAT Population Module

This module implements the Population class, the top-level orchestrator of the
evolutionary algorithm. Evolution is steady-state: instead of spawning a whole new
generation at once, each epoch replaces the single weakest genome with a clone of a
genome drawn from a fitness-weighted species, and assigns the newcomer to a species.

Genome IDs are stable: a genome is always replaced in the same slot, so an external
agent bound to genome ID 'i' keeps its ID across generations.

Classes:
    Population: Owner of all genomes and species, driver of the generational loop
"""

import logging
import math
import operator
import numpy as np
from statistics import mean

from ffneat.run.config   import Config
from ffneat.genotype     import Genome
from ffneat.pool.species import Species

logger = logging.getLogger(__name__)

class Population:
    """
    A population of genomes evolving through steady-state replacement.

    The population exclusively owns its genomes; species only hold references to
    them. All randomness (initial weights, species draw, genitor selection) comes
    from a single numpy Generator, so a seeded generator makes a run reproducible.

    Outputs returned by run() are views into the network buffer of the genome
    that produced them: they are overwritten by the next run of the same genome.
    A population is not meant to be used from several threads at once, and
    epoch() must not be interleaved with run() or set_fitness().

    Public Attributes:
        genomes:    List of genomes, indexed by genome ID
        species:    List of species, in creation order
        innovation: Next innovation number to hand out
        solved:     Whether the problem has been solved (maintained by the caller)

    Public Methods:
        run(genome_id, inputs):          Forward pass through a genome's network
        set_fitness(genome_id, value):   Record a genome's fitness
        increase_time_alive(genome_id):  Count one more tick of survival for a genome
        epoch():                         Advance the population by one generation
        get_fittest_genome():            Return the genome with highest fitness
        destroy():                       Release all genomes and species
    """

    def __init__(self, config: Config, rng: np.random.Generator | None = None):
        """
        Create the initial population: 'population_size' identical genomes in a single species.

        Parameters:
            config: Stores configuration parameters
            rng:    random source; a fresh unseeded generator is used if omitted
        """
        if config.population_size <= 0:
            raise ValueError(f"Population size must be positive, got {config.population_size}")

        self._config    : Config              = config
        self._rng       : np.random.Generator = rng if rng is not None else np.random.default_rng()
        self._destroyed : bool                = False

        self.solved    : bool          = False
        self.innovation: int           = 1
        self.genomes   : list[Genome]  = []
        self.species   : list[Species] = []

        self._reset_genomes()

        # All genomes are clones of the first one, so they start in a single species
        initial_species = self._create_new_species(self.genomes[0])
        for genome in self.genomes:
            initial_species.add_genome(genome)

        logger.info("Created population of %d genomes", len(self.genomes))

    def _reset_genomes(self):
        """
        Create a base genome and copy it for every other slot.
        """
        base = Genome(self._config, self.innovation, self._rng)
        self.innovation += 1

        self.genomes = [base] + [base.copy() for _ in range(1, self._config.population_size)]

    def _create_new_species(self, representative: Genome | None) -> Species:
        species = Species(self._config, representative)
        self.species.append(species)
        return species

    def _check_alive(self):
        if self._destroyed:
            raise RuntimeError("population has been destroyed")

    def _check_genome_id(self, genome_id: int):
        self._check_alive()

        # Rejects floats and other non-integral IDs with a TypeError
        genome_id = operator.index(genome_id)
        if not 0 <= genome_id < len(self.genomes):
            raise IndexError(f"Genome ID {genome_id} out of range [0, {len(self.genomes)})")

    @property
    def population_size(self) -> int:
        return len(self.genomes)

    def run(self, genome_id: int, inputs) -> np.ndarray:
        """
        Feed inputs through the network of a genome.

        Parameters:
            genome_id: ID of the genome, in [0, population_size)
            inputs:    sequence of network inputs

        Returns:
            The network outputs. The array is owned by the genome's network and
            is overwritten on the next run of the same genome.
        """
        self._check_genome_id(genome_id)
        return self.genomes[genome_id].run(inputs)

    def set_fitness(self, genome_id: int, fitness: float):
        self._check_genome_id(genome_id)
        self.genomes[genome_id].fitness = fitness

    def increase_time_alive(self, genome_id: int):
        self._check_genome_id(genome_id)
        self.genomes[genome_id].time_alive += 1

    def get_fittest_genome(self) -> Genome:
        """
        Find and return the genome with the highest fitness (first one on ties).
        """
        self._check_alive()
        return max(self.genomes, key=lambda genome: genome.fitness)

    def epoch(self):
        """
        Advance the population by one generation.

        The generation step replaces at most one genome:

        Step 1: Find the worst genome
        - Among genomes alive for more than 'genome_minimum_ticks_alive' ticks,
          pick the one with the lowest fitness (first one on ties)
        - If no genome is old enough, nothing happens

        Step 2: Evict
        - Remove the worst genome from every species, so it does not weigh
          on the statistics used to choose its replacement

        Step 3: Draw a species
        - Roulette-wheel selection over the non-empty species, proportional
          to their average fitness relative to the mean species fitness
        - The draw may not land on any species, in which case nothing is replaced

        Step 4: Reproduce
        - Clone a genitor of the drawn species into the worst genome's slot
          (unless the dormant crossover path is taken)

        Step 5: Speciate
        - Add the genome in that slot to the first compatible species,
          or to a new species if none is compatible
        """
        self._check_alive()

        worst_genome_id = self._find_worst_fitness()
        if worst_genome_id is None:
            logger.debug("No genome alive long enough to be replaced")
            return

        # Remove the worst genome from the species containing it
        worst_genome = self.genomes[worst_genome_id]
        for species in self.species:
            species.remove_genome(worst_genome)
        logger.debug("Evicted genome %d (fitness=%s)", worst_genome_id, worst_genome.fitness)

        self._select_reproduction_species(worst_genome_id)

    def _find_worst_fitness(self) -> int | None:
        """
        Find the eligible genome with the strictly lowest fitness.

        Returns:
            The ID of the worst genome, or None if no genome is old enough
        """
        worst_genome_id = None
        worst_fitness   = math.inf
        for genome_id, genome in enumerate(self.genomes):
            if (genome.fitness < worst_fitness and
                genome.time_alive > self._config.genome_minimum_ticks_alive):
                worst_genome_id = genome_id
                worst_fitness   = genome.fitness

        return worst_genome_id

    def _get_species_fitness_average(self) -> float:
        """
        Mean, over all species (empty ones included), of the species average fitness.
        """
        return mean(species.get_average_fitness() for species in self.species)

    def _select_reproduction_species(self, worst_genome_id: int) -> bool:
        """
        Draw a species by roulette wheel and use it to refill the slot of the evicted genome.

        Returns:
            True if a species was drawn, False if the draw went past the last species
        """
        total_avg = self._get_species_fitness_average()

        selection_random = self._rng.random()
        for species_index, species in enumerate(self.species):

            # Ignore empty species
            if species.ngenomes == 0:
                continue

            # With a zero mean the shares are unbounded: species with a negative
            # average are passed over, the first other one is drawn
            species_avg = species.get_average_fitness()
            if total_avg == 0.0:
                selection_prob = math.copysign(math.inf, species_avg) if species_avg != 0.0 else math.inf
            else:
                selection_prob = species_avg / total_avg

            # Not this one: consume its share of the wheel and move on
            if selection_random > selection_prob:
                selection_random -= selection_prob
                continue

            logger.debug("Species %d drawn to reproduce", species_index)

            if self._rng.random() < self._config.species_crossover_probability:
                # Crossover is not available: the evicted genome keeps its slot
                logger.debug("Crossover drawn for genome %d, keeping it", worst_genome_id)
            else:
                genitor = species.select_genitor(self._rng)
                self._replace_genome(worst_genome_id, genitor)

            self._speciate_genome(worst_genome_id)
            return True

        logger.debug("Species draw exhausted, genome %d not replaced", worst_genome_id)
        return False

    def _replace_genome(self, dest: int, src: Genome):
        """
        Replace the genome in slot 'dest' by a newborn clone of 'src'.
        """
        assert self.genomes[dest] is not src, "a genome cannot replace itself"

        self.genomes[dest].destroy()

        newborn = src.copy()
        newborn.time_alive = 0
        self.genomes[dest] = newborn

    def _speciate_genome(self, genome_id: int) -> Species:
        """
        Add a genome to the first species whose representative is compatible with it,
        or to a new species if there is none.
        """
        genome    = self.genomes[genome_id]
        threshold = self._config.genome_compatibility_treshold

        for species in self.species:
            if genome.is_compatible(species.get_representative(), threshold):
                species.add_genome(genome)
                return species

        # If no matching species could be found create a new species
        species = self._create_new_species(None)
        species.add_genome(genome)
        logger.debug("Genome %d founded species %d", genome_id, len(self.species) - 1)
        return species

    def destroy(self):
        """
        Destroy every genome, then every species. The population cannot be used afterwards.
        """
        self._check_alive()

        for genome in self.genomes:
            genome.destroy()
        self.genomes = []

        for species in self.species:
            species.destroy()
        self.species = []

        self._destroyed = True

    def __len__(self):
        return len(self.genomes)

    def __str__(self):
        return '\n'.join(f"[{genome_id}] {genome}" for genome_id, genome in enumerate(self.genomes))
