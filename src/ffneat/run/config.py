import configparser
import os
from ffneat.activations import Activation, get_activation

class Config:

    # Attributes holding an activation kind; names are converted on assignment
    _ACTIVATION_FIELDS = ('network_hidden_activation', 'network_output_activation')

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config with default values, for manual attribute setting.
        """

        # Default config for testing/manual setup
        if config_file is None:
            self.population_size               = 100
            self.genome_minimum_ticks_alive    = 100
            self.genome_compatibility_treshold = 0.2
            self.species_crossover_probability = 0.2

            self.network_inputs            = 2
            self.network_hiddens           = 0
            self.network_outputs           = 1
            self.network_hidden_layers     = 0
            self.network_hidden_activation = Activation.SIGMOID
            self.network_output_activation = Activation.SIGMOID
            self.network_bias              = -1.0
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION]

        # The number of genomes in the population. Genome IDs run from
        # 0 to population_size - 1 and never change across generations.
        self.population_size = get_value('POPULATION', 'population_size', int)

        # [GENOME]

        # A genome can only be replaced once it has been alive for more
        # than this number of ticks (see 'Population.increase_time_alive').
        self.genome_minimum_ticks_alive = get_value('GENOME', 'genome_minimum_ticks_alive', int, default=100)

        # Genomes whose distance to a species representative is at most
        # this threshold are considered to belong to that species.
        self.genome_compatibility_treshold = get_value('GENOME', 'genome_compatibility_treshold', float, default=0.2)

        # [SPECIES]

        # The probability that a replacement genome is produced by crossover
        # rather than by cloning a genitor. Must be in [0, 1].
        self.species_crossover_probability = get_value('SPECIES', 'species_crossover_probability', float, default=0.2)

        # [NETWORK]

        # The number of input and output neurons.
        self.network_inputs  = get_value('NETWORK', 'network_inputs' , int)
        self.network_outputs = get_value('NETWORK', 'network_outputs', int)

        # The width of every hidden layer, and how many hidden layers there are.
        # Both must be zero, or both positive.
        self.network_hiddens       = get_value('NETWORK', 'network_hiddens'      , int, default=0)
        self.network_hidden_layers = get_value('NETWORK', 'network_hidden_layers', int, default=0)

        # Activation functions for hidden and output neurons.
        # Options: "sigmoid", "fast_sigmoid", "relu".
        self.network_hidden_activation = get_value('NETWORK', 'network_hidden_activation', str, default='sigmoid')
        self.network_output_activation = get_value('NETWORK', 'network_output_activation', str, default='sigmoid')

        # The constant fed into every neuron's bias weight.
        self.network_bias = get_value('NETWORK', 'network_bias', float, default=-1.0)

    def __setattr__(self, name, value):
        """
        Override 'setattr' to parse activation names and check probabilities when set.
        This allows users to write config.network_hidden_activation = "relu" and have it
        automatically converted to Activation.RELU.
        """
        if name in self._ACTIVATION_FIELDS:
            value = get_activation(value)
        elif name == 'species_crossover_probability':
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"species_crossover_probability must be in [0, 1], got {value}")
        super().__setattr__(name, value)
