"""
Feed-Forward Network Module

This module implements the fixed-topology feed-forward network that powers every
genome. The whole network lives in a single contiguous byte buffer:

    [ header | weights (float32) ... | neurons (float32) ... ]

The header stores the topology counts, the hidden and output activation selectors
and the bias constant. The weight and neuron arrays are numpy views into the same
buffer, derived from the header counts; they are re-derived whenever the buffer is
duplicated, never copied along with it. Keeping weights and activations side by
side in one allocation makes a forward pass touch a single block of memory.

Weights are laid out layer after layer, neuron after neuron; each neuron owns a
bias weight followed by one weight per neuron of the previous layer. The neuron
array holds the inputs (treated as layer zero), then every hidden layer, then
the outputs.

Classes:
    FeedForwardNetwork: Packed feed-forward neural network
"""

import numpy as np
import graphviz  # type: ignore

from ffneat.activations import Activation, activations, activation_codes, get_activation

_HEADER_DTYPE = np.dtype([('ninputs'          , '<u4'),
                          ('nhiddens'         , '<u4'),
                          ('noutputs'         , '<u4'),
                          ('nhidden_layers'   , '<u4'),
                          ('nweights'         , '<u4'),
                          ('nneurons'         , '<u4'),
                          ('hidden_activation', 'u1'),
                          ('output_activation', 'u1'),
                          ('bias'             , '<f4')], align=True)

_FLOAT = np.dtype('<f4')

HEADER_SIZE = _HEADER_DTYPE.itemsize

class FeedForwardNetwork:
    """
    A fully connected feed-forward network with a uniform hidden width.

    A network has either no hidden layers at all, or 'hidden_layers' hidden
    layers of 'hiddens' neurons each. The topology is fixed at creation.

    The array returned by forward_pass() is a view into the network's own buffer:
    it is overwritten by the next forward pass on the same network, so callers
    that need to keep the outputs must copy them. A network must not be run from
    several threads at once.

    Public Attributes:
        weights: float32 view over the weight segment of the buffer
        neurons: float32 view over the neuron segment of the buffer

    Public Properties:
        number_inputs, number_hiddens, number_outputs, number_hidden_layers
        number_weights:    Total number of weights (bias weights included)
        number_neurons:    Total number of neuron slots (inputs included)
        nbytes:            Size of the packed buffer, in bytes
        bias:              Constant multiplied against each neuron's bias weight
        hidden_activation: Activation used by the hidden layers
        output_activation: Activation used by the output layer

    Public Methods:
        copy():                           Duplicate the network
        destroy():                        Release the buffer
        randomize(rng):                   Draw all weights uniformly from [-0.5, 0.5)
        set_activations(hidden, output):  Select the hidden/output activations
        set_bias(value):                  Set the bias constant
        forward_pass(inputs):             Propagate inputs and return the outputs
        visualize(view):                  Draw the network with graphviz
    """

    def __init__(self, inputs: int, hiddens: int, outputs: int, hidden_layers: int):
        """
        Allocate a zero-initialized network.

        Parameters:
            inputs:        number of input neurons (> 0)
            hiddens:       number of neurons in each hidden layer
            outputs:       number of output neurons (> 0)
            hidden_layers: number of hidden layers; must be 0 exactly when 'hiddens' is 0
        """
        if inputs <= 0:
            raise ValueError(f"Network needs at least one input, got {inputs}")
        if outputs <= 0:
            raise ValueError(f"Network needs at least one output, got {outputs}")
        if hiddens < 0 or hidden_layers < 0:
            raise ValueError("Hidden width and hidden layer count cannot be negative")
        if (hiddens > 0) != (hidden_layers > 0):
            raise ValueError(f"Hidden width ({hiddens}) and hidden layer count ({hidden_layers}) "
                             f"must be either both zero or both positive")

        nweights = self.count_weights(inputs, hiddens, outputs, hidden_layers)
        nneurons = self.count_neurons(inputs, hiddens, outputs, hidden_layers)

        self._buffer = np.zeros(HEADER_SIZE + _FLOAT.itemsize * (nweights + nneurons), dtype=np.uint8)

        header = self._buffer[:HEADER_SIZE].view(_HEADER_DTYPE)
        header['ninputs']           = inputs
        header['nhiddens']          = hiddens
        header['noutputs']          = outputs
        header['nhidden_layers']    = hidden_layers
        header['nweights']          = nweights
        header['nneurons']          = nneurons
        header['hidden_activation'] = Activation.SIGMOID
        header['output_activation'] = Activation.SIGMOID
        header['bias']              = -1.0

        self._bind_views()

    @staticmethod
    def count_weights(inputs: int, hiddens: int, outputs: int, hidden_layers: int) -> int:
        """
        Number of weights (bias weights included) needed by a given topology.
        """
        hidden_weights = 0
        if hidden_layers > 0:
            input_weights           = (inputs + 1) * hiddens
            hidden_internal_weights = (hidden_layers - 1) * (hiddens + 1) * hiddens
            hidden_weights          = input_weights + hidden_internal_weights

        if hidden_layers > 0:
            output_weights = (hiddens + 1) * outputs
        else:
            output_weights = (inputs + 1) * outputs

        return hidden_weights + output_weights

    @staticmethod
    def count_neurons(inputs: int, hiddens: int, outputs: int, hidden_layers: int) -> int:
        """
        Number of neuron slots (inputs included) needed by a given topology.
        """
        return inputs + hiddens * hidden_layers + outputs

    def _bind_views(self):
        """
        Derive the header, weight and neuron views from the counts stored in the buffer.
        """
        header   = self._buffer[:HEADER_SIZE].view(_HEADER_DTYPE)
        nweights = int(header['nweights'][0])
        nneurons = int(header['nneurons'][0])

        weights_start = HEADER_SIZE
        neurons_start = weights_start + _FLOAT.itemsize * nweights
        neurons_end   = neurons_start + _FLOAT.itemsize * nneurons

        self._header = header
        self.weights = self._buffer[weights_start:neurons_start].view(_FLOAT)
        self.neurons = self._buffer[neurons_start:neurons_end].view(_FLOAT)

    def _check_alive(self):
        if self._buffer is None:
            raise RuntimeError("network has been destroyed")

    def _header_value(self, field: str) -> int:
        return int(self._header[field][0])

    @property
    def number_inputs(self) -> int:
        return self._header_value('ninputs')

    @property
    def number_hiddens(self) -> int:
        return self._header_value('nhiddens')

    @property
    def number_outputs(self) -> int:
        return self._header_value('noutputs')

    @property
    def number_hidden_layers(self) -> int:
        return self._header_value('nhidden_layers')

    @property
    def number_weights(self) -> int:
        return self._header_value('nweights')

    @property
    def number_neurons(self) -> int:
        return self._header_value('nneurons')

    @property
    def nbytes(self) -> int:
        """Size of the packed buffer, header included."""
        return self._buffer.nbytes

    @property
    def bias(self) -> float:
        return float(self._header['bias'][0])

    @property
    def hidden_activation(self) -> Activation:
        return self._activation_kind('hidden_activation')

    @property
    def output_activation(self) -> Activation:
        return self._activation_kind('output_activation')

    def _activation_kind(self, field: str) -> Activation:
        code = self._header_value(field)
        try:
            return Activation(code)
        except ValueError:
            raise RuntimeError(f'Activation function "{code}" not found') from None

    def copy(self) -> 'FeedForwardNetwork':
        """
        Duplicate the network, buffer byte for byte.
        """
        self._check_alive()
        clone = FeedForwardNetwork.__new__(FeedForwardNetwork)
        clone._buffer = self._buffer.copy()
        clone._bind_views()
        return clone

    def destroy(self):
        """
        Release the buffer. The network cannot be used afterwards.
        """
        self._check_alive()
        self._buffer = None
        self._header = None
        self.weights = None
        self.neurons = None

    def randomize(self, rng: np.random.Generator | None = None):
        """
        Draw every weight uniformly from [-0.5, 0.5).

        Parameters:
            rng: random source; a fresh unseeded generator is used if omitted
        """
        self._check_alive()
        if rng is None:
            rng = np.random.default_rng()
        self.weights[:] = rng.random(self.number_weights, dtype=np.float32) - 0.5

    def set_activations(self, hidden, output):
        """
        Select the activation of the hidden layers and of the output layer.

        Parameters:
            hidden: activation kind for hidden neurons (Activation, code or name)
            output: activation kind for output neurons (Activation, code or name)
        """
        self._check_alive()
        self._header['hidden_activation'] = get_activation(hidden)
        self._header['output_activation'] = get_activation(output)

    def set_bias(self, value: float):
        self._check_alive()
        self._header['bias'] = value

    def forward_pass(self, inputs) -> np.ndarray:
        """
        Propagate a single input vector through the network.

        The inputs are copied into the start of the neuron array, so the input
        layer is handled exactly like the output of a hidden layer.

        Parameters:
            inputs: sequence of 'number_inputs' values

        Returns:
            float32 view over the output neurons. It is reused by the next call.
        """
        self._check_alive()

        ninputs = self.number_inputs
        inputs  = np.asarray(inputs, dtype=_FLOAT)
        if inputs.ndim != 1 or inputs.shape[0] != ninputs:
            raise ValueError(f"Expected {ninputs} inputs, got array of shape {inputs.shape}")

        self.neurons[:ninputs] = inputs

        hidden_function = activations[self.hidden_activation]
        output_function = activations[self.output_activation]
        bias            = self.bias

        weight_pos = 0         # next unread weight
        input_pos  = 0         # start of the previous layer in the neuron array
        output_pos = ninputs   # start of the layer being computed
        width      = ninputs   # size of the previous layer

        # Hidden layers
        for _ in range(self.number_hidden_layers):
            weight_pos = self._propagate_layer(self.number_hiddens, width, hidden_function,
                                               bias, weight_pos, input_pos, output_pos)
            input_pos  += width
            output_pos += self.number_hiddens
            width       = self.number_hiddens

        # Output layer, fed by the last hidden layer or directly by the inputs
        outputs_start = output_pos
        weight_pos = self._propagate_layer(self.number_outputs, width, output_function,
                                           bias, weight_pos, input_pos, output_pos)
        output_pos += self.number_outputs

        assert weight_pos == self.number_weights, "weights consumed do not match the topology"
        assert output_pos == self.number_neurons, "neurons filled do not match the topology"

        return self.neurons[outputs_start:output_pos]

    def _propagate_layer(self, size, width, activation_function, bias, weight_pos, input_pos, output_pos) -> int:
        """
        Compute one layer of 'size' neurons fed by the 'width' neurons starting at 'input_pos'.

        Returns:
            Position of the first weight after this layer
        """
        span     = size * (width + 1)
        layer    = self.weights[weight_pos:weight_pos + span].reshape(size, width + 1)
        previous = self.neurons[input_pos:input_pos + width]

        weighted_sum = layer[:, 0] * bias + layer[:, 1:] @ previous
        self.neurons[output_pos:output_pos + size] = activation_function(weighted_sum)

        return weight_pos + span

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Visualize the network using Graphviz.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the network
        """
        self._check_alive()

        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')
        dot.attr('graph', labelloc='t',
                 label=f"bias={self.bias:.2f}, hidden={activation_codes[self.hidden_activation]}, "
                       f"output={activation_codes[self.output_activation]}")

        node_attrs = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                      'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}

        # Node names for each layer, inputs first
        layers = [[f"in{i}" for i in range(self.number_inputs)]]
        for layer in range(self.number_hidden_layers):
            layers.append([f"h{layer}_{j}" for j in range(self.number_hiddens)])
        layers.append([f"out{k}" for k in range(self.number_outputs)])

        fills = ['lightgrey'] + ['lightblue'] * self.number_hidden_layers + ['white']

        weight_pos = 0
        for index, (names, fill) in enumerate(zip(layers, fills)):
            with dot.subgraph(name=f'cluster_{index}') as cluster:
                cluster.attr(rank='same', style='invisible')
                for name in names:
                    label = name
                    if index > 0:
                        label = f"{name}\\nw_b={self.weights[weight_pos]:.2f}"
                        weight_pos += len(layers[index - 1]) + 1
                    cluster.node(name, label=label, fillcolor=fill, **node_attrs)

        # Edges carry the weights, in buffer order
        weight_pos = 0
        for previous, current in zip(layers, layers[1:]):
            for name in current:
                weight_pos += 1  # bias weight
                for source in previous:
                    dot.edge(source, name, label=f"{self.weights[weight_pos]:.2f}",
                             fontsize='5', penwidth='0.5', arrowsize='0.5')
                    weight_pos += 1

        if view:
            dot.view(cleanup=True)

        return dot

    def __repr__(self):
        return (f"FeedForwardNetwork(inputs={self.number_inputs}, "
                f"hiddens={self.number_hiddens}, "
                f"outputs={self.number_outputs}, "
                f"hidden_layers={self.number_hidden_layers}, "
                f"weights={self.number_weights})")
