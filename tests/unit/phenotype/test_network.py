"""
Unit tests for FeedForwardNetwork class.

Tests cover buffer layout, weight/neuron counts, copying, randomization,
activation selection, forward propagation and visualization.
"""

import pytest
import numpy as np
import graphviz  # type: ignore
from ffneat.phenotype.network import FeedForwardNetwork, HEADER_SIZE
from ffneat.activations import Activation, activations


# ============================================================================
# Helpers
# ============================================================================

# (inputs, hiddens, outputs, hidden_layers)
TOPOLOGIES = [
    (1, 0, 1, 0),
    (2, 0, 1, 0),
    (3, 0, 4, 0),
    (2, 3, 1, 1),
    (4, 5, 2, 1),
    (1, 2, 1, 2),
    (3, 4, 2, 3),
    (6, 1, 3, 4),
]


def expected_weights(inputs, hiddens, outputs, hidden_layers):
    """Count weights by walking the layers, one bias weight per neuron."""
    widths = [inputs] + [hiddens] * hidden_layers + [outputs]
    return sum((previous + 1) * current for previous, current in zip(widths, widths[1:]))


def reference_forward(network, inputs):
    """Neuron-by-neuron forward pass, in float64, reading weights in buffer order."""
    weights = [float(w) for w in network.weights]
    hidden_function = activations[network.hidden_activation]
    output_function = activations[network.output_activation]

    pos = 0
    previous = [float(x) for x in inputs]
    layers = [(network.number_hiddens, hidden_function)] * network.number_hidden_layers
    layers.append((network.number_outputs, output_function))
    for size, function in layers:
        current = []
        for _ in range(size):
            total = weights[pos] * network.bias
            pos += 1
            for value in previous:
                total += weights[pos] * value
                pos += 1
            current.append(float(function(total)))
        previous = current

    assert pos == network.number_weights
    return previous


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def single_layer_network():
    """2 inputs -> 1 relu output, weights [bias, w1, w2] = [0.5, 1.0, 2.0]."""
    network = FeedForwardNetwork(2, 0, 1, 0)
    network.set_activations(Activation.RELU, Activation.RELU)
    network.weights[:] = [0.5, 1.0, 2.0]
    return network


# ============================================================================
# Test Initialization
# ============================================================================

class TestNetworkInit:
    """Test FeedForwardNetwork.__init__ method."""

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_weight_count_matches_formula(self, topology):
        network = FeedForwardNetwork(*topology)
        assert network.number_weights == expected_weights(*topology)
        assert network.number_weights == FeedForwardNetwork.count_weights(*topology)
        assert len(network.weights) == network.number_weights

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_neuron_count_matches_formula(self, topology):
        inputs, hiddens, outputs, hidden_layers = topology
        network = FeedForwardNetwork(*topology)
        assert network.number_neurons == inputs + hiddens * hidden_layers + outputs
        assert len(network.neurons) == network.number_neurons

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_buffer_size(self, topology):
        network = FeedForwardNetwork(*topology)
        assert network.nbytes == HEADER_SIZE + 4 * (network.number_weights + network.number_neurons)

    def test_closed_form_example(self):
        """(3+1)*4 first-layer + 2*(4+1)*4 internal + (4+1)*2 output weights."""
        network = FeedForwardNetwork(3, 4, 2, 3)
        assert network.number_weights == 16 + 40 + 10

    def test_stores_topology(self):
        network = FeedForwardNetwork(3, 4, 2, 3)
        assert network.number_inputs == 3
        assert network.number_hiddens == 4
        assert network.number_outputs == 2
        assert network.number_hidden_layers == 3

    def test_defaults(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        assert network.bias == -1.0
        assert network.hidden_activation is Activation.SIGMOID
        assert network.output_activation is Activation.SIGMOID

    def test_data_zero_filled(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        assert np.all(network.weights == 0.0)
        assert np.all(network.neurons == 0.0)

    def test_views_share_one_buffer(self):
        """Test that weights and neurons are views into the same allocation."""
        network = FeedForwardNetwork(2, 3, 1, 1)
        assert np.shares_memory(network.weights, network._buffer)
        assert np.shares_memory(network.neurons, network._buffer)
        assert not np.shares_memory(network.weights, network.neurons)

    def test_neurons_follow_weights(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.neurons[0] = 7.0
        start = HEADER_SIZE + 4 * network.number_weights
        assert network._buffer[start:start + 4].view(np.float32)[0] == 7.0

    @pytest.mark.parametrize("topology", [
        (0, 0, 1, 0),     # no inputs
        (2, 0, 0, 0),     # no outputs
        (2, 3, 1, 0),     # hidden width without hidden layers
        (2, 0, 1, 2),     # hidden layers without hidden width
        (2, -1, 1, -1),   # negative sizes
    ])
    def test_invalid_topology_raises(self, topology):
        with pytest.raises(ValueError):
            FeedForwardNetwork(*topology)


# ============================================================================
# Test copy / destroy
# ============================================================================

class TestNetworkCopy:
    """Test FeedForwardNetwork.copy and destroy methods."""

    def test_copy_is_byte_identical(self, rng):
        network = FeedForwardNetwork(3, 4, 2, 2)
        network.randomize(rng)
        network.set_bias(0.25)
        clone = network.copy()
        np.testing.assert_array_equal(clone._buffer, network._buffer)

    def test_copy_rebinds_views(self, rng):
        """Test that the copy's views point into its own buffer."""
        network = FeedForwardNetwork(3, 4, 2, 2)
        network.randomize(rng)
        clone = network.copy()

        assert np.shares_memory(clone.weights, clone._buffer)
        assert not np.shares_memory(clone.weights, network._buffer)
        assert not np.shares_memory(clone.neurons, network._buffer)

    def test_copy_is_independent(self, rng):
        network = FeedForwardNetwork(3, 4, 2, 2)
        network.randomize(rng)
        clone = network.copy()

        clone.weights[0] = 42.0
        clone.set_bias(3.0)
        assert network.weights[0] != 42.0
        assert network.bias == -1.0

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_copy_produces_identical_outputs(self, topology, rng):
        network = FeedForwardNetwork(*topology)
        network.randomize(rng)
        clone = network.copy()

        inputs = rng.uniform(-1.0, 1.0, topology[0])
        np.testing.assert_array_equal(network.forward_pass(inputs), clone.forward_pass(inputs))

    def test_destroy_releases_buffer(self):
        network = FeedForwardNetwork(2, 0, 1, 0)
        network.destroy()
        assert network.weights is None
        with pytest.raises(RuntimeError, match="destroyed"):
            network.forward_pass([0.0, 0.0])

    def test_destroy_twice_raises(self):
        network = FeedForwardNetwork(2, 0, 1, 0)
        network.destroy()
        with pytest.raises(RuntimeError):
            network.destroy()


# ============================================================================
# Test randomize / set_activations / set_bias
# ============================================================================

class TestNetworkParameters:
    """Test randomize, set_activations and set_bias."""

    def test_randomize_range(self, rng):
        network = FeedForwardNetwork(10, 20, 5, 3)
        network.randomize(rng)
        assert np.all(network.weights >= -0.5)
        assert np.all(network.weights < 0.5)
        assert len(np.unique(network.weights)) > 1

    def test_randomize_reproducible(self):
        network1 = FeedForwardNetwork(2, 3, 1, 1)
        network2 = FeedForwardNetwork(2, 3, 1, 1)
        network1.randomize(np.random.default_rng(7))
        network2.randomize(np.random.default_rng(7))
        np.testing.assert_array_equal(network1.weights, network2.weights)

    def test_randomize_leaves_neurons_alone(self, rng):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.randomize(rng)
        assert np.all(network.neurons == 0.0)

    def test_randomize_without_rng(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.randomize()
        assert np.all(np.abs(network.weights) <= 0.5)

    def test_set_activations_enum(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.set_activations(Activation.RELU, Activation.FAST_SIGMOID)
        assert network.hidden_activation is Activation.RELU
        assert network.output_activation is Activation.FAST_SIGMOID

    def test_set_activations_names(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.set_activations("fast_sigmoid", "relu")
        assert network.hidden_activation is Activation.FAST_SIGMOID
        assert network.output_activation is Activation.RELU

    def test_set_activations_unknown_raises(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        with pytest.raises(ValueError, match="not found"):
            network.set_activations("tanh", "relu")
        with pytest.raises(ValueError, match="not found"):
            network.set_activations(Activation.RELU, 99)

    def test_corrupt_selector_raises_on_run(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network._header['output_activation'] = 200
        with pytest.raises(RuntimeError, match='Activation function "200" not found'):
            network.forward_pass([0.0, 0.0])

    def test_set_bias(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.set_bias(0.5)
        assert network.bias == 0.5

    def test_settings_survive_copy(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        network.set_bias(0.5)
        network.set_activations(Activation.RELU, Activation.FAST_SIGMOID)
        clone = network.copy()
        assert clone.bias == 0.5
        assert clone.hidden_activation is Activation.RELU
        assert clone.output_activation is Activation.FAST_SIGMOID


# ============================================================================
# Test forward_pass
# ============================================================================

class TestNetworkForwardPass:
    """Test FeedForwardNetwork.forward_pass method."""

    def test_zero_weights_give_half(self):
        """Sigmoid of a zero weighted sum is 0.5 for every output."""
        network = FeedForwardNetwork(3, 2, 4, 2)
        np.testing.assert_allclose(network.forward_pass([1.0, 2.0, 3.0]), [0.5] * 4)

    def test_no_hidden_layer(self, single_layer_network):
        # -1.0 * 0.5 + 1.0 * 1.0 + 2.0 * 2.0
        outputs = single_layer_network.forward_pass([1.0, 2.0])
        np.testing.assert_allclose(outputs, [4.5])

    def test_bias_weight_uses_bias_constant(self, single_layer_network):
        single_layer_network.set_bias(2.0)
        # 2.0 * 0.5 + 0.0 + 0.0
        np.testing.assert_allclose(single_layer_network.forward_pass([0.0, 0.0]), [1.0])

    def test_hidden_layer_by_hand(self):
        """1 input -> 2 relu hidden -> 1 relu output, bias constant 1."""
        network = FeedForwardNetwork(1, 2, 1, 1)
        network.set_activations(Activation.RELU, Activation.RELU)
        network.set_bias(1.0)
        network.weights[:] = [
            0.5, 1.0,         # hidden 0: bias, input
            -1.0, 2.0,        # hidden 1: bias, input
            0.0, 1.0, -1.0,   # output: bias, hidden 0, hidden 1
        ]
        # hidden = [relu(0.5 + 3), relu(-1 + 6)] = [3.5, 5.0]; output = relu(3.5 - 5.0) = 0
        np.testing.assert_allclose(network.forward_pass([3.0]), [0.0])
        np.testing.assert_allclose(network.neurons, [3.0, 3.5, 5.0, 0.0])

    def test_activations_are_per_layer(self):
        """Hidden and output layers use their own activation."""
        network = FeedForwardNetwork(1, 1, 1, 1)
        network.set_activations(Activation.RELU, Activation.FAST_SIGMOID)
        network.set_bias(0.0)
        network.weights[:] = [0.0, -1.0, 0.0, 1.0]
        # hidden = relu(-2) = 0; output = fast_sigmoid(0) = 0
        np.testing.assert_allclose(network.forward_pass([2.0]), [0.0])
        # hidden = relu(3) = 3; output = 3 / 4
        np.testing.assert_allclose(network.forward_pass([-3.0]), [0.75])

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    @pytest.mark.parametrize("hidden, output", [
        (Activation.SIGMOID, Activation.SIGMOID),
        (Activation.RELU, Activation.FAST_SIGMOID),
        (Activation.FAST_SIGMOID, Activation.RELU),
    ])
    def test_matches_reference(self, topology, hidden, output, rng):
        network = FeedForwardNetwork(*topology)
        network.set_activations(hidden, output)
        network.randomize(rng)

        inputs  = rng.uniform(-2.0, 2.0, topology[0])
        outputs = network.forward_pass(inputs)
        np.testing.assert_allclose(outputs, reference_forward(network, inputs), rtol=1e-5, atol=1e-5)

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_returns_noutputs_values(self, topology, rng):
        network = FeedForwardNetwork(*topology)
        network.randomize(rng)
        outputs = network.forward_pass(np.zeros(topology[0]))
        assert outputs.shape == (topology[2],)
        assert outputs.dtype == np.float32

    def test_output_is_view_into_neurons(self, rng):
        network = FeedForwardNetwork(2, 3, 2, 1)
        network.randomize(rng)
        outputs = network.forward_pass([0.1, 0.2])
        assert np.shares_memory(outputs, network.neurons)
        np.testing.assert_array_equal(outputs, network.neurons[-2:])

    def test_output_buffer_reused(self, rng):
        """Successive runs overwrite the same buffer without stale values."""
        network = FeedForwardNetwork(2, 3, 2, 2)
        network.randomize(rng)

        first  = network.forward_pass([1.0, -1.0])
        first_values = first.copy()
        second = network.forward_pass([-0.5, 0.25])

        assert np.shares_memory(first, second)
        np.testing.assert_allclose(second, reference_forward(network, [-0.5, 0.25]), rtol=1e-5, atol=1e-5)
        np.testing.assert_allclose(network.forward_pass([1.0, -1.0]), first_values)

    def test_inputs_copied_to_neurons(self):
        network = FeedForwardNetwork(3, 0, 1, 0)
        network.forward_pass([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(network.neurons[:3], [1.0, 2.0, 3.0])

    def test_caller_inputs_untouched(self, single_layer_network):
        inputs = np.array([1.0, 2.0])
        single_layer_network.forward_pass(inputs)
        np.testing.assert_array_equal(inputs, [1.0, 2.0])

    def test_wrong_input_size_raises(self, single_layer_network):
        with pytest.raises(ValueError, match="Expected 2 inputs"):
            single_layer_network.forward_pass([1.0, 2.0, 3.0])

    def test_2d_input_raises(self, single_layer_network):
        with pytest.raises(ValueError):
            single_layer_network.forward_pass([[1.0, 2.0]])

    def test_consistency_check_catches_bad_counts(self):
        """Test that a header inconsistent with the topology trips the consumption check."""
        network = FeedForwardNetwork(2, 0, 1, 0)
        network._header['nweights'] = 4
        with pytest.raises(AssertionError, match="weights consumed"):
            network.forward_pass([0.0, 0.0])


# ============================================================================
# Test visualize / repr
# ============================================================================

class TestNetworkVisualize:
    """Test FeedForwardNetwork.visualize and __repr__."""

    def test_visualize_returns_digraph(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        dot = network.visualize(view=False)
        assert isinstance(dot, graphviz.Digraph)

    def test_visualize_contains_all_neurons(self):
        network = FeedForwardNetwork(2, 3, 1, 2)
        source = network.visualize(view=False).source
        for name in ["in0", "in1", "h0_0", "h0_2", "h1_1", "out0"]:
            assert name in source

    def test_visualize_has_one_edge_per_non_bias_weight(self):
        network = FeedForwardNetwork(2, 3, 2, 1)
        source = network.visualize(view=False).source
        # Bias weights are shown on the nodes, not as edges
        assert source.count("->") == 2 * 3 + 3 * 2

    def test_repr(self):
        network = FeedForwardNetwork(2, 3, 1, 1)
        assert repr(network) == "FeedForwardNetwork(inputs=2, hiddens=3, outputs=1, hidden_layers=1, weights=13)"
