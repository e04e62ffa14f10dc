import autograd.numpy as np  # type: ignore
from enum import IntEnum

class Activation(IntEnum):
    """Activation selectors, as stored in a network header."""
    SIGMOID      = 0
    FAST_SIGMOID = 1
    RELU         = 2

def sigmoid_activation(z):
    # Saturate outside [-45, 45], where exp() would over/underflow a float32
    z_clipped = np.clip(z, -45.0, 45.0)
    sigmoid   = 1.0 / (1.0 + np.exp(-z_clipped))
    return np.where(z < -45.0, 0.0, np.where(z > 45.0, 1.0, sigmoid))

def fast_sigmoid_activation(z):
    return z / (1.0 + np.abs(z))

def relu_activation(z):
    return np.maximum(0.0, z)

activations = {
    Activation.SIGMOID     : sigmoid_activation,
    Activation.FAST_SIGMOID: fast_sigmoid_activation,
    Activation.RELU        : relu_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    Activation.SIGMOID     : "SIG",
    Activation.FAST_SIGMOID: "FSG",
    Activation.RELU        : "RLU"
    }

def get_activation(kind) -> Activation:
    """
    Resolve an activation kind given as an Activation, its integer code or its name.

    Parameters:
        kind: e.g. Activation.RELU, 2, "relu" or "RELU"

    Returns:
        The matching Activation

    Raises:
        ValueError: if the kind is not a known activation
    """
    if isinstance(kind, str):
        try:
            return Activation[kind.strip().upper()]
        except KeyError:
            raise ValueError(f'Activation function "{kind}" not found') from None
    try:
        return Activation(kind)
    except ValueError:
        raise ValueError(f'Activation function "{kind}" not found') from None
