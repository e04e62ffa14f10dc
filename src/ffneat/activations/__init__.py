"""
Activations Package

This package provides the activation functions available to the hidden and
output layers of a feed-forward network.

Exported:
    Activation:       Enumeration of activation kinds (stored as codes in network headers)
    activations:      Dictionary mapping activation kinds to functions
    activation_codes: Dictionary mapping activation kinds to 3-letter identifiers
    get_activation:   Resolve an activation kind from an enum member, code or name
    Individual activation functions: sigmoid_activation, fast_sigmoid_activation,
                                     relu_activation
"""

from ffneat.activations.basic_activations import (
    Activation,
    activations,
    activation_codes,
    get_activation,
    sigmoid_activation,
    fast_sigmoid_activation,
    relu_activation
)

__all__ = [
    'Activation',
    'activations',
    'activation_codes',
    'get_activation',
    'sigmoid_activation',
    'fast_sigmoid_activation',
    'relu_activation'
]
