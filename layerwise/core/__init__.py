"""Core numerical primitives for layerwise."""

from . import activations, costs, layers, matrix, network, optimizers, parameter, types

__all__ = [
    "activations",
    "costs",
    "layers",
    "matrix",
    "network",
    "optimizers",
    "parameter",
    "types",
]
