"""Conjugate gradient benchmark on sparse stencil matrices, with a mixed-precision variant."""

__version__ = "0.1.0"
__all__ = ["__version__"]