"""
prelude — dense matrix algebra.

    >>> from prelude import Matrix
    >>> Matrix(2, 2, [1, 2, 3, 4]).det()
    -2.0
"""

from prelude.core.math.matrix import (
    InvalidShape,
    Matrix,
    MatrixConfig,
    MatrixRow,
    MatrixError,
    NotSquareMatrix,
    ShapeMismatch,
    SingularMatrix,
)
from prelude.logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Matrix",
    "MatrixConfig",
    "MatrixRow",
    "MatrixError",
    "InvalidShape",
    "ShapeMismatch",
    "NotSquareMatrix",
    "SingularMatrix",
    "setup_logging",
]
