"""
Core math modules для prelude

Матричная алгебра и численные примитивы сравнения.
"""

# Numerical Safeguards
from prelude.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    EPS_SINGULAR,
    # NaN/Inf
    is_valid_float,
    # Epsilon comparisons
    grid_is_close,
    is_close,
    is_zero,
)

# Matrix
from prelude.core.math.matrix import (
    CELL_SEPARATOR,
    DEFAULT_CONFIG,
    DET_WARN_SIZE,
    ROW_SEPARATOR,
    InvalidShape,
    Matrix,
    MatrixConfig,
    MatrixRow,
    MatrixError,
    NotSquareMatrix,
    ShapeMismatch,
    SingularMatrix,
)

__all__ = [
    # Numerical Safeguards — Epsilon constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "EPS_SINGULAR",
    # Numerical Safeguards — NaN/Inf
    "is_valid_float",
    # Numerical Safeguards — Epsilon comparisons
    "grid_is_close",
    "is_close",
    "is_zero",
    # Matrix — Constants
    "CELL_SEPARATOR",
    "DEFAULT_CONFIG",
    "DET_WARN_SIZE",
    "ROW_SEPARATOR",
    # Matrix — Exceptions
    "MatrixError",
    "InvalidShape",
    "ShapeMismatch",
    "NotSquareMatrix",
    "SingularMatrix",
    # Matrix — Types
    "Matrix",
    "MatrixConfig",
    "MatrixRow",
]
