"""
Domain models and value objects.

Contains the validated matrix shape and the serializable matrix document.
"""

from prelude.core.domain.matrix_document import MatrixDocument, MatrixShape

__all__ = [
    "MatrixShape",
    "MatrixDocument",
]
