"""
MatrixDocument — Модели формы и JSON-представления матрицы

Schema: prelude/core/contracts/schema/matrix.json

Immutable Pydantic модели:
- MatrixShape: валидированная пара (rows, cols), обе > 0
- MatrixDocument: сериализуемая форма матрицы {size, rows}

Инвариант документа: size[0] == len(rows), size[1] == len(rows[i]) для всех i.
"""

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# SHAPE
# =============================================================================


class MatrixShape(BaseModel):
    """
    Форма матрицы (rows, cols).

    Immutable модель (frozen=True): форма фиксируется при создании матрицы
    и никогда не меняется.
    """

    rows: int = Field(..., gt=0, description="Количество строк")
    cols: int = Field(..., gt=0, description="Количество столбцов")

    model_config = {"frozen": True}

    @property
    def capacity(self) -> int:
        """Количество ячеек rows * cols"""
        return self.rows * self.cols

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols

    def as_tuple(self) -> tuple[int, int]:
        return (self.rows, self.cols)


# =============================================================================
# DOCUMENT
# =============================================================================


class MatrixDocument(BaseModel):
    """
    JSON-представление матрицы.

    Пример:
        {"size": [2, 2], "rows": [[1.0, 2.0], [3.0, 4.0]]}
    """

    size: tuple[int, int] = Field(..., description="Форма [rows, cols]")
    rows: list[list[float]] = Field(..., min_length=1, description="Строки (row-major)")

    model_config = {"frozen": True}

    @field_validator("size")
    @classmethod
    def validate_size_positive(cls, v: tuple[int, int]) -> tuple[int, int]:
        """Обе размерности строго положительные."""
        rows, cols = v
        if rows <= 0 or cols <= 0:
            raise ValueError(f"size must be positive, got {list(v)}")
        return v

    @model_validator(mode="after")
    def validate_shape_invariant(self) -> "MatrixDocument":
        """
        Проверка инварианта формы.

        Каждая строка содержит ровно size[1] значений, строк ровно size[0].
        """
        rows, cols = self.size
        if len(self.rows) != rows:
            raise ValueError(f"expected {rows} rows, got {len(self.rows)}")
        for i, row in enumerate(self.rows):
            if len(row) != cols:
                raise ValueError(f"row {i}: expected {cols} values, got {len(row)}")
        return self

    @property
    def shape(self) -> MatrixShape:
        rows, cols = self.size
        return MatrixShape(rows=rows, cols=cols)
