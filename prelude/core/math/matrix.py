"""
Matrix — Dense 2D Matrix Algebra

Плотная матрица double-precision с фиксированной формой и изменяемым содержимым:
- Конструкторы: Matrix(n), Matrix(rows, cols), unit, identity, diagonal
- Bulk-присваивание строк (rows = values) с truncate/retain семантикой
- transpose, add, multiply (скаляр), dot, cofactor, det, adj, invert, trace
- remove_row / remove_column с no-op clamp для индексов вне диапазона
- Предикаты is_square / is_diagonal / is_symmetric и их композиция
- Текстовое представление и JSON документ (MatrixDocument)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. size = (rows, cols) фиксируется при создании и не переназначается
2. len(rows) == size[0] и len(rows[i]) == size[1] после любой операции
3. Операции высокого уровня возвращают НОВУЮ матрицу и не мутируют операнды
4. Производные матрицы никогда не разделяют storage с исходными
5. Обход ячеек всегда в row-major порядке (indexes())

ФОРМУЛЫ:
    cofactor(A, i, j) = (-1)^(i+j) * det(A без строки i и столбца j)
    det(A) = Σ_i A[0][i] * cofactor(A, 0, i)      (n > 2)
    adj(A) = transpose(C),  C[i][j] = cofactor(A, i, j)
    inv(A) = adj(A) / det(A)
"""

import logging
import math
import numbers
from collections.abc import Iterable, MutableSequence
from dataclasses import dataclass
from functools import cache
from typing import Any, Final, Iterator, Sequence

from pydantic import ValidationError

from prelude.core.domain.matrix_document import MatrixDocument, MatrixShape
from prelude.core.math.numerical_safeguards import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    EPS_SINGULAR,
    grid_is_close,
    is_valid_float,
    is_zero,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

# Размер, начиная с которого det() предупреждает о стоимости разложения
DET_WARN_SIZE: Final[int] = 16

# Разделитель строк в текстовом представлении
ROW_SEPARATOR: Final[str] = "\n"

# Разделитель ячеек внутри строки
CELL_SEPARATOR: Final[str] = ","

_MISSING = object()


# =============================================================================
# EXCEPTIONS
# =============================================================================


class MatrixError(Exception):
    """Базовая ошибка матричных операций."""


class InvalidShape(MatrixError, ValueError):
    """Неположительное количество строк/столбцов при создании матрицы."""


class ShapeMismatch(MatrixError, ValueError):
    """Операнды add/dot имеют несовместимые формы."""


class NotSquareMatrix(ShapeMismatch):
    """Операция определена только для квадратных матриц (det, trace, ...)."""


class SingularMatrix(MatrixError, ArithmeticError):
    """
    Обращение вырожденной матрицы: det(A) == 0.

    В том числе любая матрица с пропорциональными или одинаковыми строками.
    """


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class MatrixConfig:
    """Конфигурация численных толерантностей матричных операций."""

    # |det| <= singular_eps * Π ‖row_i‖ → SingularMatrix в invert()
    singular_eps: float = EPS_SINGULAR

    # Толерантности для is_close()
    compare_rel_tol: float = EPS_FLOAT_COMPARE_REL
    compare_abs_tol: float = EPS_FLOAT_COMPARE_ABS

    # det() логирует WARNING для матриц больше этого размера
    det_warn_size: int = DET_WARN_SIZE


DEFAULT_CONFIG: Final[MatrixConfig] = MatrixConfig()


# =============================================================================
# HELPERS
# =============================================================================


def _to_cell(value: Any) -> float:
    # str/bytes отклоняются явно: float("1.5") не должен проходить как число
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Matrix values must be numbers, got {value!r}")
    return float(value)


def _flatten(values: Any) -> Iterator[Any]:
    """
    Ленивое выравнивание вложенных последовательностей в row-major поток.

    Значения не проверяются: строки выдаются как листья, конверсия в
    float выполняется потребителем через _to_cell.
    """
    for value in values:
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            yield from _flatten(value)
        else:
            yield value


def _create(rows: int, cols: int) -> list[list[float]]:
    return [[0.0] * cols for _ in range(rows)]


def _format_cell(value: float) -> str:
    # Целые значения без дробной части: 1.0 → "1"
    if is_valid_float(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _hadamard_bound(cells: Sequence[Sequence[float]]) -> float:
    """Верхняя граница |det|: произведение евклидовых норм строк."""
    return math.prod(math.hypot(*row) for row in cells)


def _laplace_det(cells: Sequence[Sequence[float]]) -> float:
    """
    Определитель разложением Лапласа по первой строке.

    Минор на глубине k состоит из строк k..n-1 и оставшегося набора столбцов,
    поэтому его определитель кэшируется по (строка, столбцы). Арифметика та же,
    что у прямой рекурсии; стоимость O(n * 2^n) вместо O(n!).
    """

    @cache
    def minor_det(row: int, cols: tuple[int, ...]) -> float:
        if len(cols) == 1:
            return cells[row][cols[0]]
        if len(cols) == 2:
            a, b = cols
            return (cells[row][a] * cells[row + 1][b]) - (cells[row][b] * cells[row + 1][a])

        total = 0.0
        for k, col in enumerate(cols):
            sign = -1.0 if k % 2 else 1.0
            rest = cols[:k] + cols[k + 1:]
            total += cells[row][col] * (sign * minor_det(row + 1, rest))
        return total

    return minor_det(0, tuple(range(len(cells))))


# =============================================================================
# ROW VIEW
# =============================================================================


class MatrixRow(MutableSequence):
    """
    Строка матрицы фиксированной длины поверх live storage.

    Запись ячейки конвертирует значение в float. insert/удаление запрещены,
    поэтому append, pop, extend, remove, clear и ``+=`` дают TypeError
    и длина строки всегда равна size[1].
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: list[float]):
        self._cells = cells

    def __len__(self) -> int:
        return len(self._cells)

    def __getitem__(self, index: int | slice) -> Any:
        # Срез отдаёт копию, а не view
        return self._cells[index]

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError("Matrix rows do not support slice assignment")
        self._cells[index] = _to_cell(value)

    def __delitem__(self, index: int | slice) -> None:
        raise TypeError("Matrix rows have fixed length")

    def insert(self, index: int, value: Any) -> None:
        raise TypeError("Matrix rows have fixed length")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MatrixRow):
            return self._cells == other._cells
        if isinstance(other, (list, tuple)):
            return self._cells == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MatrixRow({self._cells!r})"


# =============================================================================
# MATRIX
# =============================================================================


class Matrix:
    """
    Плотная матрица double-precision.

    Форма фиксирована, содержимое изменяемо через:
    - bulk-присваивание ``matrix.rows = values``
    - запись ячейки ``matrix.rows[i][j] = v`` или ``matrix[i, j] = v``

    Все методы высокого уровня можно вызывать и как ``a.dot(b)``,
    и как ``Matrix.dot(a, b)``.

    Examples:
        >>> a = Matrix(2, 2, [1, 2, 3, 4])
        >>> a.det()
        -2.0
        >>> print(a.transpose())
        1,3
        2,4
    """

    def __init__(self, rows: int, cols: int | None = None, values: Any = None):
        """
        Создание матрицы rows x cols (или n x n), заполненной нулями.

        Args:
            rows: Количество строк (или n для квадратной матрицы)
            cols: Количество столбцов (default: rows)
            values: Начальные значения, плоские или вложенные (optional)

        Raises:
            InvalidShape: если rows <= 0 или cols <= 0
        """
        if cols is None:
            cols = rows

        try:
            self._shape = MatrixShape(rows=rows, cols=cols)
        except ValidationError as e:
            raise InvalidShape(f"Matrix shape must be positive, got ({rows}, {cols})") from e

        self._rows = _create(self._shape.rows, self._shape.cols)

        if values is not None:
            self.rows = values

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def unit(cls, n: int) -> "Matrix":
        """Матрица n x n из единиц."""
        temp = cls(n)
        for i, j in temp.indexes():
            temp._rows[i][j] = 1.0
        return temp

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        """Единичная матрица n x n."""
        temp = cls(n)
        for i in range(n):
            temp._rows[i][i] = 1.0
        return temp

    @classmethod
    def diagonal(cls, values: Any) -> "Matrix":
        """
        Диагональная матрица n x n из n значений.

        Examples:
            >>> Matrix.diagonal([1, 2, 3]).to_list()
            [[1.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 3.0]]
        """
        diag = [_to_cell(v) for v in _flatten(values)]
        temp = cls(len(diag))
        for i, value in enumerate(diag):
            temp._rows[i][i] = value
        return temp

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Matrix":
        """
        Восстановление матрицы из JSON документа.

        Raises:
            pydantic.ValidationError: если документ не соответствует MatrixDocument
        """
        document = MatrixDocument.model_validate(data)
        rows, cols = document.size
        return cls(rows, cols, document.rows)

    # -------------------------------------------------------------------------
    # Shape & storage
    # -------------------------------------------------------------------------

    @property
    def size(self) -> tuple[int, int]:
        """Форма (rows, cols). Только для чтения."""
        return self._shape.as_tuple()

    @property
    def shape(self) -> MatrixShape:
        return self._shape

    @property
    def rows(self) -> tuple[MatrixRow, ...]:
        """
        Строки матрицы как view фиксированной длины.

        Кортеж не позволяет заменить строку целиком; запись в ячейку
        ``rows[i][j] = v`` изменяет матрицу, длина строки не меняется.
        """
        return tuple(MatrixRow(row) for row in self._rows)

    @rows.setter
    def rows(self, values: Any) -> None:
        """
        Bulk-присваивание значений в row-major порядке.

        - Значений больше rows*cols: лишние отбрасываются
        - Значений меньше: перезаписываются только первые ячейки,
          остальные сохраняют прежнее значение
        - Форма матрицы не меняется никогда
        """
        rows, cols = self.size
        capacity = rows * cols

        flat = _flatten(values)
        incoming = [_to_cell(value) for _, value in zip(range(capacity), flat)]
        truncated = len(incoming) == capacity and next(flat, _MISSING) is not _MISSING

        # Ячейки пишутся только после успешной конверсии всех значений
        for index, value in enumerate(incoming):
            row, col = divmod(index, cols)
            self._rows[row][col] = value

        if truncated:
            logger.debug("Bulk assignment truncated to %d cells for shape %s", capacity, self.size)

    def indexes(self, offset: int = 0) -> Iterator[tuple[int, int]]:
        """
        Все пары (row, col) в row-major порядке.

        Args:
            offset: Сдвиг, добавляемый к обоим индексам (default: 0)
        """
        rows, cols = self.size
        for i in range(rows):
            for j in range(cols):
                yield (i + offset, j + offset)

    def to_list(self) -> list[list[float]]:
        """Глубокая копия ячеек."""
        return [list(row) for row in self._rows]

    def clone(self) -> "Matrix":
        """Глубокая копия: та же форма, те же значения, без общего storage."""
        rows, cols = self.size
        return type(self)(rows, cols, self._rows)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def transpose(self) -> "Matrix":
        """Транспонирование: result[j][i] = A[i][j]."""
        rows, cols = self.size
        temp = type(self)(cols, rows)
        for i, j in self.indexes():
            temp._rows[j][i] = self._rows[i][j]
        return temp

    def add(self, *addends: "Matrix") -> "Matrix":
        """
        Поэлементная сумма self и всех addends.

        Raises:
            ShapeMismatch: если формы операндов различаются
        """
        operands = (self, *addends)
        for matrix in addends:
            if matrix.size != self.size:
                raise ShapeMismatch(f"Cannot add matrices of shapes {self.size} and {matrix.size}")

        rows, cols = self.size
        total = type(self)(rows, cols)
        for matrix in operands:
            for i, j in matrix.indexes():
                total._rows[i][j] += matrix._rows[i][j]
        return total

    def multiply(self, k: float) -> "Matrix":
        """Умножение на скаляр k."""
        product = self.clone()
        for i, j in product.indexes():
            product._rows[i][j] *= k
        return product

    def dot(self, other: "Matrix") -> "Matrix":
        """
        Матричное произведение self · other.

        Некоммутативно: a.dot(b) != b.dot(a) в общем случае.

        Raises:
            ShapeMismatch: если cols(self) != rows(other)
        """
        m, p = self.size
        q, n = other.size
        if p != q:
            raise ShapeMismatch(f"Cannot multiply matrices of shapes {self.size} and {other.size}")

        product = type(self)(m, n)
        for i, j in product.indexes():
            total = 0.0
            for k in range(p):
                total += self._rows[i][k] * other._rows[k][j]
            product._rows[i][j] = total
        return product

    # -------------------------------------------------------------------------
    # Square-matrix algebra
    # -------------------------------------------------------------------------

    def _require_square(self, operation: str) -> int:
        rows, cols = self.size
        if rows != cols:
            raise NotSquareMatrix(f"{operation} requires a square matrix, got shape {self.size}")
        return rows

    def cofactor(self, i: int = 0, j: int = 0) -> float:
        """
        Алгебраическое дополнение (-1)^(i+j) * det(минор_ij).

        Для матрицы 1x1 минор пуст и cofactor(0, 0) == 1.

        Raises:
            NotSquareMatrix: если матрица не квадратная
            IndexError: если i или j вне [0, n)
        """
        n = self._require_square("cofactor")
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"Cofactor index ({i}, {j}) out of range for shape {self.size}")

        if n == 1:
            return 1.0

        minor = self.remove_row(i).remove_column(j)
        sign = -1.0 if (i + j) % 2 else 1.0
        return sign * _laplace_det(minor._rows)

    def det(self, config: MatrixConfig | None = None) -> float:
        """
        Определитель.

        - 1x1: единственная ячейка
        - 2x2: A[0][0]*A[1][1] - A[0][1]*A[1][0]
        - n x n: разложение Лапласа по первой строке

        Raises:
            NotSquareMatrix: если матрица не квадратная
        """
        cfg = config or DEFAULT_CONFIG
        n = self._require_square("det")
        if n > cfg.det_warn_size:
            logger.warning("Cofactor determinant of a %dx%d matrix may be slow", n, n)
        return _laplace_det(self._rows)

    def adj(self) -> "Matrix":
        """Присоединённая матрица: транспонированная матрица алгебраических дополнений."""
        n = self._require_square("adj")
        cofactors = type(self)(n)
        for i, j in cofactors.indexes():
            cofactors._rows[i][j] = self.cofactor(i, j)
        return cofactors.transpose()

    def invert(self, config: MatrixConfig | None = None) -> "Matrix":
        """
        Обратная матрица adj(A) / det(A).

        Raises:
            NotSquareMatrix: если матрица не квадратная
            SingularMatrix: если |det(A)| <= singular_eps * Π ‖row_i‖
        """
        cfg = config or DEFAULT_CONFIG
        determinant = self.det(cfg)
        # Порог относителен масштабу: |det| ограничен произведением норм строк
        if is_zero(determinant, cfg.singular_eps * _hadamard_bound(self._rows)):
            logger.warning("Refusing to invert singular matrix of shape %s (det=%r)", self.size, determinant)
            raise SingularMatrix(f"Matrix of shape {self.size} is singular (det={determinant!r})")
        return self.adj().multiply(1.0 / determinant)

    def trace(self) -> float:
        """Сумма главной диагонали."""
        n = self._require_square("trace")
        return sum(self._rows[i][i] for i in range(n))

    # -------------------------------------------------------------------------
    # Row / column removal
    # -------------------------------------------------------------------------

    def remove_row(self, index: int) -> "Matrix":
        """
        Новая матрица без строки index.

        Индекс вне [0, rows) → неизменённая копия (no-op clamp, не ошибка).
        Удаление единственной строки даёт InvalidShape.
        """
        rows, cols = self.size
        if index < 0 or index >= rows:
            return self.clone()
        kept = [row for k, row in enumerate(self._rows) if k != index]
        return type(self)(rows - 1, cols, kept)

    def remove_column(self, index: int) -> "Matrix":
        """
        Новая матрица без столбца index.

        Индекс вне [0, cols) → неизменённая копия (no-op clamp, не ошибка).
        """
        rows, cols = self.size
        if index < 0 or index >= cols:
            return self.clone()
        kept = [row[:index] + row[index + 1:] for row in self._rows]
        return type(self)(rows, cols - 1, kept)

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    @property
    def is_square(self) -> bool:
        return self._shape.is_square

    @property
    def is_diagonal(self) -> bool:
        """Квадратная и все внедиагональные ячейки == 0."""
        if not self.is_square:
            return False
        return all(self._rows[i][j] == 0 for i, j in self.indexes() if i != j)

    @property
    def is_symmetric(self) -> bool:
        """Квадратная и A[i][j] == A[j][i]."""
        if not self.is_square:
            return False
        return all(self._rows[i][j] == self._rows[j][i] for i, j in self.indexes() if i < j)

    def satisfies(self, square: bool = False, diagonal: bool = False, symmetric: bool = False) -> bool:
        """
        Композиция предикатов: логическое AND всех запрошенных проверок.

        Без запрошенных проверок возвращает True.
        """
        checks = (
            (square, lambda: self.is_square),
            (diagonal, lambda: self.is_diagonal),
            (symmetric, lambda: self.is_symmetric),
        )
        return all(check() for requested, check in checks if requested)

    def is_close(
        self,
        other: "Matrix",
        rel_tol: float | None = None,
        abs_tol: float | None = None,
        config: MatrixConfig | None = None,
    ) -> bool:
        """Поэлементное сравнение с толерантностью; формы должны совпадать."""
        cfg = config or DEFAULT_CONFIG
        if self.size != other.size:
            return False
        return grid_is_close(
            self._rows,
            other._rows,
            rel_tol=cfg.compare_rel_tol if rel_tol is None else rel_tol,
            abs_tol=cfg.compare_abs_tol if abs_tol is None else abs_tol,
        )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_string(self, row_separator: str = ROW_SEPARATOR) -> str:
        """Строки через row_separator, ячейки через запятую: "1,2\\n3,4"."""
        return row_separator.join(
            CELL_SEPARATOR.join(_format_cell(value) for value in row) for row in self._rows
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON документ {"size": [rows, cols], "rows": [[...]]}."""
        document = MatrixDocument(size=self.size, rows=self.to_list())
        return document.model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, key: tuple[int, int] | int) -> Any:
        if isinstance(key, tuple):
            i, j = key
            return self._rows[i][j]
        return list(self._rows[key])

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        i, j = key
        self._rows[i][j] = _to_cell(value)

    def __len__(self) -> int:
        return self.size[0]

    def __iter__(self) -> Iterator[list[float]]:
        for row in self._rows:
            yield list(row)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.size == other.size and self._rows == other._rows

    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: object) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __mul__(self, k: object) -> "Matrix":
        if not isinstance(k, numbers.Real):
            return NotImplemented
        return self.multiply(float(k))

    __rmul__ = __mul__

    def __matmul__(self, other: object) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.dot(other)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        rows, cols = self.size
        return f"{type(self).__name__}({rows}, {cols}, {self.to_list()!r})"
