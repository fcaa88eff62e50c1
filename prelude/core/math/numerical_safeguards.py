"""
Numerical Safeguards — Float Comparison Primitives

Модуль обеспечивает численно корректные сравнения для матричной алгебры:
- Epsilon-параметры для сравнений и детекции вырожденности
- NaN/Inf проверки
- Epsilon-сравнения float с учётом машинной точности
- Сравнение вложенных последовательностей (сетки ячеек матриц)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Float сравнения всегда учитывают машинную точность
2. Все операции детерминированы и воспроизводимы
3. Функции не мутируют аргументы
"""

import math
from typing import Final, Sequence

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для сравнения float (относительная толерантность)
# Используется в is_close для относительных сравнений
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Epsilon для сравнения float (абсолютная толерантность)
# Используется в is_close для абсолютных сравнений
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12

# Относительный порог вырожденности: |det| <= EPS_SINGULAR * Π ‖row_i‖ → матрица необратима
EPS_SINGULAR: Final[float] = 1e-12


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


# =============================================================================
# EPSILON-СРАВНЕНИЯ FLOAT
# =============================================================================


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)

    Args:
        a: Первое значение
        b: Второе значение
        rel_tol: Относительная толерантность (default: 1e-9)
        abs_tol: Абсолютная толерантность (default: 1e-12)

    Returns:
        True если значения близки с учётом толерантности

    Examples:
        >>> is_close(1.0, 1.0 + 1e-10)
        True
        >>> is_close(1.0, 1.1)
        False
        >>> is_close(0.0, 1e-13)
        True
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def is_zero(value: float, tol: float = EPS_FLOAT_COMPARE_ABS) -> bool:
    """
    Проверка, близко ли значение к нулю с учётом толерантности.

    Args:
        value: Проверяемое значение
        tol: Абсолютная толерантность (default: EPS_FLOAT_COMPARE_ABS)

    Returns:
        True если abs(value) <= tol
    """
    if tol < 0:
        raise ValueError(f"tol must be non-negative, got {tol}")
    return abs(value) <= tol


def grid_is_close(
    a: Sequence[Sequence[float]],
    b: Sequence[Sequence[float]],
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Поэлементное сравнение двух сеток (список строк) с толерантностью.

    Сетки разной формы никогда не равны.

    Examples:
        >>> grid_is_close([[1.0, 2.0]], [[1.0, 2.0 + 1e-12]])
        True
        >>> grid_is_close([[1.0]], [[1.0, 0.0]])
        False
    """
    if len(a) != len(b):
        return False

    for row_a, row_b in zip(a, b):
        if len(row_a) != len(row_b):
            return False
        for x, y in zip(row_a, row_b):
            if not is_close(x, y, rel_tol=rel_tol, abs_tol=abs_tol):
                return False

    return True
