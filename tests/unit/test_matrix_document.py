"""
Tests for Pydantic Matrix Models

Комплексное тестирование Pydantic V2 моделей:
- MatrixShape
- MatrixDocument

Покрывает:
- Создание и валидация моделей
- Инвариант формы документа
- JSON сериализация/десериализация
- Immutability (frozen=True)
- Совместимость с JSON Schema контрактом
"""

import pytest
from pydantic import ValidationError

from prelude.core.contracts import validate_matrix
from prelude.core.domain import MatrixDocument, MatrixShape


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def valid_document_data():
    """Валидный документ 2x3."""
    return {
        "size": [2, 3],
        "rows": [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
    }


# =============================================================================
# MATRIX SHAPE
# =============================================================================


class TestMatrixShape:
    """Тесты для MatrixShape"""

    def test_valid_shape(self) -> None:
        shape = MatrixShape(rows=2, cols=3)
        assert shape.as_tuple() == (2, 3)
        assert shape.capacity == 6
        assert not shape.is_square

    def test_square_shape(self) -> None:
        assert MatrixShape(rows=4, cols=4).is_square

    def test_zero_rows_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            MatrixShape(rows=0, cols=3)
        assert "rows" in str(exc_info.value)

    def test_negative_cols_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            MatrixShape(rows=3, cols=-1)
        assert "cols" in str(exc_info.value)

    def test_shape_is_immutable(self) -> None:
        shape = MatrixShape(rows=2, cols=2)
        with pytest.raises(ValidationError):
            shape.rows = 5  # type: ignore

    def test_shapes_compare_by_value(self) -> None:
        assert MatrixShape(rows=2, cols=3) == MatrixShape(rows=2, cols=3)
        assert MatrixShape(rows=2, cols=3) != MatrixShape(rows=3, cols=2)


# =============================================================================
# MATRIX DOCUMENT
# =============================================================================


class TestMatrixDocument:
    """Тесты для MatrixDocument"""

    def test_valid_document(self, valid_document_data) -> None:
        document = MatrixDocument(**valid_document_data)
        assert document.size == (2, 3)
        assert document.rows[1] == [4.0, 5.0, 6.0]
        assert document.shape == MatrixShape(rows=2, cols=3)

    def test_integers_coerced_to_float(self) -> None:
        document = MatrixDocument(size=[1, 2], rows=[[1, 2]])
        assert document.rows == [[1.0, 2.0]]
        assert all(isinstance(value, float) for value in document.rows[0])

    def test_row_count_mismatch(self, valid_document_data) -> None:
        valid_document_data["rows"].append([7.0, 8.0, 9.0])
        with pytest.raises(ValidationError) as exc_info:
            MatrixDocument(**valid_document_data)
        assert "expected 2 rows" in str(exc_info.value)

    def test_row_length_mismatch(self, valid_document_data) -> None:
        valid_document_data["rows"][1] = [4.0, 5.0]
        with pytest.raises(ValidationError) as exc_info:
            MatrixDocument(**valid_document_data)
        assert "row 1" in str(exc_info.value)

    def test_non_positive_size(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            MatrixDocument(size=[0, 1], rows=[[1.0]])
        assert "size must be positive" in str(exc_info.value)

    def test_non_numeric_cell(self) -> None:
        with pytest.raises(ValidationError):
            MatrixDocument(size=[1, 1], rows=[["abc"]])

    def test_empty_rows_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MatrixDocument(size=[1, 1], rows=[])

    def test_document_is_immutable(self, valid_document_data) -> None:
        document = MatrixDocument(**valid_document_data)
        with pytest.raises(ValidationError):
            document.size = (3, 3)  # type: ignore

    def test_json_roundtrip(self, valid_document_data) -> None:
        document = MatrixDocument(**valid_document_data)
        restored = MatrixDocument.model_validate_json(document.model_dump_json())
        assert restored == document

    def test_dump_matches_contract(self, valid_document_data) -> None:
        """model_dump(mode='json') проходит JSON Schema контракт"""
        document = MatrixDocument(**valid_document_data)
        dumped = document.model_dump(mode="json")
        assert dumped == valid_document_data
        validate_matrix(dumped)
