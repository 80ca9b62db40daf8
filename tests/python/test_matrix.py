"""
Tests for SparseMatrix construction, element access and mutation.
"""

import copy
import io
from fractions import Fraction

import numpy as np
import pytest

from sparsemat import (
    SparseMatrix,
    SparseMatrixError,
    OutOfRangeError,
    InvalidDimensionsError,
    from_dense,
    float64,
    int64,
)
from conftest import dense_rows


class TestSparseMatrixCreation:
    """Test SparseMatrix creation."""

    def test_create_square(self):
        """Single dimension creates a square matrix."""
        mat = SparseMatrix(4)
        assert mat.shape == (4, 4)
        assert mat.get_row_count() == 4
        assert mat.get_column_count() == 4
        assert mat.nnz == 0

    def test_create_general(self):
        """Two dimensions create a rows x columns matrix."""
        mat = SparseMatrix(2, 5)
        assert mat.shape == (2, 5)
        assert mat.rows == 2
        assert mat.cols == 5

    def test_empty_state(self):
        """New matrix has zero row offsets and no stored elements."""
        mat = SparseMatrix(3, 2)
        assert mat.row_start.tolist() == [0, 0, 0, 0]
        assert mat.values.tolist() == []
        assert mat.col_index.tolist() == []
        assert all(v == 0.0 for row in dense_rows(mat) for v in row)

    def test_default_dtype(self):
        """float64 is the default element type."""
        mat = SparseMatrix(2)
        assert mat.dtype == 'float64'
        assert mat.default == 0.0

    def test_dtype_enum(self):
        """DType constants are accepted."""
        mat = SparseMatrix(2, dtype=int64)
        assert mat.dtype == 'int64'
        assert mat.default == 0
        assert isinstance(mat.get(0, 0), int)

    def test_object_dtype_with_default(self):
        """Arbitrary element types use the object dtype."""
        mat = SparseMatrix(2, 3, dtype='object', default=Fraction(0))
        mat.set(Fraction(1, 2), 0, 2)
        assert mat.get(0, 2) == Fraction(1, 2)
        assert mat.get(1, 1) == Fraction(0)

    @pytest.mark.parametrize("rows, cols", [(0, 1), (1, 0), (-1, 3), (3, -2)])
    def test_invalid_dimensions(self, rows, cols):
        """Dimensions below one are rejected."""
        with pytest.raises(InvalidDimensionsError):
            SparseMatrix(rows, cols)

    def test_invalid_dimensions_is_value_error(self):
        """InvalidDimensionsError is a ValueError."""
        with pytest.raises(ValueError):
            SparseMatrix(0)

    def test_non_integer_dimensions(self):
        """Float dimensions are rejected."""
        with pytest.raises(InvalidDimensionsError):
            SparseMatrix(2.5, 3)

    def test_invalid_dtype(self):
        """Unknown dtype names raise ValueError."""
        with pytest.raises(ValueError):
            SparseMatrix(2, dtype='float16')


class TestElementAccess:
    """Test get/set semantics."""

    def test_get_after_set(self):
        """get returns the value just set."""
        mat = SparseMatrix(3, 4)
        mat.set(7.5, 2, 3)
        assert mat.get(2, 3) == 7.5

    def test_get_unset_returns_default(self):
        """Positions never set return the default."""
        mat = SparseMatrix(3, 4)
        mat.set(7.5, 2, 3)
        assert mat.get(2, 2) == 0.0
        assert mat.get(0, 0) == 0.0

    def test_set_returns_self(self):
        """set supports chaining."""
        mat = SparseMatrix(2)
        assert mat.set(1.0, 0, 0) is mat
        mat.set(2.0, 0, 1).set(3.0, 1, 0)
        assert mat.nnz == 3

    def test_overwrite_keeps_nnz(self):
        """Re-setting a stored position updates it in place."""
        mat = SparseMatrix(3)
        mat.set(1.0, 1, 1)
        mat.set(4.0, 1, 1)
        assert mat.nnz == 1
        assert mat.get(1, 1) == 4.0

    def test_set_default_removes(self):
        """Writing the default removes the element."""
        mat = SparseMatrix(3)
        mat.set(1.0, 0, 1).set(2.0, 1, 1).set(3.0, 2, 0)
        mat.set(0.0, 1, 1)
        assert mat.nnz == 2
        assert mat.get(1, 1) == 0.0
        assert mat.row_start.tolist() == [0, 1, 1, 2]
        mat.check_format()

    def test_set_default_on_empty_is_noop(self):
        """Writing the default to an empty position stores nothing."""
        mat = SparseMatrix(3)
        mat.set(1.0, 0, 0)
        mat.set(0.0, 2, 2)
        assert mat.nnz == 1
        assert mat.row_start.tolist() == [0, 1, 1, 1]

    def test_insert_keeps_columns_sorted(self):
        """Columns within a row stay sorted regardless of insert order."""
        mat = SparseMatrix(2, 6)
        for col in [4, 1, 5, 0, 2]:
            mat.set(float(col + 1), 0, col)
        mat.set(9.0, 1, 3)
        assert mat.col_index.tolist() == [0, 1, 2, 4, 5, 3]
        assert mat.values.tolist() == [1.0, 2.0, 3.0, 5.0, 6.0, 9.0]
        assert mat.row_start.tolist() == [0, 5, 6]
        mat.check_format()

    def test_row_shift_on_insert(self):
        """Inserting into an early row shifts later row offsets."""
        mat = SparseMatrix(3)
        mat.set(1.0, 2, 2)
        mat.set(2.0, 1, 0)
        mat.set(3.0, 0, 1)
        assert mat.row_start.tolist() == [0, 1, 2, 3]
        assert dense_rows(mat) == [[0.0, 3.0, 0.0], [2.0, 0.0, 0.0], [0.0, 0.0, 1.0]]

    def test_int_dtype_coerces_before_default_check(self):
        """Values truncated to the default are not stored."""
        mat = SparseMatrix(2, dtype='int64')
        mat.set(0.4, 0, 0)
        assert mat.nnz == 0
        mat.set(2.9, 0, 0)
        assert mat.get(0, 0) == 2

    def test_set_none_rejected(self):
        """None is not a numeric value."""
        mat = SparseMatrix(2)
        with pytest.raises(TypeError):
            mat.set(None, 0, 0)
        assert mat.nnz == 0

    def test_object_matrix_accepts_none(self):
        mat = SparseMatrix(2, dtype='object')
        mat.set(None, 0, 1)
        assert mat.get(0, 1) is None

    def test_custom_default(self):
        """A non-zero default is never stored."""
        mat = SparseMatrix(2, dtype='int64', default=-1)
        assert mat.get(1, 1) == -1
        mat.set(0, 0, 0)
        assert mat.nnz == 1
        mat.set(-1, 0, 0)
        assert mat.nnz == 0

    def test_many_inserts_grow_buffers(self):
        """Buffers grow past their initial capacity."""
        mat = SparseMatrix(20, 20)
        for i in range(20):
            for j in range(i % 3, 20, 3):
                mat.set(float(i * 20 + j + 1), i, j)
        for i in range(20):
            for j in range(20):
                expected = float(i * 20 + j + 1) if (j - i % 3) % 3 == 0 and j >= i % 3 else 0.0
                assert mat.get(i, j) == expected
        mat.check_format()

    def test_indexing_sugar(self):
        """mat[r, c] reads and writes elements."""
        mat = SparseMatrix(2)
        mat[0, 1] = 5.0
        assert mat[0, 1] == 5.0
        assert mat.get(0, 1) == 5.0
        mat[0, 1] = 0.0
        assert mat.nnz == 0

    def test_indexing_requires_pair(self):
        """A single index is not supported."""
        mat = SparseMatrix(2)
        with pytest.raises(TypeError):
            mat[0]

    def test_numpy_integer_coordinates(self):
        """numpy integers are valid coordinates."""
        mat = SparseMatrix(2)
        mat.set(1.0, np.int64(1), np.int32(0))
        assert mat.get(np.int64(1), np.int64(0)) == 1.0


class TestOutOfRange:
    """Coordinate validation."""

    @pytest.mark.parametrize("row, col", [(3, 0), (0, 4), (-1, 0), (0, -1), (10, 10)])
    def test_get_out_of_range(self, row, col):
        mat = SparseMatrix(3, 4)
        with pytest.raises(OutOfRangeError):
            mat.get(row, col)

    @pytest.mark.parametrize("row, col", [(3, 0), (0, 4), (-1, 0), (0, -1)])
    def test_set_out_of_range(self, row, col):
        mat = SparseMatrix(3, 4)
        mat.set(1.0, 1, 1)
        with pytest.raises(OutOfRangeError):
            mat.set(2.0, row, col)
        # No partial mutation
        assert mat.nnz == 1
        assert mat.row_start.tolist() == [0, 0, 1, 1]

    def test_out_of_range_is_index_error(self):
        """OutOfRangeError derives from IndexError and the library base."""
        mat = SparseMatrix(2)
        with pytest.raises(IndexError):
            mat.get(2, 0)
        with pytest.raises(SparseMatrixError) as excinfo:
            mat.get(0, 2)
        assert excinfo.value.code == SparseMatrixError.ERROR_INDEX_OUT_OF_BOUNDS

    def test_non_integer_coordinates(self):
        mat = SparseMatrix(2)
        with pytest.raises(TypeError):
            mat.get(0.5, 0)


class TestCopy:
    """Deep copy semantics."""

    def test_copy_is_equal(self, small_matrix):
        dup = small_matrix.copy()
        assert dup == small_matrix
        assert dup is not small_matrix

    def test_copy_is_independent(self, small_matrix):
        """Mutating the copy leaves the source untouched."""
        dup = small_matrix.copy()
        dup.set(99, 0, 1)
        dup.set(0, 2, 3)
        assert small_matrix.get(0, 1) == 0
        assert small_matrix.get(2, 3) == 6
        assert small_matrix.nnz == 6
        assert dup != small_matrix

    def test_copy_module(self, small_matrix):
        """copy.copy and copy.deepcopy produce independent matrices."""
        shallow = copy.copy(small_matrix)
        deep = copy.deepcopy(small_matrix)
        small_matrix.set(42, 1, 0)
        assert shallow.get(1, 0) == 0
        assert deep.get(1, 0) == 0

    def test_copy_preserves_dtype_and_default(self):
        mat = SparseMatrix(2, dtype='int64', default=7)
        mat.set(1, 0, 0)
        dup = mat.copy()
        assert dup.dtype == 'int64'
        assert dup.default == 7
        assert dup.get(1, 1) == 7


class TestEquality:
    """Structural equality."""

    def test_insertion_order_independent(self):
        """Same final elements in any order compare equal."""
        a = SparseMatrix(3)
        a.set(1.0, 0, 0).set(2.0, 1, 2).set(3.0, 2, 1)
        b = SparseMatrix(3)
        b.set(3.0, 2, 1).set(2.0, 1, 2).set(1.0, 0, 0)
        assert a == b
        assert not (a != b)

    def test_removed_entry_equal_to_never_set(self):
        a = SparseMatrix(2)
        a.set(1.0, 0, 0).set(5.0, 1, 1).set(0.0, 1, 1)
        b = SparseMatrix(2)
        b.set(1.0, 0, 0)
        assert a == b

    def test_different_values(self):
        a = SparseMatrix(2).set(1.0, 0, 0)
        b = SparseMatrix(2).set(2.0, 0, 0)
        assert a != b

    def test_different_shapes(self):
        """Empty matrices of different shapes differ."""
        assert SparseMatrix(2, 3) != SparseMatrix(3, 2)
        assert SparseMatrix(2) != SparseMatrix(2, 3)

    def test_compare_with_other_types(self):
        mat = SparseMatrix(2)
        assert (mat == "matrix") is False
        assert mat != [[0, 0], [0, 0]]

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(SparseMatrix(2))


class TestEntries:
    """Read-only views of stored elements."""

    def test_items_order(self, small_matrix):
        assert list(small_matrix.items()) == [
            (0, 0, 1), (0, 2, 2),
            (1, 1, 3), (1, 3, 4),
            (2, 0, 5), (2, 3, 6),
        ]

    def test_items_restartable(self, small_matrix):
        view = small_matrix.items()
        assert list(view) == list(view)
        assert len(view) == 6

    def test_row_helpers(self, small_matrix):
        assert small_matrix.row_length(1) == 2
        assert small_matrix.row_entries(2) == [(0, 5), (3, 6)]
        for col, val in small_matrix.row_entries(2):
            assert type(col) is int
            assert type(val) is int
        with pytest.raises(OutOfRangeError):
            small_matrix.row_length(3)

    def test_arrays_are_read_only(self, small_matrix):
        with pytest.raises(ValueError):
            small_matrix.values[0] = 100
        with pytest.raises(ValueError):
            small_matrix.row_start[1] = 0

    def test_density(self, small_matrix):
        assert small_matrix.density == pytest.approx(6 / 12)


class TestPrinting:
    """Dense-style textual output."""

    def test_str_grid(self, small_matrix):
        assert str(small_matrix) == "1 0 2 0\n0 3 0 4\n5 0 0 6"

    def test_print_to_stream(self):
        mat = from_dense([[1.5, 0.0], [0.0, 2.0]])
        buf = io.StringIO()
        assert mat.print_to(buf) is buf
        assert buf.getvalue() == "1.5 0.0\n0.0 2.0\n"

    def test_print_to_stdout(self, small_matrix, capsys):
        small_matrix.print_to()
        assert capsys.readouterr().out == "1 0 2 0\n0 3 0 4\n5 0 0 6\n"

    def test_print_object_elements(self):
        mat = SparseMatrix(1, 2, dtype='object', default=Fraction(0))
        mat.set(Fraction(1, 3), 0, 1)
        assert str(mat) == "0 1/3"

    def test_repr(self, small_matrix):
        assert repr(small_matrix) == "SparseMatrix(shape=(3, 4), nnz=6, dtype=int64)"

    def test_info(self, small_matrix):
        text = small_matrix.info()
        assert "shape: (3, 4)" in text
        assert "nnz: 6" in text
