import unittest

import pytest

import pydense


class TestElementAccess(unittest.TestCase):
    def test_row_major_layout(self):
        m = pydense.IntegerMatrix(2, 3)
        for i in range(2):
            for j in range(3):
                m[i, j] = i * 3 + j
        self.assertEqual(m.to_list(), [0, 1, 2, 3, 4, 5])

    def test_checked_and_unchecked_agree(self):
        m = pydense.matrix([[1, 2], [3, 4]])
        for i in range(2):
            for j in range(2):
                self.assertEqual(m.at(i, j), m.get(i, j))
                self.assertEqual(m[i, j], m.get(i, j))

    def test_set_at_and_set_write_the_same_cell(self):
        m = pydense.FloatMatrix(2, 2)
        m.set_at(1, 0, 2.5)
        self.assertEqual(m.get(1, 0), 2.5)
        m.set(0, 1, -1.0)
        self.assertEqual(m.at(0, 1), -1.0)

    def test_checked_access_out_of_range(self):
        m = pydense.Matrix(2, 3)
        for key in [(2, 0), (0, 3), (5, 5), (-1, 0), (0, -1)]:
            with self.assertRaises(pydense.IndexOutOfRange):
                m.at(*key)
            with self.assertRaises(IndexError):
                m[key]
            with self.assertRaises(pydense.IndexOutOfRange):
                m[key] = 1.0

    def test_empty_matrix_has_no_valid_index(self):
        with self.assertRaises(pydense.IndexOutOfRange):
            pydense.Matrix(0, 0).at(0, 0)

    def test_index_must_be_a_pair_of_integers(self):
        m = pydense.Matrix(2, 2)
        with self.assertRaises(TypeError):
            m[0]
        with self.assertRaises(TypeError):
            m[0.5, 1]

    def test_shape_queries(self):
        m = pydense.Matrix(3, 4)
        self.assertEqual(m.size(), 12)
        self.assertFalse(m.is_empty())
        self.assertTrue(pydense.Matrix(0, 4).is_empty())


class TestCursor(unittest.TestCase):
    def test_begin_end_distance_is_element_count(self):
        m = pydense.Matrix(3, 4)
        self.assertEqual(m.end() - m.begin(), 12)
        empty = pydense.Matrix()
        self.assertEqual(empty.end() - empty.begin(), 0)

    def test_iteration_is_row_major(self):
        m = pydense.matrix([[1, 2, 3], [4, 5, 6]])
        self.assertEqual(list(m), [1, 2, 3, 4, 5, 6])
        self.assertEqual(list(pydense.Matrix(0, 3)), [])

    def test_random_access(self):
        m = pydense.matrix([[1, 2, 3], [4, 5, 6]])
        pos = m.begin() + 4
        self.assertEqual(pos.get(), 5)
        self.assertEqual(pos[-1], 4)
        self.assertEqual(pos.offset, 4)
        pos -= 2
        self.assertEqual(pos.get(), 3)
        pos[1] = 40
        self.assertEqual(m[1, 0], 40)

    def test_writes_go_through_to_the_matrix(self):
        m = pydense.IntegerMatrix(2, 2)
        pos = m.begin()
        while pos < m.end():
            pos.set(7)
            pos += 1
        self.assertEqual(m.to_list(), [7, 7, 7, 7])

    def test_comparison(self):
        m = pydense.Matrix(2, 2)
        self.assertEqual(m.begin() + 4, m.end())
        self.assertTrue(m.begin() < m.end())
        self.assertTrue(m.end() >= m.begin() + 1)

    def test_cursors_over_different_buffers(self):
        a = pydense.Matrix(2, 2)
        b = pydense.Matrix(2, 2)
        self.assertNotEqual(a.begin(), b.begin())
        with self.assertRaises(ValueError):
            _ = a.end() - b.begin()


def test_unchecked_access_uses_row_major_offset():
    m = pydense.matrix([[1, 2], [3, 4]])
    # Row overflow into the next row is the row-major offset, not an error.
    assert m.get(0, 2) == 3


def test_cursor_is_not_hashable():
    with pytest.raises(TypeError):
        hash(pydense.Matrix(1).begin())
