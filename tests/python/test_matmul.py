import os
import unittest
import warnings

import numpy as np
import pytest

import pydense


class TestMatmul(unittest.TestCase):
    def test_identity_is_neutral(self):
        m = pydense.matrix([[1, 2], [3, 4]])
        self.assertTrue(pydense.identity(2, dtype="int32") * m == m)
        self.assertTrue(m @ pydense.identity(2, dtype="int32") == m)

    def test_dot_product_accumulates(self):
        a = pydense.matrix([[1, 2], [3, 4]])
        b = pydense.matrix([[5, 6], [7, 8]])
        self.assertEqual((a * b).to_nested(), [[19, 22], [43, 50]])
        self.assertEqual((a @ b).to_nested(), [[19, 22], [43, 50]])

    def test_rectangular_product_shape(self):
        a = pydense.matrix([[1, 2, 3], [4, 5, 6]])
        b = pydense.matrix([[1], [0], [-1]])
        c = a @ b
        self.assertEqual(c.shape, (2, 1))
        self.assertEqual(c.to_nested(), [[-2], [-2]])

    def test_in_place_product_replaces_receiver(self):
        a = pydense.matrix([[1, 2, 3]])
        alias = a
        a *= pydense.matrix([[1, 0], [0, 1], [1, 1]])
        self.assertIs(a, alias)
        self.assertEqual(a.shape, (1, 2))
        self.assertEqual(a.to_nested(), [[4, 5]])

    def test_self_product(self):
        a = pydense.matrix([[1, 1], [0, 1]])
        a.matmul(a)
        self.assertEqual(a.to_nested(), [[1, 2], [0, 1]])

    def test_matches_numpy(self):
        rng = np.random.default_rng(11)
        a_np = rng.uniform(-1, 1, size=(4, 6))
        b_np = rng.uniform(-1, 1, size=(6, 3))
        c = pydense.matrix(a_np) @ pydense.matrix(b_np)
        self.assertTrue(c == pydense.matrix(a_np @ b_np))

    def test_dimension_mismatch(self):
        a = pydense.Matrix(2, 3)
        b = pydense.Matrix(2, 3)
        with self.assertRaises(pydense.DimensionMismatch):
            a @ b
        with self.assertRaises(pydense.DimensionMismatch):
            a.mul(b)
        self.assertEqual(a.shape, (2, 3))

    def test_empty_inner_dimension_yields_zeros(self):
        c = pydense.Matrix(2, 0) @ pydense.Matrix(0, 3)
        self.assertEqual(c.shape, (2, 3))
        self.assertEqual(c.sum(), 0)

    def test_mixed_dtype(self):
        a = pydense.matrix([[1.5, 0.0], [0.0, 1.0]])
        b = pydense.matrix([[2, 0], [0, 3]])
        c = a @ b
        self.assertEqual(c.dtype, "float64")
        self.assertEqual(c.to_nested(), [[3.0, 0.0], [0.0, 3.0]])

    def test_mixed_dtype_not_convertible(self):
        a = pydense.matrix([[1, 0], [0, 1]])
        b = pydense.matrix([[2.0, 0.0], [0.0, 3.0]])
        with self.assertRaises(pydense.TypeNotConvertible):
            a @ b
        self.assertEqual(a.to_nested(), [[1, 0], [0, 1]])

    def test_non_matrix_operand(self):
        with self.assertRaises(TypeError):
            pydense.Matrix(1) @ 2.0


class TestIntegerMatmulOverflowRiskWarning(unittest.TestCase):
    def test_overflow_risk_preflight_warns(self):
        a = pydense.IntegerMatrix(2)
        b = pydense.IntegerMatrix(2)

        # 46340^2 < 2^31-1, but the bound inner*max|A|*max|B| exceeds it.
        v = 46340
        a[0, 0] = v
        b[0, 0] = v

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            c = a @ b

        self.assertEqual(c[0, 0], v * v)

        hits = [
            item
            for item in w
            if "matmul preflight" in str(item.message)
            and "may overflow int32 output" in str(item.message)
        ]
        self.assertGreaterEqual(len(hits), 1)
        self.assertTrue(issubclass(hits[0].category, pydense.PyDenseOverflowRiskWarning))


def test_small_integer_products_do_not_warn():
    a = pydense.matrix([[1, 2], [3, 4]])
    with warnings.catch_warnings():
        warnings.simplefilter("error", pydense.PyDenseOverflowRiskWarning)
        a @ a


def test_float_products_skip_overflow_preflight():
    a = pydense.FloatMatrix(2, 2, 1e300)
    with warnings.catch_warnings():
        warnings.simplefilter("error", pydense.PyDenseOverflowRiskWarning)
        c = a @ a
    assert c.shape == (2, 2)


def test_dimension_mismatch_message_names_shapes():
    with pytest.raises(pydense.DimensionMismatch) as exc:
        pydense.Matrix(1, 2) @ pydense.Matrix(3, 1)
    assert "(1, 2)" in str(exc.value)
    assert "(3, 1)" in str(exc.value)


class TestMatmulKernels(unittest.TestCase):
    def test_large_float_product_matches_numpy(self):
        rng = np.random.default_rng(5)
        a_np = rng.uniform(-1, 1, size=(60, 70))
        b_np = rng.uniform(-1, 1, size=(70, 50))
        c = pydense.matrix(a_np) @ pydense.matrix(b_np)
        self.assertEqual(c.shape, (60, 50))
        self.assertTrue(np.allclose(c.to_numpy(), a_np @ b_np))

    def test_integer_product_keeps_dtype(self):
        a = pydense.matrix(np.arange(12, dtype=np.int16).reshape(3, 4))
        b = pydense.matrix(np.arange(8, dtype=np.int16).reshape(4, 2))
        c = a @ b
        self.assertEqual(c.dtype, "int16")
        self.assertEqual(c.to_nested(), (np.arange(12).reshape(3, 4) @ np.arange(8).reshape(4, 2)).tolist())

    def test_bool_product(self):
        a = pydense.matrix([[True, False], [False, False]])
        b = pydense.matrix([[False, True], [True, True]])
        self.assertEqual((a @ b).to_nested(), [[False, True], [False, False]])


def test_generic_loop_without_numpy_kernel(monkeypatch):
    a = pydense.matrix([[1, 2], [3, 4]])
    b = pydense.matrix([[5, 6], [7, 8]])

    def no_kernel(*args, **kwargs):
        raise TypeError("no matmul loop for this dtype")

    monkeypatch.setattr(np, "matmul", no_kernel)
    c = a @ b
    assert c.dtype == "int32"
    assert c.to_nested() == [[19, 22], [43, 50]]


class TestOverflowWarningLocation(unittest.TestCase):
    def _risky_pair(self):
        a = pydense.IntegerMatrix(2)
        b = pydense.IntegerMatrix(2)
        a[0, 0] = 46340
        b[0, 0] = 46340
        return a, b

    def _assert_reported_here(self, record):
        hits = [w for w in record if issubclass(w.category, pydense.PyDenseOverflowRiskWarning)]
        self.assertEqual(len(hits), 1)
        self.assertEqual(os.path.basename(hits[0].filename), os.path.basename(__file__))

    def test_operator_forms(self):
        for product in (
            lambda a, b: a @ b,
            lambda a, b: a * b,
        ):
            a, b = self._risky_pair()
            with warnings.catch_warnings(record=True) as w:
                warnings.simplefilter("always")
                product(a, b)
            self._assert_reported_here(w)

    def test_in_place_operator_forms(self):
        a, b = self._risky_pair()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            a @= b
        self._assert_reported_here(w)

        a, b = self._risky_pair()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            a *= b
        self._assert_reported_here(w)

    def test_method_forms(self):
        a, b = self._risky_pair()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            a.matmul(b)
        self._assert_reported_here(w)

        a, b = self._risky_pair()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            a.mul(b)
        self._assert_reported_here(w)
