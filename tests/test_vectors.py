"""Tests for BoundedVector and IncreasingVector.

Tests the increment reparameterization including:
- Forward transform: monotone, bounded, top element pinned at ub
- Inverse fidelity for reachable targets
- Two-phase construction (set_pvector)
- fix_values switching calibration off
- Decreasing vectors and the length-1 case
"""

import logging

import numpy as np
import pytest
from hypothesis import given, strategies as st, assume

from modelparams import (
    DX_NAME,
    BoundedVector,
    IncreasingVector,
    NotMonotoneError,
    ObjectId,
    OutOfBoundsError,
    SizeMismatchError,
    bounded_increments,
    bounded_values,
    make_guess,
    set_params_from_guess,
)


def _bv(dx=(0.3, 0.2, 0.5), lb=1.0, ub=2.0, is_increasing=True, calibrated=True):
    bv = BoundedVector(ObjectId.root("bv"), lb=lb, ub=ub, is_increasing=is_increasing, dx=list(dx))
    bv.set_pvector(description="Gradient", symbol="g(x)", is_calibrated=calibrated)
    return bv


class TestForwardTransform:
    """Tests for the increments -> values map."""

    def test_example(self):
        """Test the documented example."""
        bv = _bv()
        np.testing.assert_allclose(bv.values(), [1.3, 1.5, 2.0])

    def test_normalizes_by_total(self):
        """Test increments are relative shares of the range."""
        np.testing.assert_allclose(bounded_values(np.array([1.0, 1.0]), 0.0, 4.0), [2.0, 4.0])

    def test_all_zero_falls_back_to_even_spacing(self):
        """Test zero increments give evenly spaced values."""
        np.testing.assert_allclose(bounded_values(np.zeros(4), 0.0, 1.0), [0.25, 0.5, 0.75, 1.0])

    def test_non_finite_increments_give_nan(self, caplog):
        """Test NaN increments from an optimizer are not hidden by even spacing."""
        bv = _bv()
        set_params_from_guess(bv, [0.3, np.nan, 0.5])
        with caplog.at_level(logging.WARNING):
            vals = bv.values()
        assert np.isnan(vals).all()
        assert "Non-finite increments" in caplog.text

    def test_decreasing(self):
        """Test decreasing vectors reverse the increasing sequence."""
        bv = _bv(is_increasing=False)
        np.testing.assert_allclose(bv.values(), [2.0, 1.5, 1.3])

    def test_length_one(self):
        """Test the single-element case."""
        bv = _bv(dx=[0.4])
        np.testing.assert_allclose(bv.values(), [2.0])

    def test_subset(self):
        """Test selecting elements by index, slice or index array."""
        bv = _bv()
        assert bv.values(1) == pytest.approx(1.5)
        np.testing.assert_allclose(bv.values(slice(0, 2)), [1.3, 1.5])
        np.testing.assert_allclose(bv.values([0, 2]), [1.3, 2.0])

    def test_values_recomputed(self):
        """Test values follow the current increments, not a cache."""
        bv = _bv()
        first = bv.values()
        bv.change_value(DX_NAME, [0.5, 0.0, 0.5])
        np.testing.assert_allclose(first, [1.3, 1.5, 2.0])
        np.testing.assert_allclose(bv.values(), [1.5, 1.5, 2.0])

    @given(
        dx=st.lists(st.floats(min_value=0.0, max_value=1.0), min_size=1, max_size=15),
        lb=st.floats(min_value=-100.0, max_value=100.0),
        width=st.floats(min_value=1e-3, max_value=100.0),
    )
    def test_monotone_and_bounded(self, dx, lb, width):
        """Property: any increments in [0, 1] give a monotone sequence ending at ub."""
        assume(sum(dx) > 0)
        ub = lb + width
        vals = bounded_values(np.array(dx), lb, ub)
        tol = 1e-9 * max(1.0, abs(lb), abs(ub))
        assert np.all(np.diff(vals) >= -tol)
        assert vals[-1] == ub
        assert np.all(vals >= lb - tol)
        assert np.all(vals <= ub + tol)


class TestInverseTransform:
    """Tests for target values -> increments."""

    def test_inverse_formula(self):
        """Test increments are scaled successive differences."""
        np.testing.assert_allclose(bounded_increments([1.3, 1.5, 2.0], 1.0, 2.0), [0.3, 0.2, 0.5])

    def test_not_monotone_raises(self):
        """Test direction violations are rejected."""
        with pytest.raises(NotMonotoneError, match="not increasing"):
            bounded_increments([1.5, 1.3, 2.0], 1.0, 2.0)
        with pytest.raises(NotMonotoneError, match="not decreasing"):
            bounded_increments([1.5, 1.7, 1.0], 1.0, 2.0, is_increasing=False)

    def test_out_of_bounds_raises(self):
        """Test targets must lie in [lb, ub]."""
        with pytest.raises(OutOfBoundsError):
            bounded_increments([0.5, 1.5, 2.0], 1.0, 2.0)
        with pytest.raises(OutOfBoundsError):
            bounded_increments([1.5, 2.5], 1.0, 2.0)

    def test_non_finite_raises(self):
        """Test NaN targets are rejected."""
        with pytest.raises(ValueError, match="finite"):
            bounded_increments([1.5, np.nan], 1.0, 2.0)

    @given(
        raw=st.lists(st.floats(min_value=0.01, max_value=1.0), min_size=1, max_size=12),
        lb=st.floats(min_value=-10.0, max_value=10.0),
        width=st.floats(min_value=0.1, max_value=10.0),
        is_increasing=st.booleans(),
    )
    def test_inverse_fidelity(self, raw, lb, width, is_increasing):
        """Property: reachable targets are reproduced by the forward map."""
        ub = lb + width
        target = bounded_values(np.array(raw), lb, ub, is_increasing)
        dx = bounded_increments(target, lb, ub, is_increasing)
        np.testing.assert_allclose(bounded_values(dx, lb, ub, is_increasing), target, atol=1e-9 * width)


class TestSetPvector:
    """Tests for two-phase construction."""

    def test_set_pvector_adds_single_param(self):
        """Test the registry holds exactly the dx parameter."""
        bv = _bv()
        assert bv.pvector.names() == [DX_NAME]
        p = bv.pvector[DX_NAME]
        assert p.description == "Gradient"
        assert p.symbol == "g(x)"
        assert p.is_calibrated
        np.testing.assert_array_equal(p.default_value, [0.3, 0.2, 0.5])
        np.testing.assert_array_equal(p.lb, [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(p.ub, [1.0, 1.0, 1.0])
        assert bv.n == 3

    def test_requires_dx(self):
        """Test set_pvector needs increments first."""
        bv = BoundedVector(ObjectId.root("bv"), lb=0.0, ub=1.0)
        assert len(bv.pvector) == 0
        with pytest.raises(ValueError, match="dx must be set"):
            bv.set_pvector()

    def test_requires_dx_in_unit_interval(self):
        """Test increments must lie in [0, 1]."""
        bv = BoundedVector(ObjectId.root("bv"), lb=0.0, ub=1.0, dx=[0.5, 1.5])
        with pytest.raises(ValueError, match=r"dx must lie in \[0, 1\]"):
            bv.set_pvector()

    def test_set_pvector_twice_replaces(self):
        """Test re-initializing keeps a single entry."""
        bv = _bv()
        bv.set_pvector(description="Other", is_calibrated=False)
        assert len(bv.pvector) == 1
        assert not bv.pvector[DX_NAME].is_calibrated

    def test_invalid_bounds_raise(self):
        """Test lb must be below ub."""
        with pytest.raises(ValueError, match="must be <"):
            BoundedVector(ObjectId.root("bv"), lb=2.0, ub=1.0, dx=[0.5])

    def test_guess_contains_increments(self):
        """Test the calibrated quantity is the increment array."""
        bv = _bv()
        guess = make_guess(bv)
        np.testing.assert_allclose(guess.values, [0.3, 0.2, 0.5])
        set_params_from_guess(bv, [0.1, 0.1, 0.2])
        np.testing.assert_allclose(bv.values(), [1.25, 1.5, 2.0])


class TestDefaultsAndFixing:
    """Tests for set_default_value and fix_values."""

    def test_set_default_value(self):
        """Test targets become default and current increments."""
        bv = _bv()
        bv.set_default_value([1.1, 1.6, 2.0])
        np.testing.assert_allclose(bv.values(), [1.1, 1.6, 2.0])
        np.testing.assert_allclose(bv.pvector[DX_NAME].default_value, [0.1, 0.5, 0.4])
        np.testing.assert_allclose(bv.pvector[DX_NAME].value, [0.1, 0.5, 0.4])
        assert bv.pvector[DX_NAME].is_calibrated

    def test_set_default_value_before_set_pvector(self):
        """Test targets can seed the increments before the registry exists."""
        bv = BoundedVector(ObjectId.root("bv"), lb=0.0, ub=1.0)
        bv.set_default_value([0.2, 0.7, 1.0])
        bv.set_pvector()
        np.testing.assert_allclose(bv.values(), [0.2, 0.7, 1.0])

    def test_set_default_value_decreasing(self):
        """Test decreasing targets."""
        bv = _bv(is_increasing=False)
        bv.set_default_value([2.0, 1.6, 1.1])
        np.testing.assert_allclose(bv.values(), [2.0, 1.6, 1.1])

    def test_set_default_value_errors(self):
        """Test direction, bounds and length violations."""
        bv = _bv()
        with pytest.raises(NotMonotoneError):
            bv.set_default_value([1.6, 1.1, 2.0])
        with pytest.raises(OutOfBoundsError):
            bv.set_default_value([0.5, 1.6, 2.0])
        with pytest.raises(SizeMismatchError):
            bv.set_default_value([1.5, 2.0])
        np.testing.assert_allclose(bv.values(), [1.3, 1.5, 2.0])

    def test_unreachable_target_warns(self, caplog):
        """Test targets below ub at the top are flagged."""
        bv = _bv()
        with caplog.at_level(logging.WARNING):
            bv.set_default_value([1.1, 1.2, 1.4])
        assert "below ub" in caplog.text
        assert bv.values()[-1] == 2.0

    def test_fix_values(self):
        """Test fixing switches calibration off and reproduces targets."""
        bv = _bv()
        bv.fix_values([1.2, 1.2, 2.0])
        p = bv.pvector[DX_NAME]
        assert not p.is_calibrated
        np.testing.assert_allclose(bv.values(), [1.2, 1.2, 2.0])
        np.testing.assert_allclose(p.default_value, p.value)
        assert len(make_guess(bv)) == 0

    def test_fix_values_without_pvector(self):
        """Test fixing creates the dx parameter when missing."""
        bv = BoundedVector(ObjectId.root("bv"), lb=0.0, ub=10.0)
        bv.fix_values([2.0, 10.0])
        assert not bv.pvector[DX_NAME].is_calibrated
        np.testing.assert_allclose(bv.values(), [2.0, 10.0])


class TestIncreasingVector:
    """Tests for IncreasingVector."""

    def test_values(self):
        """Test start value plus cumulative increments."""
        iv = IncreasingVector(ObjectId.root("iv"), 1.0, [0.5, 0.0, 2.0])
        np.testing.assert_allclose(iv.values(), [1.0, 1.5, 1.5, 3.5])
        assert iv.n == 4
        assert iv.values(-1) == pytest.approx(3.5)

    def test_calibrated_through_guess(self):
        """Test x0 and increments are calibrated and guess updates values."""
        iv = IncreasingVector(ObjectId.root("iv"), 1.0, [0.5, 0.5], x0_bounds=(0.0, 5.0))
        guess = make_guess(iv)
        assert [(s.param_name, s.element_index) for s in guess.layout] == [("x0", 0), ("dx", 0), ("dx", 1)]
        set_params_from_guess(iv, [2.0, 1.0, 0.0])
        np.testing.assert_allclose(iv.values(), [2.0, 3.0, 3.0])

    def test_negative_increment_rejected(self):
        """Test increments are bounded below by zero."""
        with pytest.raises(OutOfBoundsError):
            IncreasingVector(ObjectId.root("iv"), 1.0, [0.5, -0.1])
