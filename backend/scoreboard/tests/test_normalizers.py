"""
Normalization Tests
===================
Tests for per-dimension score normalization.
"""

import os
import sys

import numpy as np

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scoreboard.scoring.normalizers import (
    DimensionNormalizer,
    ScalingError,
    TARGET_MOMENT,
    MAX_ERROR,
    RESCALE_BOUND,
    rescale,
    transform,
    mean_of_squares,
    moment_error,
    search_parameter,
    normalize_dimension,
)


def _mean_of_squares(values):
    return sum(v * v for v in values) / len(values)


# More than two thirds of the values sit exactly on the midpoint, so no
# exponent can lift the mean of squares to 1/3
ADVERSARIAL = [5.0] * 8 + [0.0, 10.0]


# =============================================================================
# BUILDING BLOCK TESTS
# =============================================================================

def test_rescale_bounds():
    """Minimum maps to -2/3, maximum to 2/3, midpoint to 0."""
    rescaled = rescale(np.array([2.0, 4.0, 6.0]))

    assert abs(rescaled[0] + RESCALE_BOUND) < 1e-12
    assert rescaled[1] == 0.0
    assert abs(rescaled[2] - RESCALE_BOUND) < 1e-12

    print("[PASS] Rescale bounds test passed")


def test_transform_zero_stays_zero():
    """Zero maps to zero for every exponent, including p = 0."""
    values = np.array([0.0, 0.5, -0.5])

    at_zero = transform(values, 0.0)
    assert list(at_zero) == [0.0, 1.0, -1.0]

    for t in (0.1, 0.5, 0.9):
        assert transform(values, t)[0] == 0.0

    print("[PASS] Transform zero test passed")


def test_mean_of_squares_decreases_with_parameter():
    """The transformed mean of squares falls as t grows."""
    values = rescale(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))

    moments = [mean_of_squares(transform(values, t)) for t in (0.1, 0.3, 0.5, 0.7, 0.9)]
    assert all(a > b for a, b in zip(moments, moments[1:]))

    print("[PASS] Monotonic moment test passed")


def test_mean_of_squares_sums_left_to_right():
    """Small squares after a huge one are absorbed one at a time."""
    # 1e16 + 1 rounds back to 1e16, so every later 1.0 is lost in order;
    # pairwise summation would add the ones up first
    values = np.array([1e8] + [1.0] * 15)

    assert mean_of_squares(values) == 1e16 / 16
    assert mean_of_squares([0.5, -0.5]) == 0.25

    print("[PASS] Left-to-right moment test passed")


def test_search_parameter_matches_closed_form():
    """[1, 2, 3] rescales to [-2/3, 0, 2/3]; (4/9)^p = 1/2 at the target."""
    values = rescale(np.array([1.0, 2.0, 3.0]))
    t = search_parameter(values)

    expected_p = np.log(2.0) / np.log(9.0 / 4.0)
    expected_t = 1.0 - np.exp(-expected_p)

    assert abs(t - expected_t) < 1e-5
    assert moment_error(values, t) < 1e-5

    print("[PASS] Closed form search test passed")


# =============================================================================
# NORMALIZER TESTS
# =============================================================================

def test_degenerate_input_gives_zeros():
    """A constant sequence normalizes to all zeros."""
    normalizer = DimensionNormalizer()

    assert normalizer.normalize([3.0, 3.0, 3.0]) == [0.0, 0.0, 0.0]
    assert normalizer.normalize([7]) == [0.0]

    result = normalizer.normalize_with_details([4.5] * 6)
    assert result.degenerate is True
    assert result.parameter is None

    print("[PASS] Degenerate input test passed")


def test_empty_input():
    """An empty sequence normalizes to an empty sequence."""
    assert DimensionNormalizer().normalize([]) == []
    print("[PASS] Empty input test passed")


def test_target_moment_reached():
    """Hand-picked distributions end within tolerance of the target moment."""
    distributions = [
        [1, 2, 3],
        [1, 2, 3, 4, 5],
        [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        [1, 1, 1, 1, 2, 10],
        [0, 10, 10, 10, 10],
        [1, 1, 1, 9, 9, 9],
        [3, 4],
        [-2.5, 0.1, 0.2, 0.3, 7.25],
    ]

    normalizer = DimensionNormalizer()
    for values in distributions:
        result = normalizer.normalize_with_details(values)
        assert abs(_mean_of_squares(result.values) - TARGET_MOMENT) <= MAX_ERROR, values
        assert result.error <= MAX_ERROR

    print("[PASS] Target moment test passed")


def test_target_moment_reached_on_random_distributions():
    """Seeded synthetic distributions of several shapes all converge."""
    rng = np.random.default_rng(42)
    normalizer = DimensionNormalizer()

    samples = []
    for _ in range(10):
        samples.append(rng.integers(1, 11, size=40).astype(float))
        samples.append(rng.normal(5.0, 2.0, size=50))
        samples.append(rng.exponential(1.0, size=30))
        samples.append(rng.beta(0.5, 0.5, size=25))
        samples.append(rng.uniform(-100.0, 100.0, size=8))

    for values in samples:
        normalized = normalizer.normalize(list(values))
        assert abs(_mean_of_squares(normalized) - TARGET_MOMENT) <= MAX_ERROR

    print(f"[PASS] Random distributions test passed ({len(samples)} samples)")


def test_order_and_length_preserved():
    """Output position i belongs to input position i."""
    values = [5.0, 1.0, 3.0, 4.0, 2.0]
    normalized = DimensionNormalizer().normalize(values)

    assert len(normalized) == len(values)
    by_input = sorted(range(len(values)), key=lambda i: values[i])
    by_output = sorted(range(len(values)), key=lambda i: normalized[i])
    assert by_input == by_output

    print("[PASS] Order preservation test passed")


def test_sign_preserved():
    """Normalized values keep the sign of the rescaled values."""
    values = [1.0, 2.0, 3.0, 2.0, 1.5, 2.5]
    rescaled = rescale(np.array(values))
    normalized = DimensionNormalizer().normalize(values)

    for r, n in zip(rescaled, normalized):
        assert np.sign(r) == np.sign(n)

    # Midpoint stays exactly zero and the extremes stay symmetric
    assert normalized[1] == 0.0
    assert abs(normalized[0] + normalized[2]) < 1e-12

    print("[PASS] Sign preservation test passed")


def test_scaling_error_on_unreachable_target():
    """Too many midpoint values make the target unreachable."""
    try:
        DimensionNormalizer().normalize(ADVERSARIAL)
        assert False, "expected ScalingError"
    except ScalingError as e:
        assert e.error > MAX_ERROR
        assert str(e.error) in str(e)
        assert "too large" in str(e)

    print("[PASS] Scaling error test passed")


def test_scaling_error_is_deterministic():
    """The same input fails with the same error every time."""
    errors = []
    for _ in range(2):
        try:
            normalize_dimension(ADVERSARIAL)
        except ScalingError as e:
            errors.append(e.error)

    assert len(errors) == 2
    assert errors[0] == errors[1]

    print("[PASS] Deterministic failure test passed")


def test_scaling_error_context():
    """with_context keeps the error magnitude and adds rater details."""
    error = ScalingError(0.25).with_context("alice", "mozheng")

    assert error.error == 0.25
    assert error.owner == "alice"
    assert error.dimension == "mozheng"
    assert "alice" in str(error)

    print("[PASS] Scaling error context test passed")


# =============================================================================
# RUN ALL TESTS
# =============================================================================

def run_all_tests():
    """Run all normalization tests."""
    print("\n" + "="*60)
    print("NORMALIZATION TESTS")
    print("="*60 + "\n")

    test_rescale_bounds()
    test_transform_zero_stays_zero()
    test_mean_of_squares_decreases_with_parameter()
    test_mean_of_squares_sums_left_to_right()
    test_search_parameter_matches_closed_form()
    test_degenerate_input_gives_zeros()
    test_empty_input()
    test_target_moment_reached()
    test_target_moment_reached_on_random_distributions()
    test_order_and_length_preserved()
    test_sign_preserved()
    test_scaling_error_on_unreachable_target()
    test_scaling_error_is_deterministic()
    test_scaling_error_context()

    print("\n" + "="*60)
    print("ALL NORMALIZATION TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
