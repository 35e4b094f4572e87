from services.estimators import FixedEstimator, RandomEstimator, variance_wastage_rate


def test_seeded_random_estimators_repeat():
    first = RandomEstimator(seed=7)
    second = RandomEstimator(seed=7)
    for _ in range(5):
        assert first.average_rating("Tea", 3) == second.average_rating("Tea", 3)
        assert first.supplier_order_multiplier("Dairy") == second.supplier_order_multiplier("Dairy")


def test_random_estimator_ranges():
    estimator = RandomEstimator(seed=1)
    for _ in range(50):
        assert 4.2 <= estimator.average_rating("Tea", 1) <= 4.8
        assert 8 <= estimator.preparation_time("Tea", 1) <= 18
        assert 85 <= estimator.supplier_reliability("Dairy") <= 100
        assert 1 <= estimator.supplier_delivery_days("Dairy") <= 5
        assert 3.5 <= estimator.supplier_quality("Dairy") <= 5
        assert 10 <= estimator.supplier_order_multiplier("Dairy") < 30


def test_variance_wastage_rate_is_clamped():
    assert variance_wastage_rate([]) == 0
    assert variance_wastage_rate([0, 0]) == 0
    # Perfectly even sales still report the floor of 1%.
    assert variance_wastage_rate([4, 4, 4]) == 1
    # mean 5, variance 25 -> 25 / 5 * 5 = 25, capped at 15.
    assert variance_wastage_rate([10, 0]) == 15
    # mean 2, variance 1 -> 1 / 2 * 5 = 2.5
    assert variance_wastage_rate([1, 3]) == 2.5


def test_fixed_estimator_reports_no_wastage_without_sales():
    estimator = FixedEstimator(wastage=3.0)
    assert estimator.wastage_rate("Tea", []) == 0
    assert estimator.wastage_rate("Tea", [2]) == 3.0
