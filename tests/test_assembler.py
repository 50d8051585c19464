"""Unit tests for result assembly and numeric helpers."""

import logging

import pytest

from payroll_anomaly.alerts import (
    NON_ROBUST_ADVISORY,
    AlertAssembler,
    deviation_percentage,
    direction,
    normalize_to_fraction,
    safe_round,
)
from payroll_anomaly.models import ALERT, NORMAL, ArimaForecast, ArimaModel, Direction, GroupKey


@pytest.fixture
def key() -> GroupKey:
    """Create a test group key."""
    return GroupKey("CASHIER", "Commission amount", 3050, "SUR", 2)


@pytest.fixture
def model() -> ArimaModel:
    """Create a fitted-looking model."""
    return ArimaModel(
        p=1,
        d=1,
        q=0,
        ar_coefficients=(0.3,),
        ma_coefficients=(),
        intercept=0.5,
        aic=123.456,
        bic=130.0,
        residual_std_error=5.0,
        adjusted_r2=0.4,
        residual_variance=25.0,
        observation_count=29,
        was_differenced=True,
        original_mean=95.0,
        residuals=(0.0,) * 28,
    )


@pytest.fixture
def forecast() -> ArimaForecast:
    """Create a forecast of 100 with interval [90, 110]."""
    return ArimaForecast(point=100.0, lower=90.0, upper=110.0, standard_error=5.1, confidence_level=0.95)


class TestDeviationPercentage:
    """Tests for the deviation magnitude."""

    def test_within_is_zero(self) -> None:
        """Test values inside the interval."""
        assert deviation_percentage(7.0, 5.0, 10.0) == 0.0

    def test_at_bound_is_zero(self) -> None:
        """Test values exactly on a bound."""
        assert deviation_percentage(10.0, 5.0, 10.0) == 0.0
        assert deviation_percentage(5.0, 5.0, 10.0) == 0.0

    def test_above(self) -> None:
        """Test distance past the upper bound relative to the width."""
        assert deviation_percentage(12.0, 5.0, 10.0) == 40.0

    def test_below_is_negative(self) -> None:
        """Test distance past the lower bound."""
        assert deviation_percentage(4.0, 5.0, 10.0) == -20.0

    def test_clamped(self) -> None:
        """Test the clamp at +/-1000."""
        assert deviation_percentage(1000.0, 5.0, 10.0) == 1000.0
        assert deviation_percentage(-1000.0, 5.0, 10.0) == -1000.0

    def test_zero_width(self) -> None:
        """Test a degenerate interval."""
        assert deviation_percentage(6.0, 5.0, 5.0) == 1000.0
        assert deviation_percentage(4.0, 5.0, 5.0) == -1000.0

    def test_direction(self) -> None:
        """Test the side of the interval."""
        assert direction(4.0, 5.0, 10.0) is Direction.BELOW
        assert direction(10.0, 5.0, 10.0) is Direction.WITHIN
        assert direction(11.0, 5.0, 10.0) is Direction.ABOVE


class TestArimaAssembly:
    """Tests for AlertAssembler.build_arima_result."""

    @pytest.fixture
    def assembler(self) -> AlertAssembler:
        """Create an assembler with the default robustness cutoff."""
        return AlertAssembler()

    def test_out_of_range_above(
        self, assembler: AlertAssembler, key: GroupKey, forecast: ArimaForecast, model: ArimaModel
    ) -> None:
        """Test a value above the interval."""
        result = assembler.build_arima_result(key, "202530", 115.0, forecast, model, 30)

        assert result.out_of_range is True
        assert result.severity is ALERT
        assert result.direction is Direction.ABOVE
        assert result.deviation_percentage == 25.0
        assert result.distance_se == 2.94
        assert result.interval_width == 20.0
        assert result.model_notation == "ARIMA(1,1,0)"
        assert result.aic == 123.46

    def test_on_bound_is_in_range(
        self, assembler: AlertAssembler, key: GroupKey, forecast: ArimaForecast, model: ArimaModel
    ) -> None:
        """Test the single-condition interval test at the bound."""
        result = assembler.build_arima_result(key, "202530", 110.0, forecast, model, 30)

        assert result.out_of_range is False
        assert result.severity is NORMAL
        assert result.direction is Direction.WITHIN
        assert result.deviation_percentage == 0.0

    def test_robustness(
        self, assembler: AlertAssembler, key: GroupKey, forecast: ArimaForecast, model: ArimaModel
    ) -> None:
        """Test the robust-model flag and advisory."""
        robust = assembler.build_arima_result(key, "202530", 100.0, forecast, model, 12)
        fragile = assembler.build_arima_result(key, "202530", 100.0, forecast, model, 11)

        assert robust.robust_model is True
        assert robust.advisory is None
        assert fragile.robust_model is False
        assert fragile.advisory == NON_ROBUST_ADVISORY

    def test_custom_robustness_cutoff(
        self, key: GroupKey, forecast: ArimaForecast, model: ArimaModel
    ) -> None:
        """Test a stricter robustness requirement."""
        assembler = AlertAssembler(robust_model_periods=24)

        result = assembler.build_arima_result(key, "202530", 100.0, forecast, model, 20)

        assert result.robust_model is False

    def test_rounding(
        self, assembler: AlertAssembler, key: GroupKey, model: ArimaModel
    ) -> None:
        """Test output precision."""
        forecast = ArimaForecast(
            point=100.123456, lower=90.111111, upper=110.135801, standard_error=5.106789, confidence_level=0.95
        )

        result = assembler.build_arima_result(key, "202530", 100.0, forecast, model, 30)

        assert result.forecast == 100.12
        assert result.lower_bound == 90.11
        assert result.upper_bound == 110.14
        assert result.standard_error == 5.1068

    def test_invalid_cutoff(self) -> None:
        """Test that the robustness cutoff must be positive."""
        with pytest.raises(ValueError):
            AlertAssembler(robust_model_periods=0)


class TestNumbers:
    """Tests for numeric helpers."""

    def test_safe_round_non_finite(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that NaN and infinities become 0.0 with a warning."""
        with caplog.at_level(logging.WARNING):
            assert safe_round(float("nan"), 2, "forecast") == 0.0
            assert safe_round(float("inf"), 2) == 0.0

        assert "forecast" in caplog.text

    def test_safe_round(self) -> None:
        """Test regular rounding."""
        assert safe_round(1.23456, 2) == 1.23
        assert safe_round(1.23456, 4) == 1.2346

    def test_normalize_to_fraction(self) -> None:
        """Test percentage normalization."""
        assert normalize_to_fraction(85.0) == 0.85
        assert normalize_to_fraction(0.5) == 0.5
        assert normalize_to_fraction(-150.0) == -1.5
        assert normalize_to_fraction(1.0) == 1.0
