"""Tests for game configuration models."""

import pytest
from pydantic import ValidationError

from src.iolab.models.demand import DemandType
from src.iolab.models.game_config import (
    CompetitionMode,
    FixedSpec,
    GameConfiguration,
    LinearDemandSpec,
    LognormalSpec,
    NormalSpec,
    UniformSpec,
    VariationScope,
    central_value,
    is_random,
)
from tests.utils import create_sample_cournot_config


class TestParameterSpecs:
    """Test parameter specifications."""

    def test_numbers_become_fixed_specs(self) -> None:
        """Test that bare numbers are accepted as fixed values."""
        spec = LinearDemandSpec(intercept=120, slope=2.5)

        assert spec.intercept == FixedSpec(value=120.0)
        assert spec.slope == FixedSpec(value=2.5)

    def test_discriminated_union(self) -> None:
        """Test that the type tag selects the specification."""
        spec = LinearDemandSpec(
            intercept={"type": "uniform", "min": 90, "max": 110},
            slope={"type": "lognormal", "mean": 1.0, "std_dev": 0.2},
        )

        assert isinstance(spec.intercept, UniformSpec)
        assert isinstance(spec.slope, LognormalSpec)

    def test_uniform_bounds_checked(self) -> None:
        """Test that min must not exceed max."""
        with pytest.raises(ValidationError):
            UniformSpec(min=2.0, max=1.0)

    def test_lognormal_mean_positive(self) -> None:
        """Test that a lognormal mean must be positive."""
        with pytest.raises(ValidationError):
            LognormalSpec(mean=0.0, std_dev=1.0)

    def test_central_values(self) -> None:
        """Test the representative value of each specification."""
        assert central_value(FixedSpec(value=3.0)) == 3.0
        assert central_value(UniformSpec(min=2.0, max=6.0)) == 4.0
        assert central_value(NormalSpec(mean=5.0, std_dev=1.0)) == 5.0
        assert central_value(LognormalSpec(mean=7.0, std_dev=1.0)) == 7.0

    def test_is_random(self) -> None:
        """Test that only non-fixed specifications are random."""
        assert not is_random(None)
        assert not is_random(FixedSpec(value=1.0))
        assert is_random(NormalSpec(mean=1.0, std_dev=0.0))


class TestGameConfiguration:
    """Test GameConfiguration validation and accessors."""

    def test_defaults(self) -> None:
        """Test the default game."""
        config = GameConfiguration()

        assert config.competition_mode == CompetitionMode.COURNOT
        assert config.num_firms == 2
        assert config.gamma == 1.0
        assert config.demand_type == DemandType.LINEAR
        assert config.variation_scope == VariationScope.FIXED
        assert config.total_rounds == 10
        assert config.num_replications == 1
        assert len(config.firms) == 2

    def test_missing_firms_filled_with_defaults(self) -> None:
        """Test that firms default to c=10, d=0."""
        config = GameConfiguration(num_firms=4, firms=[{"linear_cost": 5.0}])

        assert len(config.firms) == 4
        assert config.firm(1).linear_cost == 5.0
        assert all(config.firm(i).linear_cost == 10.0 for i in (2, 3, 4))
        assert all(f.quadratic_cost == 0.0 for f in config.firms)
        assert config.firm_ids == [1, 2, 3, 4]

    def test_too_many_firm_entries_rejected(self) -> None:
        """Test that firm entries beyond num_firms are rejected."""
        with pytest.raises(ValidationError):
            GameConfiguration(num_firms=2, firms=[{}, {}, {}])

    @pytest.mark.parametrize("num_firms", [1, 11])
    def test_firm_count_limits(self, num_firms) -> None:
        """Test that between 2 and 10 firms are allowed."""
        with pytest.raises(ValidationError):
            GameConfiguration(num_firms=num_firms)

    @pytest.mark.parametrize("gamma", [-0.1, 1.1])
    def test_gamma_range(self, gamma) -> None:
        """Test that γ must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            GameConfiguration(gamma=gamma)

    @pytest.mark.parametrize(
        "overrides",
        [{"total_rounds": 0}, {"num_replications": 0}],
    )
    def test_counts_positive(self, overrides) -> None:
        """Test that rounds and replications are at least one."""
        with pytest.raises(ValidationError):
            GameConfiguration(**overrides)

    def test_bounds_ordered(self) -> None:
        """Test that min bounds must not exceed max bounds."""
        with pytest.raises(ValidationError):
            GameConfiguration(min_quantity=10.0, max_quantity=5.0)
        with pytest.raises(ValidationError):
            GameConfiguration(min_price=10.0, max_price=5.0)

    def test_unknown_field_rejected(self) -> None:
        """Test that unexpected keys are an error."""
        with pytest.raises(ValidationError):
            GameConfiguration(unknown_option=True)

    def test_demand_variant_by_type(self) -> None:
        """Test that each demand tag selects its own coefficients."""
        config = GameConfiguration(
            demand={"type": "logit", "intercept": 50.0, "price_coefficient": 5.0}
        )

        assert config.demand_type == DemandType.LOGIT
        assert config.demand.coefficient_names() == ["intercept", "price_coefficient"]

    def test_demand_numbers_coerced_inside_union(self) -> None:
        """Test that bare demand numbers work when the form is chosen by tag."""
        config = GameConfiguration(
            demand={"type": "constant_elasticity", "scale": 80, "elasticity": 1.5}
        )

        assert config.demand_type == DemandType.CONSTANT_ELASTICITY
        assert config.demand.scale == FixedSpec(value=80.0)
        assert config.demand.elasticity == FixedSpec(value=1.5)

    def test_unknown_demand_type_rejected(self) -> None:
        """Test that the demand tag itself is not coerced."""
        with pytest.raises(ValidationError):
            GameConfiguration(demand={"type": "quadratic", "intercept": 1.0})

    def test_demand_coefficients_of_other_form_rejected(self) -> None:
        """Test that coefficients of another form are not accepted."""
        with pytest.raises(ValidationError):
            GameConfiguration(demand={"type": "exponential", "slope": 1.0})

    def test_frozen(self) -> None:
        """Test that a built configuration cannot be changed."""
        config = GameConfiguration()

        with pytest.raises(ValidationError):
            config.gamma = 0.5  # type: ignore[misc]

    def test_demand_overrides_detected(self) -> None:
        """Test has_firm_demand_overrides."""
        plain = GameConfiguration(**create_sample_cournot_config())
        override = GameConfiguration(
            **create_sample_cournot_config(firms=[{"demand_slope": 2.0}])
        )

        assert not plain.has_firm_demand_overrides
        assert override.has_firm_demand_overrides
        assert override.firm(1).demand_slope == FixedSpec(value=2.0)

    def test_communication_active(self) -> None:
        """Test that communication needs both the flag and a message count."""
        assert not GameConfiguration(communication={"enabled": True}).communication.active
        assert GameConfiguration(
            communication={"enabled": True, "messages_per_round": 2}
        ).communication.active

    def test_json_round_trip(self) -> None:
        """Test that a dumped configuration validates back to itself."""
        config = GameConfiguration(
            **create_sample_cournot_config(
                gamma_spec={"type": "uniform", "min": 0.2, "max": 0.8},
                variation_scope="per_round",
            )
        )

        assert GameConfiguration.model_validate(config.model_dump(mode="json")) == config
