"""Game configuration models.

A GameConfiguration is the single input that describes a market experiment:
the competition mode, the demand system, per-firm cost structures, what each
firm is told, and how structural parameters vary across the game. Every
structural coefficient is a ParameterSpec so it can be fixed or drawn from a
distribution; plain numbers are accepted and treated as fixed values.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .demand import DemandType


class CompetitionMode(str, Enum):
    """Strategic variable chosen by the firms."""

    COURNOT = "cournot"
    BERTRAND = "bertrand"


class VariationScope(str, Enum):
    """How often randomized parameters are redrawn."""

    FIXED = "fixed"
    PER_REPLICATION = "per_replication"
    PER_ROUND = "per_round"


# Parameter specifications


class FixedSpec(BaseModel):
    """A parameter that always takes the same value."""

    model_config = ConfigDict(frozen=True)

    type: Literal["fixed"] = "fixed"
    value: float


class UniformSpec(BaseModel):
    """A parameter drawn uniformly from [min, max]."""

    model_config = ConfigDict(frozen=True)

    type: Literal["uniform"] = "uniform"
    min: float = 0.0
    max: float = 1.0

    @model_validator(mode="after")
    def check_bounds(self) -> "UniformSpec":
        if self.min > self.max:
            raise ValueError(f"uniform min ({self.min}) must not exceed max ({self.max})")
        return self


class NormalSpec(BaseModel):
    """A parameter drawn from a normal distribution."""

    model_config = ConfigDict(frozen=True)

    type: Literal["normal"] = "normal"
    mean: float = 0.0
    std_dev: float = Field(default=1.0, ge=0)


class LognormalSpec(BaseModel):
    """A parameter drawn from a lognormal distribution.

    ``mean`` and ``std_dev`` describe the distribution of the drawn value
    itself, not of its logarithm.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["lognormal"] = "lognormal"
    mean: float = Field(default=1.0, gt=0)
    std_dev: float = Field(default=0.5, ge=0)


ParameterSpec = Annotated[
    Union[FixedSpec, UniformSpec, NormalSpec, LognormalSpec],
    Field(discriminator="type"),
]


def fixed(value: float) -> FixedSpec:
    """Shorthand for a fixed parameter specification."""
    return FixedSpec(value=value)


def coerce_spec(value: Any) -> Any:
    """Accept bare numbers wherever a ParameterSpec is expected."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return {"type": "fixed", "value": float(value)}
    return value


def central_value(spec: Union[FixedSpec, UniformSpec, NormalSpec, LognormalSpec]) -> float:
    """Deterministic representative value of a specification."""
    if isinstance(spec, FixedSpec):
        return spec.value
    if isinstance(spec, UniformSpec):
        return (spec.min + spec.max) / 2
    return spec.mean


def is_random(spec: Optional[Union[FixedSpec, UniformSpec, NormalSpec, LognormalSpec]]) -> bool:
    """Whether drawing from the specification can yield different values."""
    return spec is not None and not isinstance(spec, FixedSpec)


# Demand specifications


class _DemandSpecBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def coerce_numbers(cls, data: Any) -> Any:
        """Turn bare numbers into fixed specs; ``type`` is the union tag."""
        if not isinstance(data, dict):
            return data
        return {k: v if k == "type" else coerce_spec(v) for k, v in data.items()}

    def parameter_specs(self) -> List[ParameterSpec]:
        return [getattr(self, name) for name in self.coefficient_names()]

    @classmethod
    def coefficient_names(cls) -> List[str]:
        return [name for name in cls.model_fields if name != "type"]


class LinearDemandSpec(_DemandSpecBase):
    """Linear inverse demand P = a - b*Q."""

    type: Literal["linear"] = "linear"
    intercept: ParameterSpec = FixedSpec(value=100.0)
    slope: ParameterSpec = FixedSpec(value=1.0)


class ConstantElasticityDemandSpec(_DemandSpecBase):
    """Isoelastic inverse demand P = A * Q^(-1/σ)."""

    type: Literal["constant_elasticity"] = "constant_elasticity"
    scale: ParameterSpec = FixedSpec(value=100.0)
    elasticity: ParameterSpec = FixedSpec(value=2.0)


class LogitDemandSpec(_DemandSpecBase):
    """Logit-like inverse demand P = a - b*ln(Q)."""

    type: Literal["logit"] = "logit"
    intercept: ParameterSpec = FixedSpec(value=100.0)
    price_coefficient: ParameterSpec = FixedSpec(value=10.0)


class ExponentialDemandSpec(_DemandSpecBase):
    """Exponential inverse demand P = A * e^(-b*Q)."""

    type: Literal["exponential"] = "exponential"
    scale: ParameterSpec = FixedSpec(value=100.0)
    decay_rate: ParameterSpec = FixedSpec(value=0.01)


DemandSpec = Annotated[
    Union[
        LinearDemandSpec,
        ConstantElasticityDemandSpec,
        LogitDemandSpec,
        ExponentialDemandSpec,
    ],
    Field(discriminator="type"),
]


# Firms


class InformationDisclosure(BaseModel):
    """What a firm's decision maker is told about the market."""

    model_config = ConfigDict(frozen=True)

    reveal_demand_function: bool = True
    reveal_own_costs: bool = True
    reveal_rival_costs: bool = False
    reveal_rival_identity: bool = True
    describe_rival_as_human: bool = False


class FirmConfig(BaseModel):
    """Cost structure and disclosure settings for one firm.

    Costs follow C(q) = c*q + d*q^2. The optional specs randomize c and d;
    the optional demand overrides give the firm its own linear demand curve.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    linear_cost: float = Field(default=10.0, ge=0, description="Marginal cost c_i")
    quadratic_cost: float = Field(default=0.0, ge=0, description="Quadratic cost d_i")
    linear_cost_spec: Optional[ParameterSpec] = None
    quadratic_cost_spec: Optional[ParameterSpec] = None
    demand_intercept: Optional[ParameterSpec] = None
    demand_slope: Optional[ParameterSpec] = None
    model: str = Field(default="default", description="Decision provider label")
    info: InformationDisclosure = Field(default_factory=InformationDisclosure)

    @field_validator(
        "linear_cost_spec",
        "quadratic_cost_spec",
        "demand_intercept",
        "demand_slope",
        mode="before",
    )
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return coerce_spec(value)

    @property
    def has_demand_override(self) -> bool:
        return self.demand_intercept is not None or self.demand_slope is not None


class CommunicationSettings(BaseModel):
    """Pre-decision messaging between firms."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    messages_per_round: int = Field(default=0, ge=0, le=20)
    prompt: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.enabled and self.messages_per_round > 0


# Game


class GameConfiguration(BaseModel):
    """Complete, immutable description of a game."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    competition_mode: CompetitionMode = CompetitionMode.COURNOT
    num_firms: int = Field(default=2, ge=2, le=10)
    gamma: float = Field(default=1.0, ge=0, le=1, description="Product differentiation")
    gamma_spec: Optional[ParameterSpec] = None
    demand: DemandSpec = Field(default_factory=LinearDemandSpec)
    firms: List[FirmConfig] = Field(default_factory=list)

    total_rounds: int = Field(default=10, ge=1)
    num_replications: int = Field(default=1, ge=1)
    communication: CommunicationSettings = Field(default_factory=CommunicationSettings)

    min_quantity: Optional[float] = Field(default=None, ge=0)
    max_quantity: Optional[float] = Field(default=None, ge=0)
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)

    variation_scope: VariationScope = VariationScope.FIXED
    custom_system_prompt: Optional[str] = None
    custom_round_prompt: Optional[str] = None

    @field_validator("gamma_spec", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return coerce_spec(value)

    @model_validator(mode="before")
    @classmethod
    def fill_firms(cls, data: Any) -> Any:
        """Pad the firm list with default firms up to num_firms."""
        if not isinstance(data, dict):
            return data
        num_firms = data.get("num_firms", 2)
        firms = list(data.get("firms") or [])
        if isinstance(num_firms, int) and len(firms) < num_firms:
            firms.extend({} for _ in range(num_firms - len(firms)))
            data = {**data, "firms": firms}
        return data

    @model_validator(mode="after")
    def check_consistency(self) -> "GameConfiguration":
        if len(self.firms) != self.num_firms:
            raise ValueError(
                f"Expected {self.num_firms} firm entries, got {len(self.firms)}"
            )
        if (
            self.min_quantity is not None
            and self.max_quantity is not None
            and self.min_quantity > self.max_quantity
        ):
            raise ValueError("min_quantity must not exceed max_quantity")
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price must not exceed max_price")
        return self

    @property
    def demand_type(self) -> DemandType:
        return DemandType(self.demand.type)

    def firm(self, firm_id: int) -> FirmConfig:
        """Configuration of a firm by its 1-based id."""
        return self.firms[firm_id - 1]

    @property
    def firm_ids(self) -> List[int]:
        return list(range(1, self.num_firms + 1))

    @property
    def has_firm_demand_overrides(self) -> bool:
        return any(firm.has_demand_override for firm in self.firms)
