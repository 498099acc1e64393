"""Command-line interface for the oligopoly laboratory.

``iolab-equilibrium`` prints the analytical benchmarks of a linear market
described on the command line. ``iolab-simulate`` plays a whole game with a
built-in decision provider and prints the game summary.
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from .economics.equilibrium import compute_benchmarks
from .game.orchestrator import GameOrchestrator
from .game.providers import BestResponseProvider, EquilibriumProvider
from .models.equilibria import Benchmarks
from .models.results import Summary
from .validation.economic_validation import (
    EconomicValidationError,
    parse_configuration,
    validate_configuration,
)


def parse_values(values_str: str, label: str) -> List[float]:
    """Parse a comma-separated string into a list of floats.

    Args:
        values_str: Comma-separated numbers (e.g., "10,20,30")
        label: Name of the list, used in error messages

    Raises:
        ValueError: If the string is empty or contains a non-number
    """
    if not values_str.strip():
        raise ValueError(f"{label} list cannot be empty")

    try:
        values = [float(x.strip()) for x in values_str.split(",") if x.strip()]
    except ValueError as e:
        raise ValueError(f"Invalid {label} format '{values_str}': {e}")
    if not values:
        raise ValueError(f"{label} list cannot be empty")
    return values


def _add_market_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=["cournot", "bertrand"],
        default="cournot",
        help="Competition mode (default: cournot)",
    )
    parser.add_argument(
        "--a",
        type=float,
        required=True,
        help="Demand intercept of P = max(0, a - b*Q)",
    )
    parser.add_argument(
        "--b",
        type=float,
        required=True,
        help="Demand slope of P = max(0, a - b*Q)",
    )
    parser.add_argument(
        "--costs",
        type=str,
        required=True,
        help="Comma-separated marginal costs c_i, one per firm (e.g., '10,20')",
    )
    parser.add_argument(
        "--quadratic-costs",
        type=str,
        default=None,
        help="Comma-separated quadratic cost coefficients d_i (default: all 0)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Product differentiation, 1 homogeneous and 0 independent (default: 1)",
    )


def build_config(args: argparse.Namespace, **extra: Any) -> Dict[str, Any]:
    """Translate parsed market arguments into a game configuration dictionary."""
    costs = parse_values(args.costs, "Costs")
    quadratic = (
        parse_values(args.quadratic_costs, "Quadratic costs")
        if args.quadratic_costs
        else [0.0] * len(costs)
    )
    if len(quadratic) != len(costs):
        raise ValueError(
            f"Got {len(costs)} marginal costs but {len(quadratic)} quadratic costs"
        )

    config: Dict[str, Any] = {
        "competition_mode": args.mode,
        "num_firms": len(costs),
        "gamma": args.gamma,
        "demand": {"type": "linear", "intercept": args.a, "slope": args.b},
        "firms": [
            {"linear_cost": c, "quadratic_cost": d} for c, d in zip(costs, quadratic)
        ],
    }
    config.update(extra)
    return config


def format_benchmarks(benchmarks: Benchmarks) -> List[str]:
    """Human-readable lines describing every benchmark."""
    lines = []
    n_poly = benchmarks.n_poly
    lines.append(f"N-firm {n_poly.competition_mode.value} equilibrium:")
    if n_poly.calculable:
        for firm, price in zip(n_poly.firms, n_poly.market_prices):
            lines.append(
                f"  q_{firm.firm_id}={firm.quantity:.4f}, p_{firm.firm_id}={price:.4f}, "
                f"π_{firm.firm_id}={firm.profit:.4f}"
            )
        lines.append(
            f"  Q={n_poly.total_quantity:.4f}, P={n_poly.avg_market_price:.4f}, "
            f"Π={n_poly.total_profit:.4f}"
        )
    else:
        lines.append(f"  not calculable: {n_poly.message}")

    if benchmarks.nash is not None:
        nash = benchmarks.nash
        lines.append("Two-firm Cournot-Nash:")
        lines.append(
            f"  q_1={nash.firm1_quantity:.4f}, q_2={nash.firm2_quantity:.4f}, "
            f"P={nash.market_price:.4f}"
        )
    if benchmarks.cooperative is not None:
        coop = benchmarks.cooperative
        lines.append("Cooperative:")
        lines.append(
            f"  q_1={coop.firm1_quantity:.4f}, q_2={coop.firm2_quantity:.4f}, "
            f"P={coop.market_price:.4f}, Π={coop.total_profit:.4f}"
        )
    if benchmarks.nash_error:
        lines.append(f"Two-firm benchmarks unavailable: {benchmarks.nash_error}")

    lines.append(f"Limit pricing: {benchmarks.limit_pricing.message}")
    return lines


def format_summary(summary: Summary) -> List[str]:
    """Human-readable lines describing a game summary."""
    lines = [f"Rounds played: {summary.num_rounds}"]
    for firm in summary.firms:
        line = (
            f"Firm {firm.firm_id}: total profit={firm.total_profit:.4f}, "
            f"avg quantity={firm.avg_quantity:.4f}, avg price={firm.avg_price:.4f}"
        )
        if firm.nash_quantity_deviation is not None:
            line += f", deviation from equilibrium={firm.nash_quantity_deviation:.4f}"
        lines.append(line)
    lines.append(f"Average market price: {summary.avg_market_price:.4f}")
    return lines


def equilibrium_main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point printing the analytical benchmarks of a market."""
    parser = argparse.ArgumentParser(
        description="Compute equilibrium benchmarks for a linear oligopoly",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  iolab-equilibrium --a 100 --b 1 --costs 10,10
  iolab-equilibrium --mode bertrand --a 100 --b 1 --costs 10,15,20 --gamma 0.5
        """,
    )
    _add_market_arguments(parser)
    args = parser.parse_args(argv)

    try:
        config = parse_configuration(build_config(args))
        validate_configuration(config)
        benchmarks = compute_benchmarks(config)
    except (ValueError, EconomicValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for line in format_benchmarks(benchmarks):
        print(line)


def simulate_main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point playing a game with a built-in strategy."""
    parser = argparse.ArgumentParser(
        description="Play a repeated oligopoly game with a built-in strategy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  iolab-simulate --a 100 --b 1 --costs 10,10 --rounds 10
  iolab-simulate --a 100 --b 1 --costs 10,20,30 --strategy best-response --initial 5
        """,
    )
    _add_market_arguments(parser)
    parser.add_argument(
        "--rounds", type=int, default=10, help="Rounds per replication (default: 10)"
    )
    parser.add_argument(
        "--replications", type=int, default=1, help="Number of replications (default: 1)"
    )
    parser.add_argument(
        "--strategy",
        choices=["equilibrium", "best-response"],
        default="equilibrium",
        help="Strategy played by every firm (default: equilibrium)",
    )
    parser.add_argument(
        "--initial",
        type=float,
        default=0.0,
        help="Opening move of the best-response strategy (default: 0)",
    )
    args = parser.parse_args(argv)

    if args.strategy == "best-response":
        provider: Any = BestResponseProvider(initial_value=args.initial)
    else:
        provider = EquilibriumProvider()

    try:
        config = build_config(
            args, total_rounds=args.rounds, num_replications=args.replications
        )
        state = asyncio.run(GameOrchestrator(provider).play(config))
    except (ValueError, EconomicValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Game {state.game_id} {state.status.value}")
    if state.summary is not None:
        for line in format_summary(state.summary):
            print(line)


if __name__ == "__main__":
    equilibrium_main()
