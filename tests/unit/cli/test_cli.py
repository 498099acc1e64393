"""Tests for CLI module."""

from argparse import Namespace
from io import StringIO
from unittest.mock import patch

import pytest

from src.iolab.cli import (
    build_config,
    equilibrium_main,
    format_benchmarks,
    parse_values,
    simulate_main,
)
from src.iolab.economics.equilibrium import compute_benchmarks
from src.iolab.validation.economic_validation import parse_configuration
from tests.utils import create_sample_cournot_config, create_sample_nfirm_config


class TestParseValues:
    """Test the parse_values function."""

    def test_parse_values_valid(self) -> None:
        """Test parsing valid comma-separated values."""
        assert parse_values("10, 20,30", "Costs") == [10.0, 20.0, 30.0]

    def test_parse_values_empty(self) -> None:
        """Test that an empty list is rejected."""
        with pytest.raises(ValueError, match="Costs list cannot be empty"):
            parse_values("  ", "Costs")

    def test_parse_values_invalid(self) -> None:
        """Test that non-numbers are rejected."""
        with pytest.raises(ValueError, match="Invalid Costs format"):
            parse_values("10,abc", "Costs")


class TestBuildConfig:
    """Test translating arguments into a configuration."""

    def test_quadratic_costs_must_match(self) -> None:
        """Test that cost lists must have the same length."""
        args = Namespace(
            mode="cournot", a=100.0, b=1.0, costs="10,20", quadratic_costs="1", gamma=1.0
        )

        with pytest.raises(ValueError, match="quadratic costs"):
            build_config(args)


class TestFormatBenchmarks:
    """Test the benchmark report."""

    def test_duopoly_report(self) -> None:
        """Test the lines describing a linear duopoly."""
        config = parse_configuration(create_sample_cournot_config())

        lines = format_benchmarks(compute_benchmarks(config))

        assert lines[0] == "N-firm cournot equilibrium:"
        assert "q_1=30.0000" in lines[1]
        assert "Two-firm Cournot-Nash:" in lines
        assert "Cooperative:" in lines
        assert lines[-1].startswith("Limit pricing:")

    def test_three_firm_report(self) -> None:
        """Test that two-firm benchmarks are reported as unavailable."""
        config = parse_configuration(create_sample_nfirm_config([10.0, 20.0, 30.0]))

        lines = format_benchmarks(compute_benchmarks(config))

        assert any(line.startswith("Two-firm benchmarks unavailable") for line in lines)
        assert "Two-firm Cournot-Nash:" not in lines


class TestEquilibriumMain:
    """Test the equilibrium_main function."""

    def test_equilibrium_main_success(self) -> None:
        """Test printing the benchmarks of a duopoly."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            equilibrium_main(["--a", "100", "--b", "1", "--costs", "10,10"])

        output = mock_stdout.getvalue()
        assert "N-firm cournot equilibrium:" in output
        assert "q_1=30.0000" in output
        assert "P=40.0000" in output

    def test_equilibrium_main_bertrand(self) -> None:
        """Test printing differentiated Bertrand benchmarks."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            equilibrium_main(
                [
                    "--mode",
                    "bertrand",
                    "--a",
                    "100",
                    "--b",
                    "1",
                    "--costs",
                    "10,10",
                    "--gamma",
                    "0.5",
                ]
            )

        output = mock_stdout.getvalue()
        assert "N-firm bertrand equilibrium:" in output
        assert "p_1=40.0000" in output

    def test_equilibrium_main_invalid_costs(self) -> None:
        """Test that malformed costs exit with an error."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            with pytest.raises(SystemExit) as exc_info:
                equilibrium_main(["--a", "100", "--b", "1", "--costs", "10,x"])

        assert exc_info.value.code == 1
        assert "Error:" in mock_stderr.getvalue()

    def test_equilibrium_main_invalid_market(self) -> None:
        """Test that economically invalid markets exit with an error."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            with pytest.raises(SystemExit) as exc_info:
                equilibrium_main(["--a", "-5", "--b", "1", "--costs", "10,10"])

        assert exc_info.value.code == 1
        assert "intercept" in mock_stderr.getvalue()

    def test_equilibrium_main_single_firm(self) -> None:
        """Test that a single firm is not a market."""
        with patch("sys.stderr", new_callable=StringIO):
            with pytest.raises(SystemExit) as exc_info:
                equilibrium_main(["--a", "100", "--b", "1", "--costs", "10"])

        assert exc_info.value.code == 1


class TestSimulateMain:
    """Test the simulate_main function."""

    def test_simulate_equilibrium(self) -> None:
        """Test a simulated game played at equilibrium."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            simulate_main(["--a", "100", "--b", "1", "--costs", "10,10", "--rounds", "4"])

        output = mock_stdout.getvalue()
        assert "completed" in output
        assert "Rounds played: 4" in output
        assert "Firm 1: total profit=3600.0000" in output
        assert "deviation from equilibrium=0.0000" in output

    def test_simulate_best_response_converges(self) -> None:
        """Test that best-response play approaches the Cournot quantity."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            simulate_main(
                [
                    "--a",
                    "100",
                    "--b",
                    "1",
                    "--costs",
                    "10,10",
                    "--rounds",
                    "2",
                    "--replications",
                    "2",
                    "--strategy",
                    "best-response",
                    "--initial",
                    "30",
                ]
            )

        output = mock_stdout.getvalue()
        assert "Rounds played: 4" in output
        assert "avg quantity=30.0000" in output

    def test_simulate_invalid(self) -> None:
        """Test that an invalid game exits with an error."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            with pytest.raises(SystemExit) as exc_info:
                simulate_main(
                    ["--a", "100", "--b", "1", "--costs", "10,10", "--rounds", "0"]
                )

        assert exc_info.value.code == 1
        assert "Error:" in mock_stderr.getvalue()
