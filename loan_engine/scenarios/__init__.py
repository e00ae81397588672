"""Simulation scenarios."""

from loan_engine.scenarios.portfolio import PortfolioSimulation

__all__ = ["PortfolioSimulation"]
