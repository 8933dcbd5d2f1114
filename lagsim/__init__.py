"""Discrete-event simulation of lag compensation in relayed lockstep netplay."""

from lagsim.config import ClientConfig, SimulationConfig
from lagsim.duration import Duration
from lagsim.simulation import Simulation, SimulationSummary

__all__ = ["ClientConfig", "Duration", "Simulation", "SimulationConfig", "SimulationSummary"]
