"""Pilot module - scripted key-holding flight."""

from .fsm import Autopilot, PilotConfig, PilotMode

__all__ = ["Autopilot", "PilotConfig", "PilotMode"]
