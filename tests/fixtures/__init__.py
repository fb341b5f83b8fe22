"""
Test fixtures package for swarmproof tests.

This package provides factory functions for creating test objects:
- common.py: agents, challenges, responses, verifications and scripted
  mock agents for the dispatcher

Usage:
    from fixtures import make_agents, make_scenario_a

    def test_something():
        responses = make_scenario_a()
"""

from .common import (
    FIXED_NOW,
    SCENARIO_B_ANSWERS,
    SCENARIO_B_LATENCIES,
    ScriptedAgents,
    answer_with,
    hang,
    make_agent,
    make_agents,
    make_challenge,
    make_failed_response,
    make_response,
    make_responses,
    make_scenario_a,
    make_scenario_b,
    make_verification,
    refuse_connection,
    status,
)

__all__ = [
    "FIXED_NOW",
    "SCENARIO_B_ANSWERS",
    "SCENARIO_B_LATENCIES",
    "ScriptedAgents",
    "answer_with",
    "hang",
    "make_agent",
    "make_agents",
    "make_challenge",
    "make_failed_response",
    "make_response",
    "make_responses",
    "make_scenario_a",
    "make_scenario_b",
    "make_verification",
    "refuse_connection",
    "status",
]
