"""
FitForge - adaptive fitness questionnaire engine.

Walks a user through a branching question graph (goal sub-graphs,
injury-specific pain-trigger follow-ups) and accumulates a typed Profile
for workout plan generation.
"""

__version__ = "0.1.0"
