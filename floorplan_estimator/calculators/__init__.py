"""
Deterministic calculation engine.

Pure Python math. No AI, no I/O.
Given a calibrated floor-plan analysis and project settings, produce
material quantities and costs for the structure and for every room.
"""
