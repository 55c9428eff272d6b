"""
AutoBettor - scan, evaluate, act. One wager per tick, at most.

An autonomous betting engine for virtual football: it watches the odds
board on a schedule, looks for value prices and hot teams, and only lets a
bet through when the daily limits say it can afford it.
"""

__version__ = "0.1.0"
