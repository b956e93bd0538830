"""Creative Scale - strategy decisions, render plan compilation and engine routing for video ads"""

__version__ = "0.3.0"
