"""
Elpris Chat - tool-augmented chat service for Swedish electricity prices.

A language model answers questions about electricity prices directly or,
when it needs exact figures, calls a price-lookup tool over MCP and composes
its answer from the tool's result.
"""

__version__ = "0.1.0"
