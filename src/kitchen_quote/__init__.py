"""
Kitchen Quote Package

Quoting tool for commercial kitchen cleaning jobs.
Converts labor, materials, equipment and hood-cleaning parameters into a
priced quote through a Cost → Markup → Profit pipeline with undo/redo history.
"""

__version__ = "2.4.0"
