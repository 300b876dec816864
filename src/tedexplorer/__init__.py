"""
TED Explorer - Terminal-first search and market analysis over TED notices.

Queries the EU public procurement SPARQL endpoint, pages and exports
results, and tracks saved tenders for market-share calculations.
"""

__version__ = "0.1.0"
__app_name__ = "tedexplorer"
