"""
RentBook - Source Package

Record-keeping and rent billing for a small portfolio of flats,
garages and godowns let out on half-yearly terms.

DESIGN PRINCIPLES:
1. Billing rules are pure functions of their inputs
2. Derived values (totals, words, ids) are computed, never stored
3. Storage layer is swappable and injected
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "RentBook Team"
