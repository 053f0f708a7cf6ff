"""
Herb Passport Ledger - provenance records for harvested herbs.

Schema Version: herb-passport/v1
"""

__version__ = "0.1.0"
__schema__ = "herb-passport/v1"

# Status stamped on every newly created record
INITIAL_STATUS = "Submitted"
