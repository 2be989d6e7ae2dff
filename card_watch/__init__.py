"""card-watch: credit card expiration tracking for Clover merchant accounts.

Classifies every card on file by how soon it expires, rolls that up per
customer, and decides which customers staff should follow up with.
"""

__version__ = "0.1.0"
