"""ATM System: a console banking terminal over a small account ledger."""

__version__ = "0.1.0"
