"""Clinic stock ledger: glass and medicine inventory with an audited issuance workflow."""

__version__ = "1.0.0"
