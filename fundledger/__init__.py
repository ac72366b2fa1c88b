"""Multi-tenant nonprofit fund ledger: accounts, postings, transfers and reimbursements."""

__version__ = "0.1.0"
