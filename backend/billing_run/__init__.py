"""Monthly FastBill billing run: finalize and e-mail draft invoices."""

__version__ = "0.1.0"
