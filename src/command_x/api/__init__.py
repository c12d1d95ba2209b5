"""HTTP API for payment items, work orders and budgets."""
