"""Service layer: clients for the portfolio backend."""
