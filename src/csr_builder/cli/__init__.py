"""CLI module for the CSR builder."""
