"""CLI package for ledgerkit."""
