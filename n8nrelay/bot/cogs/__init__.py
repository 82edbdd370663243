"""Cogs loaded by RelayBot."""
