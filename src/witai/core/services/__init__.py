"""Servicios del core (operaciones contra la API)."""
