"""Adapters layer for NurseCare.

This module contains output adapters that interface with external systems.
Adapters implement Port interfaces defined in the domain layer.
"""
