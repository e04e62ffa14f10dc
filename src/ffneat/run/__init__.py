"""
NEAT Run Package

This package holds the run-time configuration of a population.

Exported Classes:
    Config: Configuration parameters, parsed from an INI file
"""

from ffneat.run.config import Config

__all__ = ['Config']
