"""
harvest_forecaster.reporting — forecast formatting and export.

Modules:
  formatters — ASCII terminal tables for Typer CLI commands.
  export     — CSV/JSON flat-file export helpers.
"""
