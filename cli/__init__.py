"""Command-line client for the weather station dashboard.

The Typer application is ``cli.app.app``; it is not re-exported here so that
``cli.app`` keeps naming the module.
"""
