"""
Command-line layer: the Typer application, Rich formatters and the live session view.
"""
