"""
StarChain - CLI Package
=========================
Command line interface (typer).
"""
