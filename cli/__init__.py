"""Command line client for the heat recovery dashboard (see ``cli.app``)."""
