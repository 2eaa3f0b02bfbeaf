"""Allow ``python -m donow``."""

from .cli import main

main()
