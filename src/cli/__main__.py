# =============================================================================
# src/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables running the CLI package itself as a module:
#     python -m src.cli --bot 7 list
#
# Delegates to the training-set CLI (trainset.py).
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.trainset import main

main()
