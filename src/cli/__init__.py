# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line access to a bot's training set for operators who work
# outside the dashboard / console API. One module today:
#
#   TRAINSET (trainset.py)
#      List documents, add files / text / Q&A / websites / videos,
#      retrain or delete documents, and show or set the retrain schedule.
#
# Architecture Notes:
#   - argparse for argument parsing (not Click/Typer).
#   - The HTTP backend import is deferred until a command runs;
#     execute() also accepts any IContentBackend.
#   - Each invocation builds its own workspace; nothing persists between
#     runs beyond what the backend stores.
# =============================================================================

"""CLI tools for the training-set manager.

- ``python -m src.cli`` -- manage one bot's training set.
"""
