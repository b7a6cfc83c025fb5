"""Command dispatch layer.

``commands`` holds the handlers and the static command table, ``dispatcher``
the argparse front end used by the ``devenv`` console script.
"""

__all__ = [
    "commands",
    "dispatcher",
]
