"""devenv: docker-compose dispatcher for the local development stack.

Subcommands map onto docker-compose / docker / git invocations for the api,
front, spring and mailhog services, plus the idempotent bookkeeping around
them (init lock, repository checkouts, sample config files, stale PIDs).
"""

__version__ = "1.0.0"
