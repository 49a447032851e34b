"""Package entry point for ``python -m slack_relay``.

WHY: Operators start the relay with ``python -m slack_relay``. Python's
``-m`` flag looks for ``__main__.py`` inside the package and executes it.

HOW: Delegates to the CLI's main() function.
"""

from slack_relay.cli import main

if __name__ == "__main__":
    main()
