"""Command line interface for the audiobook catalog.

* :mod:`catalog.cli.args` builds the argparse parser with one sub-command per
  library operation (``scan``, ``status``, ``history``, ``stats``, ``validate``).
* :mod:`catalog.cli.library_commands` executes a parsed namespace against a
  :class:`~catalog.library.LibraryScanner` and returns the exit status.
* :mod:`catalog.cli.orchestrator` wires logging and dispatch together for the
  ``main.py`` shim and the ``audiobook-catalog`` console script.
"""

from . import args, library_commands, orchestrator

__all__ = ["args", "library_commands", "orchestrator"]
