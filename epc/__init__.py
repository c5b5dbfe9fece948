"""epc: a terminal document reader that remembers reading positions.

Only ``main`` is exported here; the CLI module is imported on first call so
``import epc`` stays cheap for tests and tooling.
"""

from __future__ import annotations


def main(*args, **kwargs):
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
