from __future__ import annotations

from syncstore.ui.cli import run

run()
