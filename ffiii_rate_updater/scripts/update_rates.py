"""CLI entry point for updating Firefly III exchange rates."""

from __future__ import annotations

from ffiii_rate_updater.cli import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    raise SystemExit(main())
