"""Entry point: delegates to CLI app (serve, init-db, import-records, export-day)."""

from rich.traceback import install

from uid_ops.cli import app


def run() -> None:
    install(show_locals=False, max_frames=5, word_wrap=True)
    app()


if __name__ == "__main__":
    run()
