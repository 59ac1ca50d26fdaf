from __future__ import annotations

import typer

from .commands import request_cmd, settings_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="mailwire",
        help="mailwire CLI",
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")
    for verb in request_cmd.QUERY_VERBS:
        app.command(verb)(request_cmd.query_command(verb))
    for verb in request_cmd.BODY_VERBS:
        app.command(verb)(request_cmd.body_command(verb))
    app.command("upload")(request_cmd.upload)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
