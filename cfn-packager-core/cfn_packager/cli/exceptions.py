import typing as t

import click


class CLIError(click.ClickException):
    """An error shown as red message on stderr, optionally followed by a hint how to resolve it."""

    def __init__(self, message: str, hint: t.Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        message = click.style(f"❌ Error: {self.message}", fg="red")
        if self.hint:
            message = f"{message}\n   {self.hint}"
        return message

    def show(self, file: t.Optional[t.IO[t.Any]] = None) -> None:
        click.echo(self.format_message(), file=file, err=file is None)
