# ABOUTME: CLI module for kion-cli
# ABOUTME: Builds the cleo application with a global --debug option

"""Command-line interface for kion-cli."""

from cleo.application import Application
from cleo.io.inputs.definition import Definition
from cleo.io.inputs.option import Option

from kion_cli import __version__

from .commands import (
    AccessCommand,
    AccountsCommand,
    ConsoleCommand,
    CredentialProcessCommand,
    CredentialsCommand,
    EachCommand,
    KeyCreateCommand,
    KeyRotateCommand,
    LoginCommand,
    LogoutCommand,
    RolesCommand,
    SetupCommand,
)


class KionApplication(Application):
    @property
    def _default_definition(self) -> Definition:
        definition = super()._default_definition
        definition.add_option(Option("--debug", flag=True, description="Log debug output to stderr."))
        return definition


def create_application() -> Application:
    """Create the CLI application."""
    application = KionApplication("kion", __version__)

    # Add commands
    application.add(SetupCommand())
    application.add(LoginCommand())
    application.add(LogoutCommand())
    application.add(KeyCreateCommand())
    application.add(KeyRotateCommand())
    application.add(CredentialsCommand())
    application.add(CredentialProcessCommand())
    application.add(ConsoleCommand())
    application.add(EachCommand())
    application.add(RolesCommand())
    application.add(AccountsCommand())
    application.add(AccessCommand())

    return application


def main():
    """Main entry point for the CLI."""
    application = create_application()
    application.run()


if __name__ == "__main__":
    main()
