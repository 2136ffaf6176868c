"""Main CLI entry point for objstore commands."""

import click

from objstore.cli.commands import storage
from objstore.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="objstore")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """objstore - S3-compatible object storage from the command line.

    \b
    Configuration is read from the environment:
      STORAGE_ENDPOINT     S3-compatible endpoint (empty for AWS S3)
      STORAGE_ACCESS_KEY   Access key ID
      STORAGE_SECRET_KEY   Secret access key
      STORAGE_BUCKET       Target bucket
      STORAGE_REGION       Signing region (default: us-east-1)
      LOG_LEVEL            Log level (default: INFO)

    \b
    Quick Start:
      objstore storage info
      objstore storage upload invoice-42 ./scan.pdf
      objstore storage list-urls invoice-42/
    """
    ctx.ensure_object(dict)
    setup_logging()


cli.add_command(storage.storage)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
