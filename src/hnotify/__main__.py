"""Allow ``python -m hnotify``."""

from hnotify.cli.main import cli


cli()
