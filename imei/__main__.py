"""Allow ``python -m imei``."""

from imei.main import cli

cli()
