"""Allow ``python -m uvsphere``."""

from uvsphere.cli import main

main()
