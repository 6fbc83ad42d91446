"""``python -m manhttpd``."""

from manhttpd.cli import main

main()
