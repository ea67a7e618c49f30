"""Allow ``python -m stiff``."""

from stiff.cli import main

main()
