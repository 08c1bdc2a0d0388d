"""Entry point for ``python -m movie_browser``."""

import sys

from movie_browser.cli import main

sys.exit(main())
