"""Allow ``python -m booksearch.cli`` execution."""

import sys

from booksearch.cli.library import main

sys.exit(main())
