"""Allow ``python -m card_watch``."""

import sys

from card_watch.cli import main

sys.exit(main())
