"""Allow ``python -m hintcodec``."""

import sys

from hintcodec.cli import main

sys.exit(main())
