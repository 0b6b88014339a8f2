"""Run the consistency demonstration: ``python -m user_store``."""

import sys

from user_store.application.bootstrap import main

sys.exit(main())
