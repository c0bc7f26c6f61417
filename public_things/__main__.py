"""Allow ``python -m public_things``."""
import sys

from .cli import main

sys.exit(main())
