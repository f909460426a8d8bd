import sys

from actiontools.purge.cli import main

sys.exit(main())
