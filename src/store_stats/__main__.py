import sys

from store_stats.cli import main

sys.exit(main())
