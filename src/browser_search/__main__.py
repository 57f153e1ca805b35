import sys

from browser_search.cli import main

sys.exit(main())
