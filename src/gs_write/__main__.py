import sys

from gs_write.cli import main

sys.exit(main())
