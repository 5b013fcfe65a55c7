import sys

from rostrum.main import main

sys.exit(main())
