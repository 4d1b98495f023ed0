import sys

from posada.server import main

sys.exit(main())
