import sys

from nvmx.main import main

sys.exit(main())
