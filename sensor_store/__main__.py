import sys

from sensor_store.cli import main

sys.exit(main())
