import sys

from one_picgo.cli import main

sys.exit(main())
