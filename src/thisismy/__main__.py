import sys

from thisismy.cli import main

sys.exit(main())
