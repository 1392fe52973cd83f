import sys

from dit_demo.cli import main

sys.exit(main())
