import sys

from subtitlr.cli import main

sys.exit(main())
