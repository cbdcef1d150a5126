import sys

from darkfibre.main import main

sys.exit(main())
