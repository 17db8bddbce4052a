# voting/__main__.py

import sys

from voting.demo import main

sys.exit(main())
