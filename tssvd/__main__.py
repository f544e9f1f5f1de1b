import sys

from tssvd.run import main

sys.exit(main())
