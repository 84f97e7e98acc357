import sys

from tsdb_loadgen.main import main

sys.exit(main())
