import sys

from caseta_codec.main import main

sys.exit(main())
