import sys

from acsdk.main import main

sys.exit(main())
