import sys

from db_migrate.init_db import main

sys.exit(main())
