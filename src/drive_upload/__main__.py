import sys

from drive_upload.cli import main

sys.exit(main())
