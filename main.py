import sys

from catalog.main import main

if __name__ == "__main__":
    sys.exit(main())
