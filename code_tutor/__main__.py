import sys

from code_tutor.cli import main

if __name__ == "__main__":
    sys.exit(main())
