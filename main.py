import sys

from url2pdf.cli import main

if __name__ == "__main__":
    sys.exit(main())
