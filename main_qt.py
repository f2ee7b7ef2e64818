# main_qt.py
import sys
from paint_qt.app_qt import main

if __name__ == "__main__":
    sys.exit(main())
