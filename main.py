import sys
from pathlib import Path

# Allow `python main.py` from a source checkout without installing the package.
SRC_DIR = Path(__file__).resolve().parent / "src"
if SRC_DIR.is_dir() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

try:
    from fontalike.app import main as run
except ImportError as e:
    print("Error: Could not import the FontAlike application.")
    print("Please install the project (pip install -e .) or its dependencies.")
    print(f"Details: {e}")
    sys.exit(1)


def main():
    """
    The main entry point for the FontAlike command line.

    Equivalent to the installed `fontalike` console script.
    """
    sys.exit(run())


if __name__ == '__main__':
    main()
