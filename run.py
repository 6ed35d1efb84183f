import sys
from pathlib import Path

# Run from a source checkout: src/ goes on the path, no install needed.
SRC = Path(__file__).resolve().parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

if __name__ == "__main__":
    # "python run.py web --world ..." starts the web front end
    if len(sys.argv) > 1 and sys.argv[1] == "web":
        del sys.argv[1]
        from taleloom.webapp import main
    else:
        from taleloom.cli import main
    main()
