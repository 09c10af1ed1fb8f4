"""Allow running as ``python -m statusgate``."""

from statusgate.main import main

if __name__ == "__main__":
    main()
