"""Allow running decom-status with ``python -m decom_status``."""

from decom_status.app.cli import main

if __name__ == "__main__":
    main()
