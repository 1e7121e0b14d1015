"""Allow running the application with ``python -m eu4_save_manager``."""

from .app import main

main()
