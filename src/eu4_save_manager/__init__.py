"""EU4 Save Manager - Save game backup and editing tool for Europa Universalis IV.

This application provides:
    - Content-addressed backups of save files, with restore and retention cleanup
    - Decoding of the binary save metadata (date, player tag, version, DLC, mods)
    - In-place renaming of the player tag and country name in a save
    - Automatic backup when the loaded save file changes on disk

The application uses CustomTkinter for its GUI and stores configuration
in %APPDATA%/EU4SaveManager.

Package Structure:
    app: Main application entry point and orchestrator
    config: Configuration management, paths, schemas, and path validation
    core: Binary metadata decoding, field patching, archives, backups, sessions
    gui: User interface components (main window, settings dialog, widgets)

Quick Start:
    Run from command line::

        python -m eu4_save_manager [path/to/save.eu4] [--debug]

    Or programmatically::

        from eu4_save_manager.core import read_save_meta
        meta = read_save_meta(Path("autosave.eu4"))
        print(meta.player_tag, meta.date)

Configuration:
    - Config file: %APPDATA%/EU4SaveManager/configuration.xml
    - Log file: %APPDATA%/EU4SaveManager/eu4_save_manager.log
    - Backups: %APPDATA%/EU4SaveManager/backups/<save name>/<md5>.eu4
"""

__version__ = "1.0.0"
__app_name__ = "EU4 Save Manager"
