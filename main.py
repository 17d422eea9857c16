"""
Reunify - Photo Reunification Desktop App
=========================================

Main entry point. Opens the editor, or, when started with a locket link,
the read-only view of a shared memory.

    python main.py
    python main.py --open "https://reunify.app/#locket-eyJtZWRpYVVybCI6..."

The Gemini API key is read from GEMINI_API_KEY (or API_KEY) when a
generation is attempted.
"""

import argparse
import logging
import os
import sys

# ============================================================================
# PYTHONW COMPATIBILITY - NULL STREAM SAFETY
# ============================================================================
# Under pythonw.exe, sys.stdout and sys.stderr are None, which breaks
# logging.StreamHandler. Replace them with devnull wrappers.
if sys.stdout is None:
    sys.stdout = open(os.devnull, 'w')
if sys.stderr is None:
    sys.stderr = open(os.devnull, 'w')

from reunify.utils.logger import setup_logging, shutdown_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="reunify", description="Reunify two photos into one shared moment.")
    parser.add_argument("--open", dest="locket_link", metavar="LINK",
                        help="Open a shared locket link in read-only mode")
    parser.add_argument("--share-url", metavar="URL",
                        help="Page URL used when building locket links")
    parser.add_argument("--debug", action="store_true", help="Show DEBUG output on the console")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Application entry point.

    1. Configures logging before any UI import.
    2. Reads the startup locket link once.
    3. Creates the main window and runs the Tk event loop.
    """
    args = parse_args(argv)
    setup_logging(console_level=logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        logger.info("Initializing Reunify application")
        logger.info(f"Python version: {sys.version}")

        from reunify.core.locket import load_shared_locket
        from reunify.utils.config_manager import load_config
        from reunify.ui.app import App

        shared = load_shared_locket(args.locket_link)

        app_config = load_config()
        if args.share_url:
            app_config.share_base_url = args.share_url

        app = App(shared=shared, app_config=app_config)
        logger.info("Application window created successfully")
        app.mainloop()

    except Exception as e:
        logger.critical(f"Fatal error in main application: {e}", exc_info=True)
        raise
    finally:
        logger.info("Application shutdown")
        shutdown_logging()


if __name__ == "__main__":
    main()
