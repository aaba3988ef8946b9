"""czmanager command line interface."""
