"""ReaderFirst command-line interface."""
