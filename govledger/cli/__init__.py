"""govledger command line interface."""
