"""Core engine: auctions, ledger interface, storage, configuration"""
