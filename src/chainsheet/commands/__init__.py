"""
Command implementations for the chainsheet CLI.

Each module corresponds to a top-level CLI command or group:
- cheatsheet: the full walkthrough (read, send, token read/write/watch)
- native:     block, balance and send for the native currency
- token:      ERC-20 info, balance, transfer and watch
"""
