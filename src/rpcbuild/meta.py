# src/rpcbuild/meta.py
"""Program identity, shared by logging, env lookups and display."""

PROGRAM_PACKAGE = "rpcbuild"
PROGRAM_DISPLAY = "RPC Build"
PROGRAM_ENV = "RPCBUILD"
