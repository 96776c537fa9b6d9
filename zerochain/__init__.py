"""Blockchain node toolkit: 256-bit integers, accounts, UTXOs, blocks, a JSON-RPC client and a miner."""

__version__ = "0.1.0"