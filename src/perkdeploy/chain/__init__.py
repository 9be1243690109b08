"""
Chain - artifact loading, ABI encoding, JSON-RPC and transaction submission.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
