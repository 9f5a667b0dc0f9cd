"""
Address watch package.

Polls the signature feed of a set of addresses and notifies subscribers of
newly observed transactions.
"""

from solwatch.watchline.watcher import AddressWatcher, TransactionCallback, select_new_signatures

__all__ = ["AddressWatcher", "TransactionCallback", "select_new_signatures"]
