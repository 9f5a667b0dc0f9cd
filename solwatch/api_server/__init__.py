"""HTTP API over the analytics services, stores and the address watcher."""
