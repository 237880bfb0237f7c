"""Request pipeline internals: interceptors, headers, query encoding, dispatch."""
