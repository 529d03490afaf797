"""UID Ops: warehouse intake records, weekly plans and bin manifests."""
