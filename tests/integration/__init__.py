"""
Integration Tests Package for the Parking Allocator

Integration tests drive the wired application: domain, service, ledger,
event bus and the console session together.
"""
