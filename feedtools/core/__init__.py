"""
Core application engine for resolving queries and running installations.

The `Pipeline` is the facade a front end talks to. It delegates resolution to
the `GameResolver` and the install sequence to the `ProcessOrchestrator`,
which in turn uses the `Deployer` and a `ProcessControl` implementation.
"""
