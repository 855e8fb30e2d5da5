"""
stackdown - tear down Docker swarm stacks.

Removes every service, secret, config and network labelled with a stack,
reports partial failures without stopping, and can wait for the stack's
tasks to finish.
"""

__version__ = "0.1.0"
