"""Bridge layer between modelsync and the message transport.

Modules
-------
transport
    The ``Transport`` protocol the publisher and subscriber depend on, and
    ``LocalTransport``, a bounded in-memory or SQLite-backed queue used for
    tests, single-host deployments and the CLI.

Broker clients live outside this package; anything with ``publish(topic,
payload, attributes)`` and ``on_receive(handler)`` plugs in directly.
"""

from modelsync.bridge.transport import LocalTransport, MessageHandler, Transport

__all__ = ["LocalTransport", "MessageHandler", "Transport"]
