"""modelsync core — registry, matching, dispatch, reconciliation and emission.

The inbound path is ``Subscriber`` -> ``Dispatcher`` (``matcher.match``) ->
direct handler or ``Reconciler``.  The outbound path is ``Publisher`` ->
``emitter.build_envelope`` -> transport.  ``SyncContext`` wires both paths
around one ``Registry``.
"""
