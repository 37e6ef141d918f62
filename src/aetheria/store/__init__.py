"""Session store: workspaces, sessions, messages, connections, presets.

State is an immutable :class:`~aetheria.store.models.AppState` snapshot.
Pure reducers in :mod:`aetheria.store.reducers` derive new snapshots, and
:class:`~aetheria.store.state.SessionStore` swaps them in, persists them,
and notifies subscribers.
"""
