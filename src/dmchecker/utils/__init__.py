"""Nostr identifier codec and the relay feed.

The utils layer sits in the middle of the diamond DAG, depending on
[dmchecker.models][dmchecker.models]. It provides the low-level codec and
network helpers used by [dmchecker.services][dmchecker.services].

Attributes:
    keys: ``npub1`` bech32 decoding/encoding and validation of
        caller-supplied identities.
    feed: Concurrent WebSocket collection of DM events from relays with a
        shared deadline.

Note:
    Unlike the nips layer, utils raises the typed errors from
    [dmchecker.core.exceptions][dmchecker.core.exceptions] so that
    identity and connectivity failures reach the caller already
    classified. Nothing here imports ``dmchecker.services``.

Examples:
    ```python
    from dmchecker.utils.keys import normalize_identity
    from dmchecker.utils.feed import collect_dm_events
    ```
"""
