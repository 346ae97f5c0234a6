"""
Tracker for the last confirmed public message id of the destination channel.
"""


class SequenceTracker:
    """
    Holds the last channel message id Telegram confirmed for a relayed post.

    No lock guards `last`: it is read and written only by the dispatcher
    inside a single drain worker, which sends strictly one item at a time.
    `predict()` is only meaningful under that guarantee; two concurrent
    dispatch passes would both predict the same id. The queue enforces at
    most one active worker, so that never happens.
    """

    def __init__(self, initial: int = 0):
        self._last = initial

    @property
    def last(self) -> int:
        return self._last

    def predict(self) -> int:
        """Id Telegram is expected to assign to the next channel post."""
        return self._last + 1

    def confirm(self, message_id: int) -> None:
        """Record the id Telegram actually assigned."""
        self._last = message_id
