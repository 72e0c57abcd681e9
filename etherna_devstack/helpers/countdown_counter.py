class CountdownCounterKeeper:
    """Counts attempts; ``max_retries=None`` never runs out."""

    def __init__(self, max_retries: int | None):
        self._count = 1
        self._max_retries = max_retries

    def tick(self):
        self._count += 1

    def is_done(self):
        if self._max_retries is None:
            return False
        return self._count > self._max_retries
