import enlighten

# prevent name shadowing
__enumerate = enumerate

def iterate(iterable):
    return Progress(iterable)

def enumerate(iterable):
    return __enumerate(iterate(iterable))

class Progress:
    def __init__(self, iterable):
        try:
            total = len(iterable)
        except (TypeError, AttributeError):
            total = None

        self.iterable = iterable
        self.manager = enlighten.get_manager()
        self.pbar = self.manager.counter(total=total)

    def __iter__(self):
        for item in self.iterable:
            yield item
            self.pbar.update()
        self.manager.stop()


class Counter:
    """A progress bar driven by ``(done, total)`` callbacks from worker threads."""

    def __init__(self, description=None):
        self.manager = enlighten.get_manager()
        self.description = description
        self.pbar = None

    def __call__(self, done, total):
        if self.pbar is None:
            self.pbar = self.manager.counter(total=total, desc=self.description)
        self.pbar.count = done
        self.pbar.refresh()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.manager.stop()
        return False
