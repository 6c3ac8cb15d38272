import time

from tqdm import tqdm


class Timer:
    def __init__(self):
        self.timers = {}

    def start(self, name: str):
        self.timers[name] = time.time()

    def stop(self, name: str):
        if name not in self.timers:
            raise Exception("Timer not started")
        self.timers[name] = time.time() - self.timers[name]
        return self.timers[name]

    def finish(self, loud=False):
        if loud:
            tqdm.write("timers:")
            for key in self.timers:
                tqdm.write(f"{key}: {self.timers[key]:.2f}s")
        return self.timers
