from tqdm import tqdm


class TqdmProgress:
    """Progress sink for ``TSPHeldKarp`` backed by a tqdm bar on a 0-100 scale."""
    def __init__(self, desc="Held-Karp", **kwargs):
        self.bar = tqdm(total=100, desc=desc, unit="%", **kwargs)

    def update(self, percent):
        # solver reports absolute positions, tqdm counts increments
        step = percent - self.bar.n
        if step > 0:
            self.bar.update(step)

    def set_message(self, text):
        self.bar.set_postfix_str(text)

    def finish(self, text):
        self.update(100)
        self.bar.set_postfix_str(text)
        self.bar.close()
