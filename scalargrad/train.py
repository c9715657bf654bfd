"""
Training loop for scalargrad models.

Each iteration rebuilds the whole graph from the current parameter values:
forward every example, reduce to one loss Value, backpropagate, take an SGD
step, then drop the iteration's nodes. Only parameter values carry over.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from scalargrad.losses import accuracy, hinge_loss, mse_loss
from scalargrad.optim import SGD

logger = logging.getLogger(__name__)

LOSSES = ('mse', 'hinge')


@dataclass
class TrainConfig:
    """Configuration for a training run."""
    learning_rate: float = 0.1
    iterations: int = 100
    loss: str = 'mse'  # 'mse' or 'hinge' (hinge + L2, targets in {-1, +1})
    alpha: float = 1e-4  # L2 weight for the hinge loss
    batch_size: Optional[int] = None  # None means the full dataset every iteration
    log_every: int = 10
    seed: Optional[int] = None  # batch sampling

    def __post_init__(self):
        if self.loss not in LOSSES:
            raise ValueError(f"loss must be one of {LOSSES}, got {self.loss!r}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {self.iterations}")
        if self.batch_size is not None and self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")


@dataclass
class TrainHistory:
    """Per-iteration loss (and accuracy for the hinge loss)."""
    losses: List[float] = field(default_factory=list)
    accuracies: List[float] = field(default_factory=list)

    @property
    def final_loss(self):
        return self.losses[-1] if self.losses else None


class Trainer:
    """
    Drives forward → backward → update cycles on a model.

    Args:
        model: An MLP (anything with ``graph``, ``parameters()`` and a call
            returning a list whose first element is the prediction)
        config: TrainConfig (default: TrainConfig())

    Example:
        >>> model = MLP(2, [3, 1])
        >>> trainer = Trainer(model, TrainConfig(iterations=400))
        >>> history = trainer.fit(xs, ys)
        >>> trainer.predict(xs)
    """

    def __init__(self, model, config=None):
        self.model = model
        self.config = config if config is not None else TrainConfig()
        self.optimizer = SGD(model.parameters(), lr=self.config.learning_rate)
        self._rng = np.random.default_rng(self.config.seed)

    @property
    def graph(self):
        return self.model.graph

    def _batch(self, xs, ys):
        size = self.config.batch_size
        if size is None or size >= len(xs):
            return xs, ys
        idx = self._rng.choice(len(xs), size=size, replace=False)
        return [xs[i] for i in idx], [ys[i] for i in idx]

    def loss(self, xs, ys):
        """Build the loss graph for ``xs``/``ys``; returns (loss, scores)."""
        scores = [self.model(x)[0] for x in xs]
        if self.config.loss == 'hinge':
            loss = hinge_loss(scores, ys, self.model.parameters(), alpha=self.config.alpha)
        else:
            loss = mse_loss(scores, ys)
        return loss, scores

    def step(self, xs, ys):
        """One iteration; returns (loss value, accuracy or None)."""
        mark = self.graph.checkpoint()
        try:
            batch_xs, batch_ys = self._batch(xs, ys)
            loss, scores = self.loss(batch_xs, batch_ys)
            # backward only clears what the loss reaches
            self.optimizer.zero_grad()
            loss.backward()
            self.optimizer.step()
            acc = accuracy(scores, batch_ys) if self.config.loss == 'hinge' else None
            return loss.data, acc
        finally:
            self.graph.release(mark)

    def fit(self, xs, ys):
        """Train on the dataset; returns a TrainHistory."""
        if len(xs) != len(ys) or not xs:
            raise ValueError(f"need matching non-empty xs and ys, got {len(xs)} and {len(ys)}")

        history = TrainHistory()
        for it in range(self.config.iterations):
            loss, acc = self.step(xs, ys)
            history.losses.append(loss)
            if acc is not None:
                history.accuracies.append(acc)
            if self.config.log_every and it % self.config.log_every == 0:
                if acc is None:
                    logger.info("iteration %d: loss %.4f", it, loss)
                else:
                    logger.info("iteration %d: loss %.4f, accuracy %.2f%%", it, loss, acc * 100)
        logger.info("finished %d iterations, final loss %.4f",
                    self.config.iterations, history.final_loss)
        return history

    def predict(self, xs):
        """First model output for each row, as plain floats."""
        mark = self.graph.checkpoint()
        try:
            return [self.model(x)[0].data for x in xs]
        finally:
            self.graph.release(mark)

    def evaluate(self, xs, ys):
        """Loss (and accuracy for hinge) on a dataset without updating."""
        mark = self.graph.checkpoint()
        try:
            loss, scores = self.loss(xs, ys)
            acc = accuracy(scores, ys) if self.config.loss == 'hinge' else None
            return loss.data, acc
        finally:
            self.graph.release(mark)
