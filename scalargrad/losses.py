"""
Scalar loss functions.

Each loss reduces a batch of predictions to a single root Value, so one
``backward`` call reaches every parameter that contributed.
"""


def _total(values):
    out = values[0]
    for v in values[1:]:
        out = out + v
    return out


def mse_loss(predictions, targets):
    """
    Mean squared error: sum((y - yhat)^2) / n.

    Args:
        predictions: Sequence of Values (one per example)
        targets: Sequence of numbers or Values, same length

    Example:
        >>> loss = mse_loss([Value(0.5)], [1.0])  # loss.data = 0.25
    """
    if len(predictions) != len(targets) or not predictions:
        raise ValueError(
            f"need matching non-empty predictions and targets, got "
            f"{len(predictions)} and {len(targets)}")
    errors = [(y - yhat) ** 2 for yhat, y in zip(predictions, targets)]
    return _total(errors) / len(errors)


def hinge_loss(scores, targets, parameters=(), alpha=1e-4):
    """
    Max-margin loss with L2 regularisation:

        mean(relu(1 - y * s)) + alpha * sum(p * p)

    Targets are expected to be +1 / -1.
    """
    if len(scores) != len(targets) or not scores:
        raise ValueError(
            f"need matching non-empty scores and targets, got "
            f"{len(scores)} and {len(targets)}")
    margins = [(1 - y * s).relu() for s, y in zip(scores, targets)]
    data_loss = _total(margins) / len(margins)
    parameters = list(parameters)
    if not parameters:
        return data_loss
    reg_loss = _total([p * p for p in parameters]) * alpha
    return data_loss + reg_loss


def accuracy(scores, targets):
    """Fraction of examples where the score has the sign of the target."""
    if not scores:
        return 0.0
    hits = sum((float(y) > 0) == (s.data > 0) for s, y in zip(scores, targets))
    return hits / len(scores)
