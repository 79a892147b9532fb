# src/bootloss/losses/bootstrap.py
"""
Bootstrap loss for training on noisy labels.

The target at each position blends the (possibly wrong) label with what the
network currently believes:

    c_k  = beta * [k == noisy] + (1 - beta) * belief_k
    loss = -sum_k c_k * log(prob_k)

belief_k is [k == argmax(prob)] in hard mode and prob_k in soft mode.
beta=1 is plain softmax cross-entropy, beta=0 trusts only the model.

Reference: "Training Deep Neural Networks on Noisy Labels with Bootstrapping"
(Reed et al., ICLR Workshop 2015)
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import BootstrapParam
from ..core.registry import Registry, default_ops
from ..core.tensor import Tensor
from ..core.utils import as_outer_class_inner, one_hot, split_extents
from ..errors import ConfigurationError, LabelError, LifecycleError
from . import Loss, LossOut
from .reductions import normalizer
from .utils import safe_log

logger = logging.getLogger(__name__)


class LayerState(Enum):
    UNCONFIGURED = "unconfigured"
    SHAPE_BOUND = "shape_bound"        # after reshape
    EVALUATED = "evaluated"            # after forward, caches valid
    GRADIENT_READY = "gradient_ready"  # after backward


class BootstrapLoss(Loss):
    """
    Loss layer taking bottom = [predictions, noisy labels] and producing
    top = [loss] or [loss, probabilities].

    predictions  (..., C, ...) scores with the classes on param.axis
    labels       one value per (outer, inner) position, e.g. (N, H, W) for (N, C, H, W)
    """
    type = "BootstrapLoss"

    def __init__(self, param: Union[BootstrapParam, Mapping, None] = None, ops: Optional[Registry] = None):
        if param is None:
            param = BootstrapParam()
        elif isinstance(param, Mapping):
            param = BootstrapParam.from_dict(param)
        self.param = param
        self.ops = ops if ops is not None else default_ops()

        self.softmax = None
        self.argmax = None
        self.prob: Optional[np.ndarray] = None       # softmax of the predictions
        self.predicted: Optional[np.ndarray] = None  # argmax of prob along the class axis

        self.axis: Optional[int] = None
        self.outer_num = 0
        self.num_classes = 0
        self.inner_num = 0
        self.valid_count = 0
        self.state = LayerState.UNCONFIGURED

    def setup(self, bottom: Sequence[Tensor], top: Sequence[Tensor]) -> None:
        self._check_arity(bottom, top)
        # validates the axis before anything is built
        bottom[0].canonical_axis_index(self.param.axis)
        self.softmax = self.ops.create("Softmax")
        self.argmax = self.ops.create("ArgMax", top_k=1)
        logger.debug(
            "%s setup: axis=%d ignore_label=%s normalize=%s hard_mode=%s beta=%g",
            self.type, self.param.axis, self.param.ignore_label,
            self.param.normalize, self.param.hard_mode, self.param.beta,
        )
        self.reshape(bottom, top)

    def reshape(self, bottom: Sequence[Tensor], top: Sequence[Tensor]) -> None:
        if self.softmax is None:
            raise LifecycleError(f"{self.type}: reshape() called before setup()")
        self._check_arity(bottom, top)
        predictions, labels = bottom
        self.axis = predictions.canonical_axis_index(self.param.axis)
        self.outer_num, self.num_classes, self.inner_num = split_extents(predictions.shape, self.axis)
        if self.outer_num * self.inner_num != labels.size:
            logger.error(
                "%s: %d labels for %d x %d predictions",
                self.type, labels.size, self.outer_num, self.inner_num,
            )
            raise ConfigurationError(
                "Number of labels must match number of predictions; "
                f"e.g., if softmax axis == 1 and prediction shape is (N, C, H, W), "
                f"label count (number of labels) must be N*H*W, "
                f"with integer values in {{0, 1, ..., C-1}}. "
                f"Got {labels.size} labels for predictions of shape {predictions.shape}."
            )
        self.softmax.configure(predictions.shape, self.axis)
        self.argmax.configure(self.softmax.output_shape, self.axis)

        top[0].reshape(())
        if len(top) >= 2:
            # softmax output
            top[1].reshape_like(predictions)

        self.prob = None
        self.predicted = None
        self.state = LayerState.SHAPE_BOUND
        logger.debug(
            "%s reshape: outer=%d classes=%d inner=%d",
            self.type, self.outer_num, self.num_classes, self.inner_num,
        )

    def forward(self, bottom: Sequence[Tensor], top: Sequence[Tensor]) -> float:
        if self.state is LayerState.UNCONFIGURED:
            raise LifecycleError(f"{self.type}: forward() called before reshape()")
        predictions, labels = bottom
        # both caches are recomputed from scratch
        self.prob = self.softmax.compute(predictions.data)
        self.predicted = self.argmax.compute(self.prob)

        prob, target, valid = self._bootstrap_target(labels.data)
        per_position = -np.sum(target * safe_log(prob), axis=1)
        self.valid_count = int(np.count_nonzero(valid))
        total = float(np.sum(per_position[valid]))
        if self.valid_count == 0:
            logger.warning("%s: every label in the batch is ignored, loss is 0", self.type)

        loss = total / normalizer(self.param.normalize, self.valid_count, self.outer_num)
        top[0].data[...] = loss
        if len(top) >= 2:
            top[1].data[...] = self.prob
        self.state = LayerState.EVALUATED
        return loss

    def backward(self, top: Sequence[Tensor], propagate_down: Sequence[bool], bottom: Sequence[Tensor]):
        if len(propagate_down) > 1 and propagate_down[1]:
            logger.error("%s: backward requested into the label input", self.type)
            raise ConfigurationError(f"{self.type} Layer cannot backpropagate to label inputs.")
        if self.state not in (LayerState.EVALUATED, LayerState.GRADIENT_READY):
            raise LifecycleError(f"{self.type}: backward() called before forward()")
        if not propagate_down[0]:
            return None

        prob, target, valid = self._bootstrap_target(bottom[1].data)
        # d loss / d logit_k = prob_k - c_k, starting from a copy of the probabilities
        grad = prob.copy()
        grad -= target
        grad *= valid[:, None, :]
        valid_count = int(np.count_nonzero(valid))

        loss_weight = 1.0 if top[0].grad is None else float(np.asarray(top[0].grad).reshape(-1)[0])
        grad *= loss_weight / normalizer(self.param.normalize, valid_count, self.outer_num)

        bottom_diff = bottom[0].ensure_grad()
        bottom_diff[...] = grad.reshape(bottom_diff.shape)
        self.state = LayerState.GRADIENT_READY
        return bottom_diff

    def _bootstrap_target(self, labels) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Returns (prob, c, valid) with prob and c shaped (outer, classes, inner)
        and valid an (outer, inner) mask of the non-ignored positions.
        """
        param = self.param
        prob = as_outer_class_inner(self.prob, self.axis)
        # labels are stored as reals, truncate like an int cast
        noisy = np.asarray(labels, dtype=float).reshape(self.outer_num, self.inner_num).astype(np.int64)
        if param.has_ignore_label:
            valid = noisy != param.ignore_label
        else:
            valid = np.ones(noisy.shape, dtype=bool)

        out_of_range = valid & ((noisy < 0) | (noisy >= self.num_classes))
        if out_of_range.any():
            bad = int(noisy[out_of_range][0])
            logger.error("%s: label %d outside [0, %d)", self.type, bad, self.num_classes)
            raise LabelError(f"label {bad} is outside [0, {self.num_classes})")

        noisy = np.where(valid, noisy, 0)
        if param.hard_mode:
            predicted = self.predicted.reshape(self.outer_num, self.inner_num)
            belief = one_hot(predicted, self.num_classes)
        else:
            belief = prob
        target = param.beta * one_hot(noisy, self.num_classes) + (1.0 - param.beta) * belief
        return prob, target, valid

    def _check_arity(self, bottom, top):
        if len(bottom) != 2:
            raise ConfigurationError(
                f"{self.type} takes 2 bottoms (predictions, labels), got {len(bottom)}"
            )
        if not 1 <= len(top) <= 2:
            raise ConfigurationError(
                f"{self.type} produces 1 or 2 tops (loss[, probabilities]), got {len(top)}"
            )


def bootstrap_loss(
    logits,
    labels,
    *,
    axis: int = 1,
    beta: float = 0.95,
    hard_mode: bool = False,
    ignore_label: Optional[int] = None,
    normalize: bool = True,
    return_grad: bool = False,
    loss_weight: float = 1.0,
    ops: Optional[Registry] = None,
) -> LossOut:
    layer = BootstrapLoss(
        BootstrapParam(
            axis=axis,
            ignore_label=ignore_label,
            normalize=normalize,
            hard_mode=hard_mode,
            beta=beta,
        ),
        ops=ops,
    )
    return layer(logits, labels, return_grad=return_grad, loss_weight=loss_weight)
