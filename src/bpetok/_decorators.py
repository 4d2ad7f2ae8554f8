"""Decorators shared by the training code."""

import time
import functools
import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .trainer import Trainer
    from .types import MergeRule

log = logging.getLogger(__name__)


def log_training(
    train: "Callable[..., list[MergeRule]]",
) -> "Callable[..., list[MergeRule]]":
    """
    Log how many merge rules a training run learned and how long it took.

    The wrapped method must belong to a :class:`~bpetok.trainer.Trainer` and
    return the learned merge rules.
    """

    @functools.wraps(train)
    def wrapper(trainer: "Trainer", *args, **kwargs) -> "list[MergeRule]":
        start = time.perf_counter()
        merges = train(trainer, *args, **kwargs)
        elapsed = time.perf_counter() - start

        log.info(
            f"learned {len(merges)}/{trainer.max_merges} merge rules "
            f"in {elapsed:.2f} s ({elapsed / 60:.2f} mins)"
        )
        return merges

    return wrapper
