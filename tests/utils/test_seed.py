import logging

import numpy as np

from blb_quant.utils import seed as seed_utils


def test_normalize_seed_wraps_into_range():
    assert seed_utils.normalize_seed(-5) == 5
    assert seed_utils.normalize_seed(seed_utils.MAX_SEED_VALUE + 3) == 3


def test_rng_factory_does_not_touch_global_state():
    np.random.seed(0)
    expected = np.random.RandomState(0).rand()

    seed_utils.rng_factory(123).random(10)

    assert np.random.rand() == expected


def test_task_seed_sequences_give_independent_pairs():
    pairs = seed_utils.task_seed_sequences(7, 4)
    assert len(pairs) == 4

    draws = [np.random.default_rng(draw).random() for draw, _ in pairs]
    boots = [np.random.default_rng(boot).random() for _, boot in pairs]
    assert len(set(draws + boots)) == 8

    again = seed_utils.task_seed_sequences(7, 4)
    assert np.random.default_rng(again[2][1]).random() == boots[2]


def test_register_seed_logging(caplog):
    logger = logging.getLogger("seed.tests")
    with caplog.at_level(logging.INFO):
        seed_utils.register_seed_logging(logger, 99)
        seed_utils.register_seed_logging(logger, None)
    assert "99" in caplog.text
    assert "sem seed" in caplog.text
